"""网络工具: URL 校验与文件下载"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from pathlib import Path
from urllib.parse import unquote, urlparse

from samurai.core.exceptions import FetchError, ValidationError

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = frozenset(("http", "https"))


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https，防止 file:// 等非预期协议访问

    Raises:
        ValidationError: URL scheme 不在白名单内
    """
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        label = f" ({context})" if context else ""
        raise ValidationError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，"
            f"仅支持 http/https: {url}"
        )


def url_filename(url: str) -> str:
    """取 URL 路径中的文件名（忽略 query / fragment）"""
    name = unquote(urlparse(url).path.rstrip("/").rsplit("/", 1)[-1])
    if not name:
        raise ValidationError(f"无法从 URL 解析文件名: {url}")
    return name


def download(url: str, dest: Path, *, timeout: int = 300, context: str = "") -> Path:
    """下载 URL 到 dest，失败时删除不完整文件并抛 FetchError"""
    validate_url_scheme(url, context=context)
    dest.parent.mkdir(parents=True, exist_ok=True)
    logger.info("  下载: %s", url)
    try:
        with urllib.request.urlopen(url, timeout=timeout) as resp:  # nosec B310
            with open(dest, "wb") as f:
                while True:
                    chunk = resp.read(64 * 1024)
                    if not chunk:
                        break
                    f.write(chunk)
    except (urllib.error.HTTPError, urllib.error.URLError, OSError) as e:
        dest.unlink(missing_ok=True)
        raise FetchError(f"下载失败: {url} - {e}") from e
    logger.info("  已保存: %s", dest)
    return dest
