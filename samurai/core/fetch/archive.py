"""归档格式识别与解压"""

from __future__ import annotations

import logging
import tarfile
import zipfile
from pathlib import Path

from samurai.core.exceptions import FetchError, UnsupportedArchiveError

logger = logging.getLogger(__name__)

# 顺序有意义: 先匹配双扩展名
SUPPORTED_EXTENSIONS = (".tar.gz", ".tgz", ".tar.bz2", ".tar.xz", ".tar", ".zip")


def archive_extension(filename: str) -> str:
    """返回文件名匹配的归档扩展名（不区分大小写），不支持时抛 UnsupportedArchiveError"""
    lower = filename.lower()
    for ext in SUPPORTED_EXTENSIONS:
        if lower.endswith(ext):
            return ext
    raise UnsupportedArchiveError(
        f"归档格式不支持: {filename}，支持: {', '.join(SUPPORTED_EXTENSIONS)}"
    )


def extract(archive: Path, dest: Path, extension: str) -> None:
    """按扩展名解压 archive 到 dest"""
    dest.mkdir(parents=True, exist_ok=True)
    try:
        if extension == ".zip":
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(path=str(dest))
        else:
            with tarfile.open(archive) as tf:
                tf.extractall(path=str(dest), filter="data")  # noqa: S202
    except (OSError, tarfile.TarError, zipfile.BadZipFile) as e:
        raise FetchError(f"解压失败 {archive.name}: {e}") from e
    logger.info("  已解压: %s -> %s", archive.name, dest)


def single_root_dir(directory: Path) -> Path:
    """返回解压目录下唯一的根文件夹（archiveHasRootDir=true 时使用）"""
    entries = [p for p in directory.iterdir() if not p.name.startswith(".")]
    dirs = [p for p in entries if p.is_dir()]
    if len(entries) != 1 or len(dirs) != 1:
        raise FetchError(
            f"归档解压后应只有一个根目录，实际: {sorted(p.name for p in entries)}"
        )
    return dirs[0]
