"""来源适配器 - 支持 Git / Archive / File

职责：
- Git 仓库 clone（递归子模块）+ 检出 tag
- 归档下载、解压、去根目录
- 单文件下载

每个适配器只在包目录不存在时被调用（由 lifecycle 保证），失败时清理半成品，
避免留下被误判为"已拉取"的目录。
"""

from __future__ import annotations

import logging
import shutil
import uuid
from typing import TYPE_CHECKING, Protocol

from samurai.core.exceptions import ExecutionError, FetchError, UnsupportedSourceError
from samurai.core.fetch.archive import archive_extension, extract, single_root_dir
from samurai.core.models import Source
from samurai.utils import net
from samurai.utils.shell import CommandExecutor, get_executor, run_cmd

if TYPE_CHECKING:
    from samurai.core.models import Package

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """拉取策略协议"""

    def fetch(self, pkg: Package) -> None:
        """把 pkg 拉取到 pkg.package_path"""
        ...


class GitSource:
    """Git 仓库来源"""

    def __init__(self, executor: CommandExecutor | None = None, git: str = "git") -> None:
        self.executor = executor or get_executor()
        self.git = git

    def fetch(self, pkg: Package) -> None:
        if pkg.source is None:
            raise FetchError(f"依赖 '{pkg.name}' 缺少 source")
        dest = pkg.package_path
        dest.parent.mkdir(parents=True, exist_ok=True)
        try:
            run_cmd(
                [self.git, "clone", "--recursive", pkg.source.url, str(dest)],
                cwd=str(dest.parent), label="git clone", executor=self.executor,
            )
            if pkg.version:
                run_cmd(
                    [self.git, "checkout", f"refs/tags/{pkg.version}"],
                    cwd=str(dest), label="git checkout", executor=self.executor,
                )
        except ExecutionError as e:
            # tag 不存在时 clone 已完成，删除以免下次被视为已拉取
            if dest.exists():
                shutil.rmtree(dest, ignore_errors=True)
            raise FetchError(f"Git 拉取失败 {pkg.name}: {e}") from e
        logger.info("Git 就绪: %s@%s -> %s", pkg.name, pkg.version or "HEAD", dest)


class ArchiveSource:
    """归档来源（.tar.gz / .tgz / .tar.bz2 / .tar.xz / .tar / .zip）"""

    def __init__(self, timeout: int = 300) -> None:
        self.timeout = timeout

    def fetch(self, pkg: Package) -> None:
        if pkg.source is None:
            raise FetchError(f"依赖 '{pkg.name}' 缺少 source")
        url = pkg.source.url
        ext = archive_extension(net.url_filename(url))
        base = pkg.base_path
        dest = pkg.package_path
        base.mkdir(parents=True, exist_ok=True)

        token = uuid.uuid4().hex
        download_path = base / f".{token}{ext}"
        staging = base / f".{token}"
        try:
            net.download(url, download_path, timeout=self.timeout, context=f"archive {pkg.name}")
            if pkg.source.archive_has_root_dir:
                extract(download_path, staging, ext)
                shutil.move(str(single_root_dir(staging)), str(dest))
            else:
                extract(download_path, dest, ext)
        except Exception:
            if dest.exists():
                shutil.rmtree(dest, ignore_errors=True)
            raise
        finally:
            download_path.unlink(missing_ok=True)
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)
        logger.info("归档就绪: %s -> %s", pkg.name, dest)


class FileSource:
    """单文件来源：下载到包目录，保留 URL 中的文件名"""

    def __init__(self, timeout: int = 300) -> None:
        self.timeout = timeout

    def fetch(self, pkg: Package) -> None:
        if pkg.source is None:
            raise FetchError(f"依赖 '{pkg.name}' 缺少 source")
        url = pkg.source.url
        dest_dir = pkg.package_path
        dest_dir.mkdir(parents=True)
        try:
            net.download(
                url, dest_dir / net.url_filename(url),
                timeout=self.timeout, context=f"file {pkg.name}",
            )
        except Exception:
            shutil.rmtree(dest_dir, ignore_errors=True)
            raise
        logger.info("文件就绪: %s -> %s", pkg.name, dest_dir)


def get_fetcher(
    kind: str, *,
    executor: CommandExecutor | None = None,
    git: str = "git",
    timeout: int = 300,
) -> Fetcher:
    """按 source.type 返回拉取策略（大小写敏感）"""
    if kind == Source.GIT:
        return GitSource(executor=executor, git=git)
    if kind == Source.ARCHIVE:
        return ArchiveSource(timeout=timeout)
    if kind == Source.FILE:
        return FileSource(timeout=timeout)
    raise UnsupportedSourceError(
        f"不支持的来源类型: '{kind}'，可选: {', '.join(Source.KINDS)}"
    )
