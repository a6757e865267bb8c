"""单包生命周期: fetch → patch → configure → build

状态只由文件系统推断（包目录是否存在），不做持久化。
每个阶段在包边界捕获 SamuraiError，记录为该包失败，交由编排器继续处理下一个包。
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from samurai.core.config import Config, get_config
from samurai.core.exceptions import ConfigError, SamuraiError
from samurai.core.fetch import get_fetcher
from samurai.core.models import Package
from samurai.core.paths import is_rooted
from samurai.core.platform import Platform
from samurai.utils.shell import CommandExecutor, get_executor, run_cmd

logger = logging.getLogger(__name__)

STAGES = ("fetch", "patch", "configure", "build")


@dataclass
class StageResult:
    """单包单阶段的执行结果"""

    package: str
    stage: str
    status: str  # "success", "skipped", "failed"
    message: str = ""
    duration: float = 0.0

    @property
    def failed(self) -> bool:
        return self.status == "failed"


class PackageLifecycle:
    """按阶段处理单个包"""

    def __init__(
        self,
        platform: Platform,
        executor: CommandExecutor | None = None,
        config: Config | None = None,
    ) -> None:
        self.platform = platform
        self.executor = executor or get_executor()
        self.config = config or get_config()

    def run_stage(self, stage: str, pkg: Package) -> StageResult:
        """执行指定阶段，SamuraiError 与 OSError 在此转换为 failed 结果"""
        handler: Callable[[Package], str | None] = getattr(self, f"_{stage}")
        start = time.monotonic()
        try:
            skipped = handler(pkg)
        except (SamuraiError, OSError) as e:
            logger.error("[%s] %s 失败: %s", pkg.label, stage, e, extra={"package": pkg.label})
            return StageResult(
                package=pkg.label, stage=stage, status="failed",
                message=str(e), duration=time.monotonic() - start,
            )
        except Exception as e:
            # 非预期错误同样只记为本包失败，保留堆栈
            logger.exception("[%s] %s 异常", pkg.label, stage, extra={"package": pkg.label})
            return StageResult(
                package=pkg.label, stage=stage, status="failed",
                message=f"{type(e).__name__}: {e}", duration=time.monotonic() - start,
            )
        duration = time.monotonic() - start
        if skipped is not None:
            logger.debug("[%s] %s 跳过: %s", pkg.label, stage, skipped)
            return StageResult(
                package=pkg.label, stage=stage, status="skipped",
                message=skipped, duration=duration,
            )
        return StageResult(package=pkg.label, stage=stage, status="success", duration=duration)

    def fetch(self, pkg: Package) -> StageResult:
        return self.run_stage("fetch", pkg)

    def patch(self, pkg: Package) -> StageResult:
        return self.run_stage("patch", pkg)

    def configure(self, pkg: Package) -> StageResult:
        return self.run_stage("configure", pkg)

    def build(self, pkg: Package) -> StageResult:
        return self.run_stage("build", pkg)

    # =====================================================================
    # 阶段实现：返回 None 表示已执行，返回字符串表示跳过原因
    # =====================================================================

    def _fetch(self, pkg: Package) -> str | None:
        if pkg.source is None:
            return "无 source"
        if pkg.package_path.exists():
            return "已存在"
        logger.info("拉取 %s (%s)", pkg.name, pkg.source.type)
        fetcher = get_fetcher(
            pkg.source.type, executor=self.executor,
            git=self.config.git, timeout=self.config.download_timeout,
        )
        fetcher.fetch(pkg)
        return None

    def _patch(self, pkg: Package) -> str | None:
        patch_path = pkg.patch_path
        if patch_path is None:
            return "无 patch"
        logger.info("打补丁 %s: %s", pkg.label, pkg.patch)
        run_cmd(
            [self.config.git, "apply", str(patch_path)],
            cwd=str(pkg.package_path), label="git apply", executor=self.executor,
        )
        return None

    def _configure(self, pkg: Package) -> str | None:
        cmake = pkg.cmake
        if cmake is None:
            return "无 cmake"
        if cmake.is_excluded(self.platform):
            logger.info("%s 在 %s 上排除配置步骤", pkg.label, self.platform.value)
            return f"excludeOS 包含 {self.platform.value}"
        args = cmake.command_args(self.platform)
        working_dir = cmake.resolve_working_dir(pkg.package_path)
        working_dir.mkdir(parents=True, exist_ok=True)
        logger.info("配置 %s: cmake %s", pkg.label, cmake.build_args(self.platform))
        run_cmd(
            [self.config.cmake, *args],
            cwd=str(working_dir), label="cmake", executor=self.executor,
        )
        return None

    def _build(self, pkg: Package) -> str | None:
        if pkg.build is None:
            return "无 build"
        selected = pkg.build.select(self.platform)
        if selected is None:
            return f"没有适用于 {self.platform.value} 的构建条目"
        kind, entry = selected
        if not entry.name:
            raise ConfigError(f"build.{kind}s 条目缺少 name")
        if not entry.working_dir:
            raise ConfigError(f"build.{kind}s 条目 '{entry.name}' 缺少 workingDir")
        if is_rooted(entry.working_dir):
            raise ConfigError(f"build workingDir 必须是相对路径: {entry.working_dir}")

        program = entry.name
        if kind == "script":
            program = str(pkg.context.cwd / entry.name)
        working_dir = pkg.package_path / entry.working_dir
        logger.info("构建 %s: %s %s", pkg.label, entry.name, " ".join(entry.args))
        run_cmd(
            [program, *entry.args],
            cwd=str(working_dir), label=kind, executor=self.executor,
        )
        return None
