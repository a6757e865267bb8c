"""生命周期编排器

职责：
- 按声明顺序逐包执行 fetch / patch / configure / build
- self 项目在依赖之后处理（只有 configure / build）
- 单包失败不影响后续包，汇总为 ActionReport（任一失败则退出码为 1）
- 列出/清理 vendor 目录中未声明的残留目录（zombies）
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from samurai.core.config import Config, get_config
from samurai.core.lifecycle import PackageLifecycle, StageResult
from samurai.core.models import Manifest, Package
from samurai.core.platform import Platform
from samurai.utils.shell import CommandExecutor

logger = logging.getLogger(__name__)

ACTIONS = ("fetch", "patch", "configure", "build", "all")


@dataclass
class ActionReport:
    """一次顶层动作的执行报告"""

    action: str
    results: list[StageResult] = field(default_factory=list)

    @property
    def failed(self) -> list[StageResult]:
        return [r for r in self.results if r.failed]

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.results),
            "success": sum(1 for r in self.results if r.status == "success"),
            "skipped": sum(1 for r in self.results if r.status == "skipped"),
            "failed": len(self.failed),
        }


class Orchestrator:
    """顶层动作编排（单线程，严格按清单顺序）"""

    def __init__(
        self,
        manifest: Manifest,
        platform: Platform,
        executor: CommandExecutor | None = None,
        config: Config | None = None,
    ) -> None:
        self.manifest = manifest
        self.platform = platform
        self.lifecycle = PackageLifecycle(platform, executor=executor, config=config or get_config())

    def run(self, action: str, *, self_only: bool = False) -> ActionReport:
        """按名称执行动作（fetch / patch / configure / build / all）"""
        if action == "fetch":
            return self.fetch()
        if action == "patch":
            return self.patch()
        if action == "configure":
            return self.configure(self_only=self_only)
        if action == "build":
            return self.build(self_only=self_only)
        if action == "all":
            return self.all()
        raise ValueError(f"未知动作: {action}，可选: {', '.join(ACTIONS)}")

    def fetch(self) -> ActionReport:
        self.manifest.context.install_root.mkdir(parents=True, exist_ok=True)
        report = ActionReport(action="fetch")
        self._run_stage(report, "fetch", self.manifest.dependencies)
        return self._finish(report)

    def patch(self) -> ActionReport:
        report = ActionReport(action="patch")
        self._run_stage(report, "patch", self.manifest.dependencies)
        return self._finish(report)

    def configure(self, *, self_only: bool = False) -> ActionReport:
        report = ActionReport(action="configure")
        self._run_stage(report, "configure", self._targets(self_only))
        return self._finish(report)

    def build(self, *, self_only: bool = False) -> ActionReport:
        report = ActionReport(action="build")
        self._run_stage(report, "build", self._targets(self_only))
        return self._finish(report)

    def all(self) -> ActionReport:
        """依赖依次 fetch → patch → configure → build，最后 self 的 configure → build"""
        self.manifest.context.install_root.mkdir(parents=True, exist_ok=True)
        report = ActionReport(action="all")
        deps = self.manifest.dependencies
        for stage in ("fetch", "patch", "configure", "build"):
            self._run_stage(report, stage, deps)
        own = self._targets(self_only=True)
        for stage in ("configure", "build"):
            self._run_stage(report, stage, own)
        return self._finish(report)

    def zombies(self, *, delete: bool = False) -> list[Path]:
        """vendor 目录中存在但清单未声明的目录；delete=True 时删除"""
        root = self.manifest.context.install_root
        if not root.is_dir():
            return []
        declared = {
            pkg.package_path for pkg in self.manifest.dependencies
        }
        zombies = sorted(
            d for d in root.iterdir()
            if d.is_dir() and not d.name.startswith(".") and d not in declared
        )
        if delete:
            for path in zombies:
                logger.info("删除残留目录: %s", path)
                try:
                    shutil.rmtree(path)
                except OSError as e:
                    logger.error("删除失败 %s: %s", path, e)
        return zombies

    # =====================================================================

    def _targets(self, self_only: bool) -> list[Package]:
        if self_only:
            own = self.manifest.self_project
            if own is None:
                logger.warning("清单中没有 self 项目")
                return []
            return [own]
        return list(self.manifest.dependencies)

    def _run_stage(self, report: ActionReport, stage: str, packages: list[Package]) -> None:
        for pkg in packages:
            report.results.append(self.lifecycle.run_stage(stage, pkg))

    @staticmethod
    def _finish(report: ActionReport) -> ActionReport:
        s = report.summary()
        if report.failed:
            logger.warning(
                "%s 汇总: %d 成功, %d 跳过, %d 失败 (%s)",
                report.action, s["success"], s["skipped"], s["failed"],
                ", ".join(r.package for r in report.failed),
            )
        else:
            logger.info(
                "%s 完成: %d 成功, %d 跳过", report.action, s["success"], s["skipped"],
            )
        return report
