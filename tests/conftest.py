"""测试共享 fixture: 假命令执行器 + 清单构造

FakeExecutor 记录每次调用而不启动真实进程:
  - uname 返回可配置的内核名
  - git clone 会创建目标目录，模拟拉取成功
  - fail("git checkout") 让匹配前缀的命令返回非零退出码
"""

from __future__ import annotations

import json
import shlex
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from samurai.core.config import Config
from samurai.core.manifest import load_manifest
from samurai.core.models import Manifest
from samurai.core.platform import Platform
from samurai.utils.shell import CommandResult, get_executor, set_executor


class FakeExecutor:
    def __init__(self, uname: str = "Linux\n") -> None:
        self.uname = uname
        self.calls: list[tuple[list[str], str]] = []
        self._failures: dict[str, int] = {}

    def fail(self, prefix: str, returncode: int = 1) -> None:
        self._failures[prefix] = returncode

    def execute(
        self,
        cmd: str | list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        args = shlex.split(cmd) if isinstance(cmd, str) else list(cmd)
        self.calls.append((args, cwd))
        line = " ".join(args)
        for prefix, rc in self._failures.items():
            if line.startswith(prefix):
                return CommandResult(returncode=rc, stdout="", stderr=f"{prefix}: boom")
        if args[0] == "uname":
            return CommandResult(returncode=0, stdout=self.uname, stderr="")
        if args[:2] == ["git", "clone"]:
            Path(args[-1]).mkdir(parents=True, exist_ok=True)
        return CommandResult(returncode=0, stdout="", stderr="")

    def programs(self) -> list[str]:
        return [Path(args[0]).name for args, _ in self.calls]

    def calls_to(self, program: str) -> list[tuple[list[str], str]]:
        return [(args, cwd) for args, cwd in self.calls if Path(args[0]).name == program]


@pytest.fixture()
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture()
def global_fake_executor(fake_executor: FakeExecutor):
    """替换全局默认执行器（CLI 测试使用），结束后恢复"""
    previous = get_executor()
    set_executor(fake_executor)
    yield fake_executor
    set_executor(previous)


@pytest.fixture()
def config() -> Config:
    return Config()


@pytest.fixture()
def write_manifest(tmp_path: Path) -> Callable[..., Path]:
    def _write(data: dict[str, Any], name: str = "samurai.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def make_manifest(tmp_path: Path, write_manifest: Callable[..., Path]) -> Callable[..., Manifest]:
    """写入清单并以指定平台加载"""

    def _make(
        data: dict[str, Any],
        platform: Platform = Platform.LINUX,
        cli_vars: str | None = None,
        environ: dict[str, str] | None = None,
    ) -> Manifest:
        path = write_manifest(data)
        return load_manifest(
            path, platform=platform, cli_vars=cli_vars,
            cwd=tmp_path, environ=environ or {},
        )

    return _make
