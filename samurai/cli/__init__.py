"""samurai 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

import os
from pathlib import Path

import click

from samurai import __version__
from samurai.core.config import init_config
from samurai.core.exceptions import SamuraiError
from samurai.core.manifest import load_manifest
from samurai.core.models import Manifest
from samurai.core.platform import Platform, resolve_current_platform
from samurai.utils.logger import setup_logging


def config_option(f):  # type: ignore[no-untyped-def]
    return click.option(
        "--config", "-c", "config_path", default=None,
        help="清单文件路径（默认 samurai.json）",
    )(f)


def vars_option(f):  # type: ignore[no-untyped-def]
    return click.option(
        "--vars", "-v", "cli_vars", default=None,
        help="变量，格式: NAME=VALUE;NAME2=VALUE2",
    )(f)


def _load(config_path: str | None, cli_vars: str | None) -> tuple[Manifest, Platform]:
    """加载工具配置、识别平台、加载清单；致命错误直接以退出码 1 结束"""
    try:
        cfg = init_config()
        platform = resolve_current_platform()
        manifest = load_manifest(
            config_path or cfg.manifest,
            platform=platform,
            cli_vars=cli_vars,
            cwd=Path.cwd(),
            substitution=cfg.substitution,
            vendor_dir=cfg.vendor_dir,
        )
    except SamuraiError as e:
        click.secho(f"{type(e).__name__}: {e}", fg="red", err=True)
        raise SystemExit(1) from e
    return manifest, platform


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """samurai - 原生 C/C++ 依赖拉取与构建编排工具"""
    setup_logging(
        level=os.getenv("SAMURAI_LOG_LEVEL", "INFO"),
        json_output=os.getenv("SAMURAI_LOG_JSON", "") == "1",
    )


# 注册各领域子命令
from samurai.cli.cmd_lifecycle import register as _reg_lifecycle  # noqa: E402
from samurai.cli.cmd_misc import register as _reg_misc  # noqa: E402

_reg_lifecycle(main)
_reg_misc(main)
