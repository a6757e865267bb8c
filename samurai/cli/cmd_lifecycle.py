"""CLI: 生命周期命令: fetch / patch / cmake(configure) / build / all"""

from __future__ import annotations

import click

from samurai.cli import _load, config_option, vars_option
from samurai.core.orchestrator import ActionReport, Orchestrator


def register(group: click.Group) -> None:
    group.add_command(fetch)
    group.add_command(patch)
    group.add_command(cmake)
    group.add_command(configure)
    group.add_command(build)
    group.add_command(run_all)


def self_option(f):  # type: ignore[no-untyped-def]
    return click.option("--self", "-s", "self_only", is_flag=True, help="只处理 self 项目")(f)


def _run(config_path: str | None, cli_vars: str | None, action: str, self_only: bool = False) -> None:
    manifest, platform = _load(config_path, cli_vars)
    report = Orchestrator(manifest, platform).run(action, self_only=self_only)
    _echo_report(report)
    raise SystemExit(report.exit_code)


def _echo_report(report: ActionReport) -> None:
    for r in report.results:
        if r.status == "failed":
            click.secho(f"  [FAILED ] {r.stage:9s} {r.package}: {r.message}", fg="red")
        elif r.status == "success":
            click.echo(f"  [OK     ] {r.stage:9s} {r.package} ({r.duration:.1f}s)")
    s = report.summary()
    click.echo(
        f"{report.action}: {s['success']} 成功, {s['skipped']} 跳过, {s['failed']} 失败"
    )


@click.command()
@config_option
@vars_option
def fetch(config_path: str | None, cli_vars: str | None) -> None:
    """拉取依赖包（包目录已存在则跳过）"""
    _run(config_path, cli_vars, "fetch")


@click.command()
@config_option
@vars_option
def patch(config_path: str | None, cli_vars: str | None) -> None:
    """对依赖包应用 patch 文件"""
    _run(config_path, cli_vars, "patch")


@click.command()
@config_option
@vars_option
@self_option
def cmake(config_path: str | None, cli_vars: str | None, self_only: bool) -> None:
    """运行 CMake 配置步骤"""
    _run(config_path, cli_vars, "configure", self_only)


@click.command()
@config_option
@vars_option
@self_option
def configure(config_path: str | None, cli_vars: str | None, self_only: bool) -> None:
    """运行 CMake 配置步骤（cmake 的别名）"""
    _run(config_path, cli_vars, "configure", self_only)


@click.command()
@config_option
@vars_option
@self_option
def build(config_path: str | None, cli_vars: str | None, self_only: bool) -> None:
    """运行当前平台的构建脚本或命令"""
    _run(config_path, cli_vars, "build", self_only)


@click.command(name="all")
@config_option
@vars_option
def run_all(config_path: str | None, cli_vars: str | None) -> None:
    """依次执行 fetch / patch / cmake / build，最后处理 self 项目"""
    _run(config_path, cli_vars, "all")
