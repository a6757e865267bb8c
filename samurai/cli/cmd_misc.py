"""CLI: 查询与维护命令: list / zombies"""

from __future__ import annotations

import click

from samurai.cli import _load, config_option, vars_option
from samurai.core.orchestrator import Orchestrator


def register(group: click.Group) -> None:
    group.add_command(list_packages)
    group.add_command(zombies)


@click.command(name="list")
@config_option
@vars_option
def list_packages(config_path: str | None, cli_vars: str | None) -> None:
    """列出清单中声明的依赖包"""
    manifest, _ = _load(config_path, cli_vars)
    if not manifest.dependencies and manifest.self_project is None:
        click.echo("清单中没有声明任何依赖。")
        return
    for pkg in manifest.dependencies:
        kind = pkg.source.type if pkg.source else "-"
        state = "已拉取" if pkg.is_fetched else "未拉取"
        click.echo(
            f"  {pkg.name:20s} {pkg.version or '-':12s} [{kind:7s}] "
            f"{state}  {pkg.package_path}"
        )
    if manifest.self_project is not None:
        click.echo(f"  {'(self)':20s} {'-':12s} [{'-':7s}] {manifest.self_project.package_path}")


@click.command()
@config_option
@vars_option
@click.option("--delete", "-d", is_flag=True, help="删除残留目录")
def zombies(config_path: str | None, cli_vars: str | None, delete: bool) -> None:
    """列出 vendor 目录中清单未声明的残留目录"""
    manifest, platform = _load(config_path, cli_vars)
    found = Orchestrator(manifest, platform).zombies(delete=delete)
    failed = 0
    for path in found:
        if not delete:
            click.echo(path.name)
        elif path.exists():
            failed += 1
            click.secho(f"删除失败: {path}", fg="red")
        else:
            click.echo(f"已删除: {path}")
    raise SystemExit(1 if failed else 0)
