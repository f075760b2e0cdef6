"""CLI — 安装 / 重装 / 卸载命令"""

from __future__ import annotations

import click

from pkgstore.cli import _svc
from pkgstore.cli.exit import ExitCode, handle_errors


def register(group: click.Group) -> None:
    group.add_command(install)
    group.add_command(reinstall)
    group.add_command(uninstall)


@click.command()
@click.argument("queries", nargs=-1, required=True)
def install(queries: tuple[str, ...]) -> None:
    """安装包（名称或 name@version）及其依赖，已安装的跳过"""
    with handle_errors(ExitCode.INSTALL):
        _svc().install(list(queries), on_step=click.echo)


@click.command()
@click.argument("queries", nargs=-1, required=True)
def reinstall(queries: tuple[str, ...]) -> None:
    """删除后重新安装（不处理依赖）"""
    with handle_errors(ExitCode.INSTALL):
        _svc().reinstall(list(queries), on_step=click.echo)


@click.command()
@click.argument("queries", nargs=-1, required=True)
def uninstall(queries: tuple[str, ...]) -> None:
    """删除包目录"""
    with handle_errors(ExitCode.INSTALL):
        for message in _svc().uninstall(list(queries)):
            click.echo(message)
