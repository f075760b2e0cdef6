"""CLI — 状态查询命令"""

from __future__ import annotations

import click

from pkgstore.cli import _svc
from pkgstore.cli.exit import ExitCode, handle_errors
from pkgstore.core.models import PackageStatus
from pkgstore.utils.fs import format_size


def register(group: click.Group) -> None:
    group.add_command(info)
    group.add_command(deps)


def _row(status: PackageStatus) -> tuple[str, str, str]:
    size = format_size(status.size) if status.size is not None else "-"
    if status.obsolete:
        size += " (obsolete)"
    return status.name, status.version, size


@click.command()
def info() -> None:
    """列出已定义与已安装的包: 名称 / 版本 / 占用空间"""
    with handle_errors(ExitCode.INFO):
        rows = [("Name", "Version", "Size")]
        rows.extend(_row(s) for s in _svc().info())
    name_width = max(len(r[0]) for r in rows)
    version_width = max(len(r[1]) for r in rows)
    for name, version, size in rows:
        click.echo(f"{name:<{name_width}}  {version:<{version_width}}  {size}")


@click.command()
def deps() -> None:
    """列出全部已解析的依赖关系"""
    with handle_errors(ExitCode.INFO):
        edges = _svc().dependencies
    for dependent, dependency in edges:
        click.echo(f"{dependent} -> {dependency.id}")
