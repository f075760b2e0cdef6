"""退出码映射与错误输出"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from enum import IntEnum
from typing import NoReturn

import click

from pkgstore.core.config import get_config
from pkgstore.core.exceptions import (
    ConfigError,
    DependencyError,
    InstallerError,
    PackageNotFoundError,
    ParseError,
    StoreError,
)


class ExitCode(IntEnum):
    OK = 0
    USAGE = 2  # click 自身的参数错误
    DB_READ = 3
    PARSE = 4
    NOT_DEFINED = 5
    INSTALL = 8
    INFO = 9


def exit_code_for(error: StoreError, fallback: ExitCode) -> ExitCode:
    """数据库/解析/查询类错误有固定退出码，其余由命令决定"""
    if isinstance(error, ConfigError):
        return ExitCode.DB_READ
    if isinstance(error, (ParseError, DependencyError)):
        return ExitCode.PARSE
    if isinstance(error, PackageNotFoundError):
        return ExitCode.NOT_DEFINED
    return fallback


def _parse_location(error: ParseError) -> str:
    cfg = get_config()
    try:
        line, column = error.position(cfg.read_database())
    except ConfigError:
        return f"Parsing Error at {cfg.db_file}"
    return f"Parsing Error at {cfg.db_file}:{line}:{column}"


def fail(error: StoreError, fallback: ExitCode) -> NoReturn:
    """输出错误到 stderr 并以对应退出码结束进程"""
    if isinstance(error, ParseError):
        click.echo(_parse_location(error), err=True)
    elif isinstance(error, InstallerError) and error.package_id:
        click.echo(f"Installation of {error.package_id} failed", err=True)
    if error.message:
        click.echo(error.message, err=True)
    sys.exit(exit_code_for(error, fallback))


@contextmanager
def handle_errors(fallback: ExitCode) -> Iterator[None]:
    """把业务异常转换为退出码，其余异常照常抛出"""
    try:
        yield
    except StoreError as e:
        fail(e, fallback)
