"""pkgstore 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
全局选项在 main 中合并进配置（命令行 > 环境变量 > 配置文件 > 默认值）。
"""

from __future__ import annotations

import click

from pkgstore import __version__
from pkgstore.cli.exit import ExitCode, handle_errors
from pkgstore.core.config import DEFAULT_CONFIG_FILE, init_config
from pkgstore.services.store_service import StoreService
from pkgstore.utils.logger import setup_logging


def _svc() -> StoreService:
    """基于当前全局配置创建服务"""
    return StoreService()


@click.group()
@click.option("--db-file", default=None, help="包数据库文件")
@click.option("--packages-dir", default=None, help="包安装根目录")
@click.option("--tmp-dir", default=None, help="下载/解压工作目录")
@click.option(
    "--config", "config_file", default=DEFAULT_CONFIG_FILE,
    type=click.Path(dir_okay=False), help="YAML 配置文件",
)
@click.option("--verbose", "-v", is_flag=True, help="输出构建脚本日志并启用 DEBUG 日志")
@click.version_option(version=__version__)
def main(
    db_file: str | None,
    packages_dir: str | None,
    tmp_dir: str | None,
    config_file: str,
    verbose: bool,
) -> None:
    """pkgstore - 极简包管理器"""
    with handle_errors(ExitCode.DB_READ):
        cfg = init_config(
            config_file,
            db_file=db_file,
            packages_dir=packages_dir,
            tmp_dir=tmp_dir,
            verbose=True if verbose else None,
        )
    setup_logging(
        level="DEBUG" if cfg.verbose else cfg.log_level,
        json_output=cfg.log_json,
    )


# 注册各领域子命令
from pkgstore.cli.cmd_install import register as _reg_install  # noqa: E402
from pkgstore.cli.cmd_info import register as _reg_info  # noqa: E402

_reg_install(main)
_reg_info(main)
