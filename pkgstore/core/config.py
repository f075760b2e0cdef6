"""集中配置管理

提供统一的配置入口，优先级: 命令行 > 环境变量 > YAML 文件 > 默认值。

环境变量:
    STORE_DB_FILE        数据库文件
    STORE_PACKAGES_DIR   包安装根目录
    STORE_TMP_DIR        下载/解压工作目录
    STORE_LOG_LEVEL      日志级别
    STORE_LOG_JSON       为 "1" 时输出 JSON 日志
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from pkgstore.core.exceptions import ConfigError
from pkgstore.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config/pkgstore.yml"

_ENV_VARS = {
    "db_file": "STORE_DB_FILE",
    "packages_dir": "STORE_PACKAGES_DIR",
    "tmp_dir": "STORE_TMP_DIR",
    "log_level": "STORE_LOG_LEVEL",
}


@dataclass
class Config:
    """包管理器全局配置"""

    # 目录
    db_file: str = "config/db.ini"
    packages_dir: str = "/store"
    tmp_dir: str = "/tmp/store"

    # 输出
    verbose: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str | Path = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认

        Raises:
            ConfigError: 文件不可读、YAML 格式错误或文件过大
        """
        try:
            data = load_yaml(path)
        except (OSError, yaml.YAMLError, ValueError) as e:
            raise ConfigError(f"Can not load config file {path}: {e}") from e
        if not data:
            return cls()
        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def with_env(self, environ: Mapping[str, str] | None = None) -> Config:
        """叠加环境变量，返回新配置"""
        env = os.environ if environ is None else environ
        changes: dict[str, Any] = {
            name: env[var] for name, var in _ENV_VARS.items() if env.get(var)
        }
        if "STORE_LOG_JSON" in env:
            changes["log_json"] = env["STORE_LOG_JSON"] == "1"
        return replace(self, **changes)

    def with_overrides(self, **overrides: Any) -> Config:
        """叠加命令行参数，None 值视为未指定"""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def db_path(self) -> Path:
        return Path(self.db_file)

    def read_database(self) -> str:
        """读取数据库全文

        Raises:
            ConfigError: 文件不存在或不可读
        """
        path = self.db_path
        if not path.is_file():
            raise ConfigError(f"db_file {path} does not exist!")
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Can not read database file {path}: {e}") from e

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值叠加环境变量）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config().with_env()
    return _current


def init_config(path: str | Path = DEFAULT_CONFIG_FILE, **overrides: Any) -> Config:
    """从文件 + 环境变量 + 命令行参数初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path).with_env().with_overrides(**overrides)
    logger.debug("配置已加载: %s", path)
    return _current
