"""核心数据模型

包定义、安装命令、编译结果及安装器目录/状态集中定义于此，
parser / compiler / installer 统一从此处导入。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

from pkgstore.core.exceptions import ValidationError

# =========================================================================
# 包定义
# =========================================================================


def package_id(name: str, version: str) -> str:
    """包标识: name@version"""
    return f"{name}@{version}"


@dataclass(frozen=True)
class PackageDef:
    """数据库中的单个包定义，解析后不可变

    url 与 build 至少存在一个，构造时校验，
    因此 compile() 无需再处理缺字段的情况。
    """

    name: str
    version: str
    url: str | None = None
    build: str | None = None  # 多行命令以换行连接
    depends: tuple[str, ...] = ()  # 依赖查询: name 或 name@version

    def __post_init__(self) -> None:
        if self.url is None and self.build is None:
            raise ValidationError(
                f"The package [{self.id}] must define at least a url or build field",
                details=["url", "build"],
            )

    @property
    def id(self) -> str:
        return package_id(self.name, self.version)

    def matches(self, query: str) -> bool:
        """查询可以是裸包名，也可以是完整 ID"""
        return query == self.name or query == self.id


# =========================================================================
# 安装命令（封闭变体集合）
# =========================================================================


class ArchiveFormat(str, Enum):
    """支持的归档格式"""
    TAR_GZ = "tar.gz"
    TAR_XZ = "tar.xz"
    TAR_BZ2 = "tar.bz2"
    ZIP = "zip"


@dataclass(frozen=True)
class Download:
    """下载 url 到下载目录"""

    url: str


@dataclass(frozen=True)
class Extract:
    """将最近一次下载的文件解压到解压目录"""

    format: ArchiveFormat


@dataclass(frozen=True)
class Shell:
    """以 bash -eu 执行构建脚本"""

    script: str


@dataclass(frozen=True)
class Copy:
    """将当前目录的全部条目复制到包目录"""


Command = Union[Download, Extract, Shell, Copy]


@dataclass(frozen=True)
class Package:
    """编译后的包: ID + 有序安装命令"""

    id: str
    commands: tuple[Command, ...] = ()


# =========================================================================
# 安装器领域模型
# =========================================================================


@dataclass(frozen=True)
class InstallerLayout:
    """单个包的文件系统布局（均为规范化绝对路径）

    package_dir:   <packages_root>/<id>
    installer_dir: <work_root>/<id>
    download_dir:  <work_root>/<id>/download
    extract_dir:   <work_root>/<id>/extract
    """

    package_id: str
    package_dir: Path
    installer_dir: Path
    download_dir: Path
    extract_dir: Path

    @property
    def script_file(self) -> Path:
        return self.installer_dir / "build.sh"


@dataclass
class InstallerState:
    """安装过程中的可变状态，每次安装一个实例"""

    current_dir: Path
    download_file: Path | None = None


@dataclass
class PackageStatus:
    """info 列表中的一行"""

    id: str
    name: str
    version: str
    defined: bool = True
    size: int | None = None  # None 表示未安装

    @property
    def installed(self) -> bool:
        return self.size is not None

    @property
    def obsolete(self) -> bool:
        """已安装但数据库中已无定义"""
        return not self.defined


@dataclass
class InstallReport:
    """一次安装的结果: status 为 installed 或 skipped"""

    package_id: str
    status: str
    messages: list[str] = field(default_factory=list)
