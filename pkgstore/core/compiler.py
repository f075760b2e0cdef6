"""包定义编译器

将 PackageDef 转换为有序安装命令，纯函数、无副作用、不会失败:
  1. 有 url: Download，按后缀追加 Extract
  2. 有 build: Shell
  3. 无 build: Copy（由安装器从当前目录复制到包目录）
"""

from __future__ import annotations

from pkgstore.core.models import (
    ArchiveFormat,
    Command,
    Copy,
    Download,
    Extract,
    Package,
    PackageDef,
    Shell,
)

# 顺序敏感: 先匹配更长的后缀
_ARCHIVE_SUFFIXES: tuple[tuple[str, ArchiveFormat], ...] = (
    (".tar.gz", ArchiveFormat.TAR_GZ),
    (".tgz", ArchiveFormat.TAR_GZ),
    (".tar.xz", ArchiveFormat.TAR_XZ),
    (".tar.bz2", ArchiveFormat.TAR_BZ2),
    (".zip", ArchiveFormat.ZIP),
)


def archive_format(url: str) -> ArchiveFormat | None:
    """根据 url 后缀识别归档格式，无法识别返回 None"""
    for suffix, fmt in _ARCHIVE_SUFFIXES:
        if url.endswith(suffix):
            return fmt
    return None


def compile_package(package_def: PackageDef) -> Package:
    commands: list[Command] = []
    if package_def.url is not None:
        commands.append(Download(package_def.url))
        fmt = archive_format(package_def.url)
        if fmt is not None:
            commands.append(Extract(fmt))
    if package_def.build is not None:
        commands.append(Shell(package_def.build))
    else:
        commands.append(Copy())
    return Package(id=package_def.id, commands=tuple(commands))
