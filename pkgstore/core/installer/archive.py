"""归档解压

- tar.gz: 流式读取直接解包
- tar.xz / tar.bz2: 先完整解压为同目录下去掉压缩后缀的 .tar，再解包
- zip: 逐条目解包，重建目录并还原 Unix 权限位
"""

from __future__ import annotations

import bz2
import logging
import lzma
import os
import shutil
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Callable

from pkgstore.core.exceptions import ExtractError
from pkgstore.core.models import ArchiveFormat

logger = logging.getLogger(__name__)

# zip 条目由 Unix 系统创建时 create_system 为 3
_ZIP_UNIX = 3


# =========================================================================
# tar 系列
# =========================================================================

def _extract_tar_gz(archive: Path, dest: Path) -> None:
    with tarfile.open(archive, "r|gz") as tar:
        tar.extractall(dest, filter="tar")  # noqa: S202


def _decompressed_tar(archive: Path, opener: Callable) -> Path:
    """解压到同目录的 .tar 文件（foo.tar.xz -> foo.tar）"""
    target = archive.with_suffix("")
    logger.debug("解压缩 %s -> %s", archive, target)
    with opener(archive, "rb") as src, open(target, "wb") as dst:
        shutil.copyfileobj(src, dst)
    return target


def _extract_plain_tar(tar_file: Path, dest: Path) -> None:
    with tarfile.open(tar_file, "r:") as tar:
        tar.extractall(dest, filter="tar")  # noqa: S202


def _extract_tar_xz(archive: Path, dest: Path) -> None:
    _extract_plain_tar(_decompressed_tar(archive, lzma.open), dest)


def _extract_tar_bz2(archive: Path, dest: Path) -> None:
    _extract_plain_tar(_decompressed_tar(archive, bz2.open), dest)


# =========================================================================
# zip
# =========================================================================

def _safe_member(name: str) -> bool:
    parts = PurePosixPath(name).parts
    return bool(parts) and not name.startswith("/") and ".." not in parts


def _unix_mode(info: zipfile.ZipInfo) -> int:
    if info.create_system != _ZIP_UNIX:
        return 0
    return (info.external_attr >> 16) & 0o7777


def _extract_zip(archive: Path, dest: Path) -> None:
    dir_modes: list[tuple[Path, int]] = []
    with zipfile.ZipFile(archive) as zf:
        for info in zf.infolist():
            if not _safe_member(info.filename):
                logger.warning("跳过不安全的 zip 条目: %s", info.filename)
                continue
            target = dest / info.filename
            mode = _unix_mode(info)
            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                if mode:
                    dir_modes.append((target, mode))
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            with zf.open(info) as src, open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)
            if mode:
                os.chmod(target, mode)
    # 目录权限最后设置，避免只读目录阻止写入其中的文件
    for directory, mode in reversed(dir_modes):
        os.chmod(directory, mode)


_HANDLERS: dict[ArchiveFormat, Callable[[Path, Path], None]] = {
    ArchiveFormat.TAR_GZ: _extract_tar_gz,
    ArchiveFormat.TAR_XZ: _extract_tar_xz,
    ArchiveFormat.TAR_BZ2: _extract_tar_bz2,
    ArchiveFormat.ZIP: _extract_zip,
}


# =========================================================================
# 对外接口
# =========================================================================

def extract(archive: Path, fmt: ArchiveFormat, dest: Path) -> None:
    """按格式把 archive 解包到 dest

    Raises:
        ExtractError: 归档损坏、格式不符或写入失败
    """
    handler = _HANDLERS[fmt]
    dest.mkdir(parents=True, exist_ok=True)
    logger.debug("解包 %s (%s) -> %s", archive, fmt.value, dest)
    try:
        handler(archive, dest)
    except (tarfile.TarError, zipfile.BadZipFile, lzma.LZMAError, EOFError, OSError) as e:
        raise ExtractError(f"Archive {archive} can not be extracted: {e}", archive) from e


def unpacked_root(extract_dir: Path) -> Path:
    """解包后的工作目录

    根下只有一个目录时进入该目录，否则（多个条目或单个文件）停留在根。
    """
    entries = list(extract_dir.iterdir())
    if len(entries) == 1 and entries[0].is_dir() and not entries[0].is_symlink():
        return entries[0]
    return extract_dir
