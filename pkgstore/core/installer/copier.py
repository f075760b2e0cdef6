"""把当前目录的全部条目复制到包目录

文件逐字节复制，目录递归复制，符号链接按原目标重建（不解引用）。
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from pkgstore.core.exceptions import CopyError

logger = logging.getLogger(__name__)


def copy_entries(src_dir: Path, dst_dir: Path) -> int:
    """复制 src_dir 下的顶层条目到 dst_dir，返回条目数

    Raises:
        CopyError: 任一条目复制失败，source 为出错的源路径
    """
    try:
        entries = sorted(src_dir.iterdir())
    except OSError as e:
        raise CopyError(f"Reading directory {src_dir}: {e}", src_dir) from e

    for entry in entries:
        target = dst_dir / entry.name
        if entry.is_symlink():
            _copy_link(entry, target)
        elif entry.is_dir():
            try:
                shutil.copytree(entry, target, symlinks=True, dirs_exist_ok=True)
            except OSError as e:
                raise CopyError(f"Copying directory {entry}: {e}", entry) from e
        else:
            try:
                shutil.copy2(entry, target)
            except OSError as e:
                raise CopyError(f"Copying file {entry}: {e}", entry) from e
        logger.debug("已复制 %s", entry.name)
    return len(entries)


def _copy_link(link: Path, target: Path) -> None:
    try:
        if target.is_symlink() or target.exists():
            target.unlink()
        os.symlink(os.readlink(link), target)
    except OSError as e:
        raise CopyError(f"Copying link {link}: {e}", link) from e
