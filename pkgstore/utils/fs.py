"""文件系统工具: 目录大小统计与可读化"""

from __future__ import annotations

import os
from pathlib import Path

_UNITS = ("KB", "MB", "GB", "TB")


def dir_size(path: Path) -> int:
    """递归统计目录大小（字节）

    符号链接不跟随，按链接自身大小计算，因此悬空链接不会报错。
    """
    total = 0
    with os.scandir(path) as it:
        for entry in it:
            if entry.is_dir(follow_symlinks=False):
                total += dir_size(Path(entry.path))
            else:
                total += entry.stat(follow_symlinks=False).st_size
    return total


def format_size(size: int) -> str:
    """1024 进制可读大小: 512 B / 1.50 KB / 3.20 MB"""
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in _UNITS:
        value /= 1024
        if value < 1024 or unit == _UNITS[-1]:
            return f"{value:.2f} {unit}"
    return f"{size} B"
