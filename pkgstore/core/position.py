"""字符偏移 → 行列号换算，用于解析错误展示"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """1 起始的行列号"""

    line: int
    column: int

    @classmethod
    def find(cls, text: str, offset: int) -> Position:
        """计算 offset 所在的行列，超出文本末尾时按末尾计算"""
        offset = max(0, min(offset, len(text)))
        before = text[:offset]
        line = before.count("\n") + 1
        column = offset - (before.rfind("\n") + 1) + 1
        return cls(line=line, column=column)
