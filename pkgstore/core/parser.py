"""包数据库解析器

递归下降解析，游标单调前进（最多前瞻一个字符）。
任何语法或语义错误都会抛出 ParseError，不返回部分结果。

数据库格式:
    # 注释
    [name@version]
    url = <url>
    depends = other other2@1.0
    build = <command>
            <command>

url / depends / build 按上述顺序出现，url 与 build 至少一个。
"""

from __future__ import annotations

import logging
from typing import Callable

from pkgstore.core.exceptions import ParseError
from pkgstore.core.models import PackageDef, package_id

logger = logging.getLogger(__name__)

_SPACES = frozenset(" \t")
_NAME_EXTRA = frozenset("_-")
_VERSION_EXTRA = frozenset("_-.")


def _is_name_char(c: str) -> bool:
    return c.isalnum() or c in _NAME_EXTRA


def _is_version_char(c: str) -> bool:
    return c.isalnum() or c in _VERSION_EXTRA


class Parser:
    """数据库文本游标"""

    def __init__(self, text: str) -> None:
        self.buffer = text
        self.offset = 0

    # ------------------------------------------------------------------
    # 游标原语
    # ------------------------------------------------------------------

    def _peek(self) -> str | None:
        if self.offset < len(self.buffer):
            return self.buffer[self.offset]
        return None

    def _read(self) -> str | None:
        c = self._peek()
        if c is not None:
            self.offset += 1
        return c

    def at_end(self) -> bool:
        return self.offset >= len(self.buffer)

    def try_literal(self, s: str) -> bool:
        """匹配成功则前进并返回 True，否则游标不动"""
        if self.buffer.startswith(s, self.offset):
            self.offset += len(s)
            return True
        return False

    def match_literal(self, s: str) -> None:
        if not self.try_literal(s):
            raise ParseError(f"Expecting {s}", self.offset)

    def match_newline(self) -> None:
        if not self.try_literal("\n"):
            raise ParseError("Expecting a newline", self.offset)

    def skip_space(self) -> None:
        while self._peek() in _SPACES:
            self.offset += 1

    def skip_whitespace_or_comment(self) -> None:
        """跳过空白、空行以及 # 开头直到行尾的注释"""
        while True:
            c = self._peek()
            if c == "#":
                while self._read() not in ("\n", None):
                    pass
            elif c is not None and (c in _SPACES or c == "\n"):
                self.offset += 1
            else:
                return

    def _take_while(self, predicate: Callable[[str], bool]) -> str:
        start = self.offset
        while self.offset < len(self.buffer) and predicate(self.buffer[self.offset]):
            self.offset += 1
        return self.buffer[start:self.offset]

    # ------------------------------------------------------------------
    # 语法规则
    # ------------------------------------------------------------------

    def packages(self) -> list[PackageDef]:
        """解析全部包定义，保持源顺序，重复 ID 报错"""
        packages: list[PackageDef] = []
        seen: set[str] = set()
        self.skip_whitespace_or_comment()
        while True:
            start = self.offset
            package = self.package()
            if package is None:
                break
            if package.id in seen:
                raise ParseError(
                    f"Package [{package.id}] has already been defined", start,
                )
            seen.add(package.id)
            packages.append(package)
            self.skip_whitespace_or_comment()
        if not self.at_end():
            raise ParseError("Expecting [", self.offset)
        return packages

    def package(self) -> PackageDef | None:
        """解析单个包块；当前位置不是 [ 时返回 None"""
        start = self.offset
        if not self.try_literal("["):
            return None
        name = self.package_name()
        self.skip_space()
        self.match_literal("@")
        self.skip_space()
        version = self.package_version()
        self.skip_space()
        self.match_literal("]")
        self.match_newline()

        self.skip_whitespace_or_comment()
        url = self.url_field()
        self.skip_whitespace_or_comment()
        depends = self.depends_field()
        self.skip_whitespace_or_comment()
        build = self.build_field()

        if url is None and build is None:
            raise ParseError(
                f"The package [{package_id(name, version)}] "
                "must define at least a url or build field",
                start,
            )
        return PackageDef(
            name=name, version=version, url=url, build=build, depends=depends,
        )

    def package_name(self) -> str:
        name = self._take_while(_is_name_char)
        if not name:
            raise ParseError("Expecting a package name", self.offset)
        return name

    def package_version(self) -> str:
        version = self._take_while(_is_version_char)
        if not version:
            raise ParseError("Expecting a package version", self.offset)
        return version

    def url_field(self) -> str | None:
        if not self.try_literal("url"):
            return None
        self.skip_space()
        self.match_literal("=")
        self.skip_space()
        return self.url()

    def url(self) -> str:
        """读取到行尾（含换行）或文本末尾"""
        start = self.offset
        value = self._take_while(lambda c: c != "\n").strip()
        self.try_literal("\n")
        if not value:
            raise ParseError("Expecting an url", start)
        return value

    def depends_field(self) -> tuple[str, ...]:
        if not self.try_literal("depends"):
            return ()
        self.skip_space()
        self.match_literal("=")
        self.skip_space()
        queries = [self.dependency_query()]
        while True:
            self.skip_space()
            c = self._peek()
            if c is None:
                break
            if c == "\n":
                self.offset += 1
                break
            queries.append(self.dependency_query())
        return tuple(queries)

    def dependency_query(self) -> str:
        """name 或 name@version"""
        start = self.offset
        query = self._take_while(lambda c: _is_version_char(c) or c == "@")
        parts = query.split("@")
        if (
            not query
            or len(parts) > 2
            or not all(parts)
            or not all(_is_name_char(c) for c in parts[0])
        ):
            raise ParseError("Expecting a dependency query", start)
        return query

    def build_field(self) -> str | None:
        """首行紧跟 build =，后续命令行以空白缩进

        缩进的空白行被跳过，只要下一行仍有缩进就继续读取。
        """
        if not self.try_literal("build"):
            return None
        self.skip_space()
        self.match_literal("=")
        self.skip_space()
        lines = [self.command()]
        self.match_newline()
        while self._peek() in _SPACES:
            self.skip_space()
            c = self._peek()
            if c is None:
                break
            if c == "\n":
                self.offset += 1
                continue
            lines.append(self.command())
            self.match_newline()
        return "".join(f"{line}\n" for line in lines)

    def command(self) -> str:
        start = self.offset
        value = self._take_while(lambda c: c != "\n")
        if not value:
            raise ParseError("Expecting a command", start)
        return value


def parse(text: str) -> list[PackageDef]:
    """解析数据库全文，返回源顺序的包定义列表"""
    packages = Parser(text).packages()
    logger.debug("已解析 %d 个包定义", len(packages))
    return packages
