"""依赖解析测试"""

from __future__ import annotations

import pytest

from pkgstore.core.dependencies import find_package, install_order, resolve
from pkgstore.core.exceptions import DependencyError
from pkgstore.core.models import PackageDef


def _pkg(name: str, version: str = "1", depends: tuple[str, ...] = ()) -> PackageDef:
    return PackageDef(name, version, build="true\n", depends=depends)


class TestFindPackage:
    def test_by_name(self) -> None:
        defs = [_pkg("a"), _pkg("b")]
        assert find_package(defs, "b").id == "b@1"

    def test_by_id(self) -> None:
        defs = [_pkg("a", "1"), _pkg("a", "2")]
        assert find_package(defs, "a@2").version == "2"

    def test_not_found(self) -> None:
        with pytest.raises(DependencyError, match="Package dependency zz cannot be found") as exc:
            find_package([_pkg("a")], "zz")
        assert exc.value.query == "zz"

    def test_ambiguous_name(self) -> None:
        defs = [_pkg("a", "1"), _pkg("a", "2")]
        with pytest.raises(DependencyError, match="cannot be uniquely resolved"):
            find_package(defs, "a")


class TestResolve:
    def test_edges(self) -> None:
        lib = _pkg("lib")
        app = _pkg("app", depends=("lib",))
        assert resolve([lib, app]) == [("app@1", lib)]

    def test_no_dependencies(self) -> None:
        assert resolve([_pkg("a"), _pkg("b")]) == []

    def test_missing_dependency(self) -> None:
        with pytest.raises(DependencyError, match="cannot be found"):
            resolve([_pkg("app", depends=("lib",))])

    def test_cycle(self) -> None:
        defs = [_pkg("a", depends=("b",)), _pkg("b", depends=("a",))]
        with pytest.raises(DependencyError, match="cycle detected: a@1 -> b@1 -> a@1"):
            resolve(defs)

    def test_self_dependency(self) -> None:
        with pytest.raises(DependencyError, match="cycle detected: a@1 -> a@1"):
            resolve([_pkg("a", depends=("a@1",))])

    def test_diamond_is_not_a_cycle(self) -> None:
        defs = [
            _pkg("base"),
            _pkg("left", depends=("base",)),
            _pkg("right", depends=("base",)),
            _pkg("top", depends=("left", "right")),
        ]
        assert len(resolve(defs)) == 4


class TestInstallOrder:
    def test_dependencies_first(self) -> None:
        base = _pkg("base")
        mid = _pkg("mid", depends=("base",))
        top = _pkg("top", depends=("mid",))
        defs = [top, mid, base]
        order = install_order([top], resolve(defs))
        assert [p.id for p in order] == ["base@1", "mid@1", "top@1"]

    def test_each_package_once(self) -> None:
        defs = [
            _pkg("base"),
            _pkg("left", depends=("base",)),
            _pkg("right", depends=("base",)),
        ]
        order = install_order([defs[1], defs[2], defs[0]], resolve(defs))
        assert [p.id for p in order] == ["base@1", "left@1", "right@1"]

    def test_roots_in_request_order(self) -> None:
        a, b = _pkg("a"), _pkg("b")
        assert install_order([b, a], []) == [b, a]
