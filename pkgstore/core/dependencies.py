"""依赖解析

职责:
- 将每个包声明的依赖查询解析为唯一的包定义
- 拒绝依赖环
- 计算安装顺序（依赖优先）

查询规则: 与 name 或 id 相等即为候选；0 个候选或多个候选都是错误。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pkgstore.core.exceptions import DependencyError
from pkgstore.core.models import PackageDef

logger = logging.getLogger(__name__)

Edge = tuple[str, PackageDef]


def find_package(package_defs: Iterable[PackageDef], query: str) -> PackageDef:
    """按查询精确定位唯一的包定义"""
    candidates = [p for p in package_defs if p.matches(query)]
    if not candidates:
        raise DependencyError(f"Package dependency {query} cannot be found", query)
    if len(candidates) > 1:
        raise DependencyError(
            f"Package dependency {query} cannot be uniquely resolved", query,
        )
    return candidates[0]


def resolve(package_defs: list[PackageDef]) -> list[Edge]:
    """解析全部依赖，返回 (依赖方 id, 被依赖定义) 列表

    Raises:
        DependencyError: 查询无法唯一解析，或依赖图存在环
    """
    edges: list[Edge] = []
    for package_def in package_defs:
        for query in package_def.depends:
            edges.append((package_def.id, find_package(package_defs, query)))
    _check_cycles(package_defs, edges)
    logger.debug("已解析 %d 条依赖", len(edges))
    return edges


def _adjacency(edges: Iterable[Edge]) -> dict[str, list[PackageDef]]:
    graph: dict[str, list[PackageDef]] = {}
    for dependent, dependency in edges:
        graph.setdefault(dependent, []).append(dependency)
    return graph


def _check_cycles(package_defs: list[PackageDef], edges: list[Edge]) -> None:
    """深度优先遍历，遇到回边即报告环路"""
    graph = _adjacency(edges)
    done: set[str] = set()
    path: list[str] = []

    def visit(pid: str) -> None:
        if pid in done:
            return
        if pid in path:
            cycle = path[path.index(pid):] + [pid]
            raise DependencyError(
                f"Package dependency cycle detected: {' -> '.join(cycle)}", pid,
            )
        path.append(pid)
        for dependency in graph.get(pid, []):
            visit(dependency.id)
        path.pop()
        done.add(pid)

    for package_def in package_defs:
        visit(package_def.id)


def install_order(roots: list[PackageDef], edges: list[Edge]) -> list[PackageDef]:
    """请求安装的包及其传递依赖，依赖在前，每个包只出现一次"""
    graph = _adjacency(edges)
    order: list[PackageDef] = []
    seen: set[str] = set()

    def visit(package_def: PackageDef) -> None:
        if package_def.id in seen:
            return
        seen.add(package_def.id)
        for dependency in graph.get(package_def.id, []):
            visit(dependency)
        order.append(package_def)

    for root in roots:
        visit(root)
    return order
