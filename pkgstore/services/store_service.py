"""包仓库服务: 解析数据库 / 依赖展开 / 安装编排

CLI 与核心模块之间的唯一入口:
  - 读取并解析数据库，解析全部依赖（解析错误、依赖错误在任何安装前抛出）
  - 按依赖顺序逐个安装，失败时删除未完成的包目录后再抛出
  - 汇总已定义与已安装的包供 info 展示
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from pkgstore.core.compiler import compile_package
from pkgstore.core.config import Config, get_config
from pkgstore.core.dependencies import Edge, install_order, resolve
from pkgstore.core.exceptions import DirectoryError, PackageNotFoundError, StoreError
from pkgstore.core.installer import Installer
from pkgstore.core.models import InstallReport, PackageDef, PackageStatus
from pkgstore.core.parser import parse
from pkgstore.utils.fs import dir_size
from pkgstore.utils.shell import CommandExecutor

logger = logging.getLogger(__name__)

StepCallback = Callable[[str], None]


class StoreService:
    """包的安装、卸载与状态查询"""

    def __init__(
        self,
        config: Config | None = None,
        executor: CommandExecutor | None = None,
    ) -> None:
        self.config = config or get_config()
        self.executor = executor
        self._definitions: list[PackageDef] | None = None
        self._dependencies: list[Edge] | None = None

    # ---- 数据库 ----

    @property
    def definitions(self) -> list[PackageDef]:
        """数据库中的全部包定义（首次访问时解析）"""
        if self._definitions is None:
            self._definitions = parse(self.config.read_database())
            logger.debug("数据库 %s 共 %d 个包", self.config.db_file, len(self._definitions))
        return self._definitions

    @property
    def dependencies(self) -> list[Edge]:
        if self._dependencies is None:
            self._dependencies = resolve(self.definitions)
        return self._dependencies

    def find(self, queries: list[str]) -> list[PackageDef]:
        """按名称或 ID 查找，裸名称匹配全部版本；结果去重并保持请求顺序

        Raises:
            PackageNotFoundError: 某个查询没有任何匹配
        """
        found: list[PackageDef] = []
        for query in queries:
            matches = [d for d in self.definitions if d.matches(query)]
            if not matches:
                raise PackageNotFoundError(f"Package {query} is not defined", query)
            for package_def in matches:
                if package_def not in found:
                    found.append(package_def)
        return found

    def install_plan(self, queries: list[str]) -> list[PackageDef]:
        """请求的包连同传递依赖，依赖在前"""
        return install_order(self.find(queries), self.dependencies)

    # ---- 安装 / 卸载 ----

    def installer(self, package_def: PackageDef) -> Installer:
        return Installer.init(
            self.config.packages_dir,
            self.config.tmp_dir,
            compile_package(package_def),
            executor=self.executor,
        )

    def install_package(
        self, package_def: PackageDef, on_step: StepCallback | None = None,
    ) -> InstallReport:
        """安装单个包；已安装则跳过

        任一步骤失败都会删除包目录，删除失败只记录日志，原异常继续抛出。
        """
        installer = self.installer(package_def)
        report = InstallReport(package_id=package_def.id, status="skipped")
        if installer.is_installed():
            self._step(report, f"Package {package_def.id} is already installed", on_step)
            return report

        try:
            self._step(report, installer.create_directory(), on_step)
            for command in installer.package.commands:
                message = installer.exec_command(command, verbose=self.config.verbose)
                self._step(report, message, on_step)
        except Exception:
            logger.warning("安装失败，回滚: %s", package_def.id)
            try:
                installer.delete_directory()
            except StoreError as e:
                logger.error("回滚失败: %s: %s", package_def.id, e.message)
            raise

        report.status = "installed"
        self._step(report, f"Package {package_def.id} has been installed", on_step)
        return report

    def install(
        self, queries: list[str], on_step: StepCallback | None = None,
    ) -> list[InstallReport]:
        """安装请求的包及其依赖"""
        return [self.install_package(d, on_step) for d in self.install_plan(queries)]

    def uninstall(self, queries: list[str]) -> list[str]:
        """删除匹配包的目录，返回每个包的结果消息"""
        messages = []
        for package_def in self.find(queries):
            message = self.installer(package_def).delete_directory()
            logger.info("%s", message, extra={"package": package_def.id})
            messages.append(message)
        return messages

    def reinstall(
        self, queries: list[str], on_step: StepCallback | None = None,
    ) -> list[InstallReport]:
        """删除后重新安装，不展开依赖"""
        reports = []
        for package_def in self.find(queries):
            message = self.installer(package_def).delete_directory()
            if on_step is not None:
                on_step(message)
            reports.append(self.install_package(package_def, on_step))
        return reports

    @staticmethod
    def _step(report: InstallReport, message: str, on_step: StepCallback | None) -> None:
        report.messages.append(message)
        if on_step is not None:
            on_step(message)

    # ---- 状态 ----

    def installed_ids(self) -> list[str]:
        """包根目录下的全部包 ID；根目录不存在视为没有安装任何包

        Raises:
            DirectoryError: 根目录无法读取
        """
        root = Path(self.config.packages_dir)
        if not root.exists():
            return []
        try:
            return sorted(p.name for p in root.iterdir() if p.is_dir())
        except OSError as e:
            raise DirectoryError(f"Directory {root} can not be read: {e}", root) from e

    def info(self) -> list[PackageStatus]:
        """已定义与已安装包的并集，按 ID 排序"""
        defined = {d.id: d for d in self.definitions}
        installed = set(self.installed_ids())
        root = Path(self.config.packages_dir)

        statuses = []
        for pid in sorted(set(defined) | installed):
            package_def = defined.get(pid)
            if package_def is not None:
                name, version = package_def.name, package_def.version
            else:
                name, _, version = pid.rpartition("@")
            size = None
            if pid in installed:
                try:
                    size = dir_size(root / pid)
                except OSError as e:
                    raise DirectoryError(
                        f"Directory {root / pid} can not be read: {e}", root / pid,
                    ) from e
            statuses.append(PackageStatus(
                id=pid, name=name or pid, version=version,
                defined=package_def is not None, size=size,
            ))
        return statuses
