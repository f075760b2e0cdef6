"""单个包的安装器

状态流转: 初始化 -> 包目录已创建 -> 逐条执行命令 -> 完成；
任一命令失败时由调用方执行 delete_directory() 回滚。

每个命令成功后返回一条可读消息，失败抛出 InstallerError 子类，
异常上的 package_id 统一在 exec_command 中补齐。
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable

from pkgstore.core.exceptions import (
    DirectoryError,
    ExtractError,
    InstallerError,
    ScriptError,
)
from pkgstore.core.installer.archive import extract, unpacked_root
from pkgstore.core.installer.copier import copy_entries
from pkgstore.core.installer.fetcher import download
from pkgstore.core.models import (
    Command,
    Copy,
    Download,
    Extract,
    InstallerLayout,
    InstallerState,
    Package,
    Shell,
)
from pkgstore.utils.shell import CommandExecutor, ScriptContext, get_executor
from pkgstore.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)


def remove_directory(path: Path) -> bool:
    """递归删除目录，返回删除前是否存在

    Raises:
        DirectoryError: 删除失败
    """
    if not path.exists() and not path.is_symlink():
        return False
    try:
        if path.is_symlink():
            path.unlink()
        else:
            shutil.rmtree(path)
    except OSError as e:
        raise DirectoryError(f"Directory {path} can not be deleted: {e}", path) from e
    return True


def _ensure_directory(path: Path, package_id: str) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryError(
            f"Directory {path} can not be created: {e}", path, package_id,
        ) from e


class Installer:
    """驱动一个编译后的包完成安装

    用法:
        installer = Installer.init(packages_root, work_root, package)
        if not installer.is_installed():
            installer.create_directory()
            for command in package.commands:
                installer.exec_command(command)
    """

    def __init__(
        self,
        package: Package,
        layout: InstallerLayout,
        executor: CommandExecutor | None = None,
    ) -> None:
        self.package = package
        self.layout = layout
        self.executor = executor or get_executor()
        self.state = InstallerState(current_dir=layout.extract_dir)
        self._handlers: dict[type, Callable[[Command, bool], str]] = {
            Download: self._download,
            Extract: self._extract,
            Copy: self._copy,
            Shell: self._shell,
        }

    @classmethod
    def init(
        cls,
        packages_root: str | Path,
        work_root: str | Path,
        package: Package,
        executor: CommandExecutor | None = None,
    ) -> Installer:
        """计算规范化路径并创建下载/解压目录

        Raises:
            DirectoryError: 目录无法创建
        """
        installer_dir = Path(work_root).resolve() / package.id
        layout = InstallerLayout(
            package_id=package.id,
            package_dir=Path(packages_root).resolve() / package.id,
            installer_dir=installer_dir,
            download_dir=installer_dir / "download",
            extract_dir=installer_dir / "extract",
        )
        for path in (layout.download_dir, layout.extract_dir):
            _ensure_directory(path, package.id)
        return cls(package, layout, executor)

    # =====================================================================
    # 包目录
    # =====================================================================

    def is_installed(self) -> bool:
        return self.layout.package_dir.exists()

    def create_directory(self) -> str:
        path = self.layout.package_dir
        _ensure_directory(path, self.package.id)
        return f"Directory {path} has been created"

    def delete_directory(self) -> str:
        path = self.layout.package_dir
        try:
            existed = remove_directory(path)
        except DirectoryError as e:
            e.package_id = self.package.id
            raise
        if existed:
            return f"Directory {path} has been deleted"
        return f"Directory {path} does not exist"

    # =====================================================================
    # 命令执行
    # =====================================================================

    def exec_command(self, command: Command, verbose: bool = False) -> str:
        """执行一条安装命令，返回成功消息

        Raises:
            InstallerError: 命令失败，package_id 已填充
        """
        handler = self._handlers[type(command)]
        try:
            message = handler(command, verbose)
        except InstallerError as e:
            if not e.package_id:
                e.package_id = self.package.id
            raise
        logger.info("%s", message, extra={"package": self.package.id})
        return message

    def _download(self, command: Download, verbose: bool) -> str:
        path, cached = download(command.url, self.layout.download_dir)
        self.state.download_file = path
        if cached:
            return f"File {path} already downloaded"
        return f"File {path} has been written"

    def _extract(self, command: Extract, verbose: bool) -> str:
        archive = self.state.download_file
        if archive is None:
            raise ExtractError("Download file has not been set")
        extract_dir = self.layout.extract_dir
        # 上次失败残留的内容会干扰单目录判断
        remove_directory(extract_dir)
        extract(archive, command.format, extract_dir)
        self.state.current_dir = unpacked_root(extract_dir)
        return f"Extracted file in {self.state.current_dir}"

    def _copy(self, command: Copy, verbose: bool) -> str:
        src, dst = self.state.current_dir, self.layout.package_dir
        count = copy_entries(src, dst)
        logger.debug("复制了 %d 个条目", count)
        return f"Copying files from {src} to {dst}"

    def _shell(self, command: Shell, verbose: bool) -> str:
        script = self.layout.script_file
        try:
            atomic_write(script, command.script)
        except OSError as e:
            raise ScriptError(f"Script {script} can not be written: {e}", script) from e

        context = ScriptContext(cwd=self.state.current_dir, env=self._script_env())
        try:
            result = self.executor.execute(
                ["bash", "-eu", str(script)], context=context, capture=not verbose,
            )
        except OSError as e:
            raise ScriptError(f"Script {script} can not be executed: {e}", script) from e
        if not result.success:
            raise ScriptError(
                result.stderr.strip(), script,
                returncode=result.returncode, stderr=result.stderr,
            )
        return f"Script {script} executed with success"

    def _script_env(self) -> dict[str, str]:
        package_dir = self.layout.package_dir
        env = {
            "PACKAGE_DIR": str(package_dir),
            "PACKAGES_DIR": str(package_dir.parent),
        }
        if self.state.download_file is not None:
            env["DOWNLOAD_FILE"] = str(self.state.download_file)
        return env
