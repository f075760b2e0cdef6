"""统一异常体系

所有业务异常继承 StoreError，替代散落的 ValueError / RuntimeError。
CLI 层据此映射退出码并输出友好提示，各异常携带结构化字段（偏移、包 ID、路径等），
消息文本保持与原有输出一致。
"""

from __future__ import annotations

from pathlib import Path


class StoreError(Exception):
    """包管理器基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigError(StoreError):
    """配置文件或数据库文件缺失、不可读"""

    code = "CONFIG_ERROR"


class ValidationError(StoreError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class ParseError(StoreError):
    """数据库文本语法/语义错误，offset 为字符偏移"""

    code = "PARSE_ERROR"

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(message)
        self.offset = offset

    def position(self, text: str) -> tuple[int, int]:
        """返回 (行, 列)，均从 1 开始"""
        from pkgstore.core.position import Position
        pos = Position.find(text, self.offset)
        return pos.line, pos.column


class DependencyError(StoreError):
    """依赖查询无法解析（不存在 / 不唯一 / 存在环）"""

    code = "DEPENDENCY_ERROR"

    def __init__(self, message: str, query: str = "") -> None:
        super().__init__(message)
        self.query = query


class PackageNotFoundError(StoreError):
    """命令行指定的包未在数据库中定义"""

    code = "PACKAGE_NOT_FOUND"

    def __init__(self, message: str, query: str = "") -> None:
        super().__init__(message)
        self.query = query


# =========================================================================
# 安装器异常
# =========================================================================


class InstallerError(StoreError):
    """安装流水线中的任一步骤失败"""

    code = "INSTALLER_ERROR"

    def __init__(self, message: str, package_id: str = "") -> None:
        super().__init__(message)
        self.package_id = package_id


class DirectoryError(InstallerError):
    """目录无法创建或删除"""

    code = "DIRECTORY_ERROR"

    def __init__(self, message: str, path: Path, package_id: str = "") -> None:
        super().__init__(message, package_id)
        self.path = path


class DownloadError(InstallerError):
    """下载失败: status 为 HTTP 状态码，传输层错误时为 None"""

    code = "DOWNLOAD_ERROR"

    def __init__(
        self, message: str, url: str,
        status: int | None = None, package_id: str = "",
    ) -> None:
        super().__init__(message, package_id)
        self.url = url
        self.status = status


class ExtractError(InstallerError):
    """归档解压失败"""

    code = "EXTRACT_ERROR"

    def __init__(self, message: str, archive: Path | None = None, package_id: str = "") -> None:
        super().__init__(message, package_id)
        self.archive = archive


class CopyError(InstallerError):
    """复制到包目录失败，source 为出错的源路径"""

    code = "COPY_ERROR"

    def __init__(self, message: str, source: Path, package_id: str = "") -> None:
        super().__init__(message, package_id)
        self.source = source


class ScriptError(InstallerError):
    """构建脚本以非零状态退出"""

    code = "SCRIPT_ERROR"

    def __init__(
        self, message: str, script: Path,
        returncode: int | None = None, stderr: str = "", package_id: str = "",
    ) -> None:
        super().__init__(message, package_id)
        self.script = script
        self.returncode = returncode
        self.stderr = stderr
