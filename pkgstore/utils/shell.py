"""Shell 命令执行工具 — 统一子进程调用

通过 CommandExecutor 协议抽象子进程执行，方便测试替换。
工作目录与环境变量经 ScriptContext 显式传入子进程，
不修改当前进程的 os.environ / cwd，多次或并发调用互不干扰。
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


# =========================================================================
# 执行上下文与结果
# =========================================================================

@dataclass(frozen=True)
class ScriptContext:
    """子进程执行上下文: 工作目录 + 叠加到当前环境之上的变量"""

    cwd: Path
    env: dict[str, str] = field(default_factory=dict)

    def environ(self) -> dict[str, str]:
        """合并后的完整环境"""
        return {**os.environ, **self.env}


@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 — 抽象子进程调用

    capture=False 时子进程直接继承调用方的 stdout/stderr，
    返回结果中的输出为空字符串。
    """

    def execute(
        self,
        cmd: list[str],
        *,
        context: ScriptContext,
        capture: bool = True,
        timeout: int | None = None,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...


# =========================================================================
# 默认实现: 本地执行器
# =========================================================================

class LocalExecutor:
    """本地子进程执行器（默认实现）"""

    def execute(
        self,
        cmd: list[str],
        *,
        context: ScriptContext,
        capture: bool = True,
        timeout: int | None = None,
    ) -> CommandResult:
        logger.debug("执行: %s (cwd=%s)", " ".join(cmd), context.cwd)
        # 输出可能不是 UTF-8（其他 locale 的编译器输出、二进制内容）
        r = subprocess.run(
            cmd, capture_output=capture, encoding="utf-8", errors="replace",
            cwd=str(context.cwd), env=context.environ(),
            check=False, timeout=timeout,
        )
        return CommandResult(
            returncode=r.returncode,
            stdout=r.stdout or "",
            stderr=r.stderr or "",
        )


# =========================================================================
# 全局默认执行器（可替换）
# =========================================================================

_default_executor: CommandExecutor = LocalExecutor()


def get_executor() -> CommandExecutor:
    """获取全局默认命令执行器"""
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    """替换全局默认命令执行器（用于测试或远程执行场景）"""
    global _default_executor  # noqa: PLW0603
    _default_executor = executor
