"""安装器模块

拆分说明:
- fetcher.py: 归档下载
- archive.py: 多格式解压与单目录判断
- copier.py: 复制到包目录
- installer.py: 安装状态机与命令分发
"""

from pkgstore.core.installer.installer import Installer, remove_directory

__all__ = ["Installer", "remove_directory"]
