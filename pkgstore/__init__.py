"""pkgstore - 基于文本数据库的极简包管理器"""

__version__ = "0.1.0"
