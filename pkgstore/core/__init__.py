"""核心层: 数据模型、解析、依赖、编译与安装器"""
