"""服务层: 面向 CLI 的编排入口"""
