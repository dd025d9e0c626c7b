"""vendorsync - 依赖源码本地化（vendor 目录同步）工具"""

__version__ = "0.1.0"
