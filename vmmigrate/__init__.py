"""
vmmigrate - 检测并清理其他版本管理器安装的运行时版本。
"""

__version__ = "0.1.0"
