"""
应用程序路径模块。

提供应用程序主目录的定位功能。
"""

import os
from pathlib import Path

APP_HOME_ENV = "VMMIGRATE_HOME"
APP_DIR_NAME = ".vmmigrate"


def get_app_home() -> Path:
    """
    获取应用程序主目录路径。

    优先使用 VMMIGRATE_HOME 环境变量，否则为用户目录下的 .vmmigrate。

    返回:
        应用程序主目录的 Path 对象
    """
    override = os.environ.get(APP_HOME_ENV)
    if override:
        return Path(override)
    return Path(os.path.expanduser("~")) / APP_DIR_NAME
