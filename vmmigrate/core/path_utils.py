"""
路径工具模块。

提供用户目录解析和排除 shims 目录的 PATH 可执行文件查找功能。
"""

import os
import sys
from typing import List, Optional

from vmmigrate.utils.app_paths import get_app_home
from vmmigrate.utils.logger import get_logger

logger = get_logger()

SHIMS_DIR_NAME = "shims"


def get_home_dir() -> Optional[str]:
    """
    获取当前用户的主目录。

    返回:
        主目录路径，无法解析时返回 None
    """
    home = os.path.expanduser("~")
    if not home or home == "~":
        logger.debug("无法解析用户主目录")
        return None
    return home


def default_shims_dir() -> str:
    """返回本工具 shims 目录的默认路径。"""
    return str(get_app_home() / SHIMS_DIR_NAME)


def get_path_entries() -> List[str]:
    """
    获取 PATH 环境变量的所有非空条目。

    返回:
        PATH 条目列表
    """
    path_env = os.environ.get("PATH", "")
    return [entry for entry in path_env.split(os.pathsep) if entry.strip()]


def _normalize(path: str) -> str:
    return os.path.normcase(os.path.normpath(os.path.abspath(path)))


def _candidate_names(command: str) -> List[str]:
    if sys.platform != "win32":
        return [command]
    pathext = os.environ.get("PATHEXT", ".COM;.EXE;.BAT;.CMD")
    exts = [ext for ext in pathext.split(os.pathsep) if ext]
    if os.path.splitext(command)[1].upper() in (ext.upper() for ext in exts):
        return [command]
    return [command + ext.lower() for ext in exts]


def look_path_excluding_shims(command: str, shims_dir: Optional[str] = None) -> Optional[str]:
    """
    在 PATH 中查找可执行文件，跳过本工具的 shims 目录。

    避免把本工具自己的 shim 识别为系统安装。

    参数:
        command: 命令名称（如 python3）
        shims_dir: shims 目录，默认为 default_shims_dir()

    返回:
        可执行文件的完整路径，未找到返回 None
    """
    excluded = _normalize(shims_dir or default_shims_dir())
    names = _candidate_names(command)

    for entry in get_path_entries():
        if _normalize(entry) == excluded:
            logger.debug(f"跳过 shims 目录: {entry}")
            continue
        for name in names:
            candidate = os.path.join(entry, name)
            if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
                return candidate
    return None
