"""
提供器公共工具模块。

封装各提供器共用的目录扫描逻辑：不存在的目录视为"未安装"，
存在但无法读取的目录作为 DetectionError 抛出。
"""

import os
import sys
from typing import Iterable, List, Optional

from vmmigrate.core.interfaces import DetectionError
from vmmigrate.utils.logger import get_logger

logger = get_logger()

IS_WINDOWS = sys.platform == "win32"


def list_subdirs(path: str) -> List[str]:
    """
    列出目录下的子目录名称（按名称排序）。

    参数:
        path: 目录路径

    返回:
        子目录名称列表，目录不存在时返回空列表

    抛出:
        DetectionError: 目录存在但无法读取
    """
    try:
        with os.scandir(path) as it:
            names = [entry.name for entry in it if entry.is_dir()]
    except (FileNotFoundError, NotADirectoryError):
        return []
    except OSError as e:
        logger.warning(f"无法读取目录 {path}: {e}")
        raise DetectionError(f"无法读取目录 {path}: {e}") from e
    return sorted(names)


def first_existing_file(paths: Iterable[str]) -> Optional[str]:
    """返回第一个存在的文件路径，都不存在时返回 None。"""
    for path in paths:
        if os.path.isfile(path):
            return path
    return None


def any_dir_exists(paths: Iterable[str]) -> bool:
    """检查是否至少有一个目录存在。"""
    return any(os.path.isdir(path) for path in paths)


def strip_v_prefix(name: str) -> str:
    """去掉版本目录名前导的 v（如 v22.0.0 -> 22.0.0）。"""
    if name.startswith("v"):
        return name[1:]
    return name


def system_manual_instructions(runtime_display: str, package: str) -> str:
    """
    生成系统安装的手动卸载说明，内容随操作系统变化。

    参数:
        runtime_display: 运行时显示名称（如 Python）
        package: 包管理器中的包名（如 python3）

    返回:
        手动卸载说明
    """
    if sys.platform == "win32":
        return (
            "To uninstall:\n"
            "  1. Open Settings → Apps → Installed apps\n"
            f"  2. Search for {runtime_display}\n"
            "  3. Click Uninstall\n"
            "  Or use PowerShell to find and run the uninstaller"
        )
    if sys.platform == "darwin":
        return (
            "To uninstall:\n"
            f"  If installed via Homebrew: brew uninstall {package}\n"
            "  If installed via package: check /Applications or use the installer's uninstaller\n"
            "  Or manually remove from /usr/local/bin/"
        )
    if sys.platform.startswith("linux"):
        return (
            "To uninstall:\n"
            f"  If installed via apt: sudo apt remove {package}\n"
            f"  If installed via yum: sudo yum remove {package}\n"
            f"  If installed via dnf: sudo dnf remove {package}"
        )
    return f"Please use your system's package manager to uninstall {runtime_display}"
