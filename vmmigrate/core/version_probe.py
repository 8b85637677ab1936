"""
版本探测模块。

通过执行可执行文件的版本命令并解析输出来确认真实版本。
"""

import re
import subprocess
import sys
from typing import Any, Dict, Optional, Sequence

from vmmigrate.utils.logger import get_logger

logger = get_logger()

DEFAULT_TIMEOUT = 10


def _hidden_window_kwargs() -> Dict[str, Any]:
    """Windows 下隐藏子进程控制台窗口所需的参数。"""
    if sys.platform != "win32":
        return {}
    startupinfo = subprocess.STARTUPINFO()
    startupinfo.dwFlags |= subprocess.STARTF_USESHOWWINDOW
    startupinfo.wShowWindow = subprocess.SW_HIDE
    return {"startupinfo": startupinfo, "creationflags": subprocess.CREATE_NO_WINDOW}


def probe_version(
    executable: str,
    pattern: str,
    args: Sequence[str] = ("--version",),
    timeout: int = DEFAULT_TIMEOUT,
) -> Optional[str]:
    """
    执行可执行文件的版本命令并解析版本号。

    参数:
        executable: 可执行文件路径
        pattern: 版本正则表达式，第一个分组为版本号
        args: 版本命令参数，默认为 --version
        timeout: 超时时间（秒）

    返回:
        版本字符串，获取失败返回 None
    """
    if not executable:
        return None

    cmd = [executable, *args]
    logger.debug(f"执行命令获取版本: {cmd}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            **_hidden_window_kwargs(),
        )
    except subprocess.TimeoutExpired:
        logger.warning(f"获取 {executable} 版本超时 ({timeout}秒)")
        return None
    except FileNotFoundError as e:
        logger.debug(f"文件未找到: {e}")
        return None
    except PermissionError as e:
        logger.warning(f"权限不足，无法执行命令: {e}")
        return None
    except OSError as e:
        logger.warning(f"执行 {executable} 失败: {e}")
        return None

    output = (result.stdout or "") + (result.stderr or "")
    match = re.search(pattern, output, re.IGNORECASE)
    if match:
        version = match.group(1)
        logger.debug(f"成功获取 {executable} 版本: {version}")
        return version

    logger.debug(f"无法从输出中解析 {executable} 版本")
    return None
