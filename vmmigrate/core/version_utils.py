"""
版本工具模块。

提供检测结果的版本号解析、排序和去重等工具函数。
"""

import os
import re
from typing import List

from vmmigrate.core.interfaces import DetectedVersion


def _parse_version(version_str: str) -> tuple:
    """
    解析版本字符串为可比较的元组。

    参数:
        version_str: 版本字符串

    返回:
        版本元组 (major, minor, patch, ...)
    """
    parts = re.findall(r'\d+', version_str)
    return tuple(int(p) for p in parts) if parts else (0,)


def sort_versions_desc(versions: List[DetectedVersion]) -> List[DetectedVersion]:
    """
    按版本号降序排列检测结果，版本相同时按路径排序。

    参数:
        versions: 检测结果列表

    返回:
        排序后的新列表
    """
    by_path = sorted(versions, key=lambda v: v.path)
    return sorted(by_path, key=lambda v: _parse_version(v.version), reverse=True)


def dedupe_by_path(versions: List[DetectedVersion]) -> List[DetectedVersion]:
    """
    按可执行文件路径去重，保留第一次出现的记录。

    参数:
        versions: 检测结果列表

    返回:
        去重后的新列表
    """
    seen = set()
    result = []
    for v in versions:
        key = os.path.normcase(os.path.normpath(v.path))
        if key in seen:
            continue
        seen.add(key)
        result.append(v)
    return result
