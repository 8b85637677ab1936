"""
Python 迁移提供器模块。

检测 pyenv（含 pyenv-win）安装的版本以及 PATH 中的系统 Python。
"""

import os
import re
from typing import List, Optional

from vmmigrate.core.interfaces import DetectedVersion, IMigrationProvider
from vmmigrate.core.path_utils import get_home_dir, look_path_excluding_shims
from vmmigrate.core.version_probe import DEFAULT_TIMEOUT, probe_version
from vmmigrate.providers._common import (
    any_dir_exists,
    first_existing_file,
    list_subdirs,
    system_manual_instructions,
)

PYENV_VERSION_PATTERN = re.compile(r'^\d+\.\d+\.\d+')
PYTHON_VERSION_OUTPUT = r'Python\s+(\d+\.\d+\.\d+)'


class PyenvProvider(IMigrationProvider):
    """pyenv 迁移提供器。"""

    def name(self) -> str:
        return "pyenv"

    def display_name(self) -> str:
        return "pyenv"

    def runtime(self) -> str:
        return "python"

    def _unix_dir(self, home: str) -> str:
        return os.path.join(home, ".pyenv", "versions")

    def _windows_dir(self, home: str) -> str:
        return os.path.join(home, ".pyenv", "pyenv-win", "versions")

    def is_present(self) -> bool:
        home = get_home_dir()
        if home is None:
            return False
        return any_dir_exists([self._unix_dir(home), self._windows_dir(home)])

    def detect_versions(self) -> List[DetectedVersion]:
        detected: List[DetectedVersion] = []
        home = get_home_dir()
        if home is None:
            return detected

        unix_dir = self._unix_dir(home)
        for entry in list_subdirs(unix_dir):
            if not PYENV_VERSION_PATTERN.match(entry):
                continue
            version_dir = os.path.join(unix_dir, entry)
            python_path = first_existing_file([
                os.path.join(version_dir, "bin", "python"),
                os.path.join(version_dir, "bin", "python3"),
                os.path.join(version_dir, "python.exe"),
            ])
            if python_path:
                detected.append(DetectedVersion(entry, python_path, "pyenv"))

        win_dir = self._windows_dir(home)
        for entry in list_subdirs(win_dir):
            if not PYENV_VERSION_PATTERN.match(entry):
                continue
            python_path = os.path.join(win_dir, entry, "python.exe")
            if os.path.isfile(python_path):
                detected.append(DetectedVersion(entry, python_path, "pyenv"))

        return detected

    def can_auto_uninstall(self) -> bool:
        return True

    def uninstall_command(self, version: str) -> str:
        return f"pyenv uninstall {version}"

    def manual_instructions(self) -> str:
        return (
            "To manually remove a pyenv-installed Python version:\n"
            "  1. Run: pyenv uninstall <version>\n"
            "  2. Or manually delete the version directory from ~/.pyenv/versions/"
        )


class SystemPythonProvider(IMigrationProvider):
    """
    系统 Python 迁移提供器。

    在 PATH 中查找 python3 和 python（跳过本工具的 shims 目录），
    并通过执行 --version 确认版本。
    """

    COMMANDS = ("python3", "python")

    def __init__(self, shims_dir: Optional[str] = None, timeout: int = DEFAULT_TIMEOUT):
        """
        初始化系统 Python 提供器。

        参数:
            shims_dir: 需要排除的 shims 目录，默认为本工具的 shims 目录
            timeout: 版本探测超时时间（秒）
        """
        self._shims_dir = shims_dir
        self._timeout = timeout

    def name(self) -> str:
        return "system-python"

    def display_name(self) -> str:
        return "System Python"

    def runtime(self) -> str:
        return "python"

    def is_present(self) -> bool:
        return any(look_path_excluding_shims(cmd, self._shims_dir) for cmd in self.COMMANDS)

    def detect_versions(self) -> List[DetectedVersion]:
        detected: List[DetectedVersion] = []
        seen = set()

        for cmd in self.COMMANDS:
            python_path = look_path_excluding_shims(cmd, self._shims_dir)
            if not python_path or python_path in seen:
                continue
            seen.add(python_path)

            version = probe_version(python_path, PYTHON_VERSION_OUTPUT, timeout=self._timeout)
            if version:
                detected.append(DetectedVersion(version, python_path, "system", validated=True))

        return detected

    def can_auto_uninstall(self) -> bool:
        return False

    def uninstall_command(self, version: str) -> str:
        return ""

    def manual_instructions(self) -> str:
        return system_manual_instructions("Python", "python3")
