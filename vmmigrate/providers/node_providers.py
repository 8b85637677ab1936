"""
Node.js 迁移提供器模块。

检测 nvm 和 fnm 安装的 Node.js 版本。
"""

import os
import re
from typing import List

from vmmigrate.core.interfaces import DetectedVersion, IMigrationProvider
from vmmigrate.core.path_utils import get_home_dir
from vmmigrate.providers._common import (
    any_dir_exists,
    first_existing_file,
    list_subdirs,
    strip_v_prefix,
)

NVM_WINDOWS_VERSION_PATTERN = re.compile(r'^v?\d+\.\d+\.\d+$')


class NvmProvider(IMigrationProvider):
    """Node Version Manager (nvm) 迁移提供器。"""

    def name(self) -> str:
        return "nvm"

    def display_name(self) -> str:
        return "Node Version Manager (nvm)"

    def runtime(self) -> str:
        return "node"

    def _unix_versions_dir(self, home: str) -> str:
        nvm_dir = os.environ.get("NVM_DIR") or os.path.join(home, ".nvm")
        return os.path.join(nvm_dir, "versions", "node")

    def _windows_dir(self, home: str) -> str:
        return os.path.join(home, "AppData", "Roaming", "nvm")

    def is_present(self) -> bool:
        home = get_home_dir()
        if home is None:
            return False
        return any_dir_exists([self._unix_versions_dir(home), self._windows_dir(home)])

    def detect_versions(self) -> List[DetectedVersion]:
        detected: List[DetectedVersion] = []
        home = get_home_dir()
        if home is None:
            return detected

        unix_dir = self._unix_versions_dir(home)
        for entry in list_subdirs(unix_dir):
            node_path = os.path.join(unix_dir, entry, "bin", "node")
            if os.path.isfile(node_path):
                detected.append(DetectedVersion(strip_v_prefix(entry), node_path, "nvm"))

        win_dir = self._windows_dir(home)
        for entry in list_subdirs(win_dir):
            if not NVM_WINDOWS_VERSION_PATTERN.match(entry):
                continue
            node_path = os.path.join(win_dir, entry, "node.exe")
            if os.path.isfile(node_path):
                detected.append(DetectedVersion(strip_v_prefix(entry), node_path, "nvm"))

        return detected

    def can_auto_uninstall(self) -> bool:
        return True

    def uninstall_command(self, version: str) -> str:
        return f"nvm uninstall {version}"

    def manual_instructions(self) -> str:
        return (
            "To manually remove an nvm-installed Node.js version:\n"
            "  1. Run: nvm uninstall <version>\n"
            "  2. Or manually delete the version directory from ~/.nvm/versions/node/"
        )


class FnmProvider(IMigrationProvider):
    """Fast Node Manager (fnm) 迁移提供器。"""

    def name(self) -> str:
        return "fnm"

    def display_name(self) -> str:
        return "Fast Node Manager (fnm)"

    def runtime(self) -> str:
        return "node"

    def _versions_dirs(self, home: str) -> List[str]:
        return [
            os.path.join(home, ".local", "share", "fnm", "node-versions"),
            os.path.join(home, ".fnm", "node-versions"),
            # macOS
            os.path.join(home, "Library", "Application Support", "fnm", "node-versions"),
        ]

    def is_present(self) -> bool:
        home = get_home_dir()
        if home is None:
            return False
        return any_dir_exists(self._versions_dirs(home))

    def detect_versions(self) -> List[DetectedVersion]:
        detected: List[DetectedVersion] = []
        home = get_home_dir()
        if home is None:
            return detected

        for versions_dir in self._versions_dirs(home):
            for entry in list_subdirs(versions_dir):
                version_dir = os.path.join(versions_dir, entry)
                node_path = first_existing_file([
                    os.path.join(version_dir, "installation", "bin", "node"),
                    os.path.join(version_dir, "installation", "node.exe"),
                    os.path.join(version_dir, "bin", "node"),
                    os.path.join(version_dir, "node.exe"),
                ])
                if node_path:
                    detected.append(DetectedVersion(strip_v_prefix(entry), node_path, "fnm"))

        return detected

    def can_auto_uninstall(self) -> bool:
        return True

    def uninstall_command(self, version: str) -> str:
        return f"fnm uninstall {version}"

    def manual_instructions(self) -> str:
        return (
            "To manually remove an fnm-installed Node.js version:\n"
            "  1. Run: fnm uninstall <version>\n"
            "  2. Or manually delete the version directory from ~/.local/share/fnm/node-versions/"
        )
