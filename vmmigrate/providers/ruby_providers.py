"""
Ruby 迁移提供器模块。

检测 rbenv、rvm、chruby、uru 管理的 Ruby 版本以及 PATH 中的系统 Ruby。
"""

import json
import os
import re
from typing import Any, Dict, List, Optional

from vmmigrate.core.interfaces import DetectedVersion, IMigrationProvider
from vmmigrate.core.path_utils import get_home_dir, look_path_excluding_shims
from vmmigrate.core.version_probe import DEFAULT_TIMEOUT, probe_version
from vmmigrate.providers._common import (
    IS_WINDOWS,
    any_dir_exists,
    list_subdirs,
    system_manual_instructions,
)
from vmmigrate.utils.logger import get_logger

logger = get_logger()

EXACT_VERSION_PATTERN = re.compile(r'^\d+\.\d+\.\d+$')
RUBY_DIR_PATTERN = re.compile(r'^ruby-(\d+\.\d+\.\d+)')
VERSION_IN_TEXT_PATTERN = re.compile(r'(\d+\.\d+\.\d+)')
RUBY_VERSION_OUTPUT = r'ruby\s+(\d+\.\d+\.\d+)'


def _ruby_executable() -> str:
    return "ruby.exe" if IS_WINDOWS else "ruby"


class RbenvProvider(IMigrationProvider):
    """rbenv 迁移提供器。"""

    def name(self) -> str:
        return "rbenv"

    def display_name(self) -> str:
        return "rbenv"

    def runtime(self) -> str:
        return "ruby"

    def _versions_dir(self, home: str) -> str:
        return os.path.join(home, ".rbenv", "versions")

    def is_present(self) -> bool:
        home = get_home_dir()
        if home is None:
            return False
        return os.path.isdir(self._versions_dir(home))

    def detect_versions(self) -> List[DetectedVersion]:
        detected: List[DetectedVersion] = []
        home = get_home_dir()
        if home is None:
            return detected

        versions_dir = self._versions_dir(home)
        for entry in list_subdirs(versions_dir):
            if not EXACT_VERSION_PATTERN.match(entry):
                continue
            ruby_path = os.path.join(versions_dir, entry, "bin", "ruby")
            if os.path.isfile(ruby_path):
                detected.append(DetectedVersion(entry, ruby_path, "rbenv"))

        return detected

    def can_auto_uninstall(self) -> bool:
        return True

    def uninstall_command(self, version: str) -> str:
        return f"rbenv uninstall {version}"

    def manual_instructions(self) -> str:
        return (
            "To manually remove an rbenv-installed Ruby version:\n"
            "  1. Run: rbenv uninstall <version>\n"
            "  2. Or manually delete the version directory from ~/.rbenv/versions/"
        )


class RvmProvider(IMigrationProvider):
    """Ruby Version Manager (rvm) 迁移提供器。"""

    def name(self) -> str:
        return "rvm"

    def display_name(self) -> str:
        return "Ruby Version Manager (rvm)"

    def runtime(self) -> str:
        return "ruby"

    def _rubies_dir(self, home: str) -> str:
        return os.path.join(home, ".rvm", "rubies")

    def is_present(self) -> bool:
        home = get_home_dir()
        if home is None:
            return False
        return os.path.isdir(self._rubies_dir(home))

    def detect_versions(self) -> List[DetectedVersion]:
        detected: List[DetectedVersion] = []
        home = get_home_dir()
        if home is None:
            return detected

        rubies_dir = self._rubies_dir(home)
        for entry in list_subdirs(rubies_dir):
            match = RUBY_DIR_PATTERN.match(entry)
            if not match:
                continue
            ruby_path = os.path.join(rubies_dir, entry, "bin", "ruby")
            if os.path.isfile(ruby_path):
                detected.append(DetectedVersion(match.group(1), ruby_path, "rvm"))

        return detected

    def can_auto_uninstall(self) -> bool:
        return True

    def uninstall_command(self, version: str) -> str:
        return f"rvm remove ruby-{version}"

    def manual_instructions(self) -> str:
        return (
            "To manually remove an rvm-installed Ruby version:\n"
            "  1. Run: rvm remove ruby-<version>\n"
            "  2. Or manually delete the version directory from ~/.rvm/rubies/"
        )


class ChrubyProvider(IMigrationProvider):
    """
    chruby 迁移提供器。

    chruby 本身不负责安装和卸载，只能给出手动删除说明。
    """

    def __init__(self, search_dirs: Optional[List[str]] = None):
        """
        初始化 chruby 提供器。

        参数:
            search_dirs: Ruby 安装目录列表，默认为 /opt/rubies 和 ~/.rubies
        """
        self._search_dirs = list(search_dirs) if search_dirs is not None else None

    def name(self) -> str:
        return "chruby"

    def display_name(self) -> str:
        return "chruby"

    def runtime(self) -> str:
        return "ruby"

    def _rubies_dirs(self) -> List[str]:
        if self._search_dirs is not None:
            return self._search_dirs
        dirs = ["/opt/rubies"]
        home = get_home_dir()
        if home is not None:
            dirs.append(os.path.join(home, ".rubies"))
        return dirs

    def is_present(self) -> bool:
        return any_dir_exists(self._rubies_dirs())

    def detect_versions(self) -> List[DetectedVersion]:
        detected: List[DetectedVersion] = []

        for rubies_dir in self._rubies_dirs():
            for entry in list_subdirs(rubies_dir):
                match = RUBY_DIR_PATTERN.match(entry)
                if not match:
                    continue
                ruby_path = os.path.join(rubies_dir, entry, "bin", "ruby")
                if os.path.isfile(ruby_path):
                    detected.append(DetectedVersion(match.group(1), ruby_path, "chruby"))

        return detected

    def can_auto_uninstall(self) -> bool:
        return False

    def uninstall_command(self, version: str) -> str:
        return ""

    def manual_instructions(self) -> str:
        return (
            "chruby does not manage installations. To remove a Ruby version:\n"
            "  1. Delete the version directory from ~/.rubies/ or /opt/rubies/\n"
            "  2. If it was installed with ruby-install, no other cleanup is needed"
        )


class UruProvider(IMigrationProvider):
    """
    uru 迁移提供器。

    读取 uru 的 rubies.json 注册表，检测结果的来源带有 uru 标签。
    """

    MANIFEST_NAME = "rubies.json"

    def name(self) -> str:
        return "uru"

    def display_name(self) -> str:
        return "uru"

    def runtime(self) -> str:
        return "ruby"

    def _uru_home(self) -> Optional[str]:
        uru_home = os.environ.get("URU_HOME")
        if uru_home:
            return uru_home
        home = get_home_dir()
        if home is None:
            return None
        return os.path.join(home, ".uru")

    def _load_manifest(self, manifest_path: str) -> Dict[str, Any]:
        """读取 rubies.json，文件缺失或内容无效时返回空字典。"""
        try:
            with open(manifest_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.debug(f"无法读取 uru 注册表 {manifest_path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        rubies = data.get("Rubies")
        return rubies if isinstance(rubies, dict) else {}

    def is_present(self) -> bool:
        uru_home = self._uru_home()
        if not uru_home:
            return False
        return os.path.isfile(os.path.join(uru_home, self.MANIFEST_NAME))

    def detect_versions(self) -> List[DetectedVersion]:
        detected: List[DetectedVersion] = []
        uru_home = self._uru_home()
        if not uru_home:
            return detected

        rubies = self._load_manifest(os.path.join(uru_home, self.MANIFEST_NAME))
        for tag in sorted(rubies):
            entry = rubies[tag]
            if not isinstance(entry, dict):
                continue
            ruby_home = entry.get("Home") or ""
            if not ruby_home:
                continue

            match = VERSION_IN_TEXT_PATTERN.search(str(entry.get("ID") or ""))
            if not match:
                continue

            ruby_path = os.path.join(ruby_home, _ruby_executable())
            if not os.path.isfile(ruby_path):
                continue

            detected.append(DetectedVersion(match.group(1), ruby_path, f"uru ({tag})"))

        return detected

    def can_auto_uninstall(self) -> bool:
        return True

    def uninstall_command(self, version: str) -> str:
        return f"uru admin rm {version}"

    def manual_instructions(self) -> str:
        return (
            "To remove a Ruby from uru's registry:\n"
            "  1. Run: uru admin rm <tag>\n"
            "  2. This only removes uru's reference, not the Ruby installation itself\n"
            "  3. To fully uninstall, also remove the Ruby directory manually"
        )


class SystemRubyProvider(IMigrationProvider):
    """系统 Ruby 迁移提供器。"""

    def __init__(self, shims_dir: Optional[str] = None, timeout: int = DEFAULT_TIMEOUT):
        """
        初始化系统 Ruby 提供器。

        参数:
            shims_dir: 需要排除的 shims 目录，默认为本工具的 shims 目录
            timeout: 版本探测超时时间（秒）
        """
        self._shims_dir = shims_dir
        self._timeout = timeout

    def name(self) -> str:
        return "system-ruby"

    def display_name(self) -> str:
        return "System Ruby"

    def runtime(self) -> str:
        return "ruby"

    def is_present(self) -> bool:
        return look_path_excluding_shims("ruby", self._shims_dir) is not None

    def detect_versions(self) -> List[DetectedVersion]:
        ruby_path = look_path_excluding_shims("ruby", self._shims_dir)
        if not ruby_path:
            return []

        version = probe_version(ruby_path, RUBY_VERSION_OUTPUT, timeout=self._timeout)
        if not version:
            return []
        return [DetectedVersion(version, ruby_path, "system", validated=True)]

    def can_auto_uninstall(self) -> bool:
        return False

    def uninstall_command(self, version: str) -> str:
        return ""

    def manual_instructions(self) -> str:
        return system_manual_instructions("Ruby", "ruby")
