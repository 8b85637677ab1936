from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pytest

from vmmigrate.core.interfaces import DetectedVersion, DetectionError, IMigrationProvider
from vmmigrate.core.registry import MigrationRegistry


class FakeProvider(IMigrationProvider):
    def __init__(
        self,
        name: str,
        runtime: str = "node",
        present: bool = True,
        versions: Optional[List[DetectedVersion]] = None,
        auto_uninstall: bool = False,
        command: str = "",
        error: Optional[str] = None,
    ) -> None:
        self._name = name
        self._runtime = runtime
        self._present = present
        self._versions = versions or []
        self._auto_uninstall = auto_uninstall
        self._command = command
        self._error = error
        self.detect_calls = 0

    def name(self) -> str:
        return self._name

    def display_name(self) -> str:
        return self._name.upper()

    def runtime(self) -> str:
        return self._runtime

    def is_present(self) -> bool:
        return self._present

    def detect_versions(self) -> List[DetectedVersion]:
        self.detect_calls += 1
        if self._error:
            raise DetectionError(self._error)
        return list(self._versions)

    def can_auto_uninstall(self) -> bool:
        return self._auto_uninstall

    def uninstall_command(self, version: str) -> str:
        if not self._auto_uninstall:
            return ""
        return self._command.format(version=version)

    def manual_instructions(self) -> str:
        return f"Remove {self._name} versions by hand"


@pytest.fixture
def registry() -> MigrationRegistry:
    return MigrationRegistry()


@pytest.fixture
def fake_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("VMMIGRATE_HOME", str(tmp_path / "app"))
    monkeypatch.delenv("NVM_DIR", raising=False)
    monkeypatch.delenv("URU_HOME", raising=False)
    return home


@pytest.fixture
def empty_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    bin_dir = tmp_path / "empty-bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", str(bin_dir))
    return bin_dir
