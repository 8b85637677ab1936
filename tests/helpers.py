from __future__ import annotations

import os
import stat

from pathlib import Path

from vmmigrate.core.interfaces import IMigrationProvider


def touch_executable(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    mode = os.stat(path).st_mode
    os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def fake_version_script(path: Path, output: str) -> Path:
    return touch_executable(path, f'#!/bin/sh\necho "{output}"\n')


def assert_provider_contract(provider: IMigrationProvider, expected_name: str, runtime: str) -> None:
    assert provider.name() == expected_name
    assert provider.name() == provider.name()
    assert provider.display_name()
    assert provider.runtime() == runtime
    assert isinstance(provider.is_present(), bool)

    versions = provider.detect_versions()
    assert versions is not None
    assert isinstance(versions, list)

    if provider.can_auto_uninstall():
        assert provider.uninstall_command("1.0.0")
    else:
        assert provider.uninstall_command("1.0.0") == ""

    assert provider.manual_instructions()
