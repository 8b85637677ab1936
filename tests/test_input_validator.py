from __future__ import annotations

import pytest

from vmmigrate.utils.input_validator import InputValidationError
from vmmigrate.utils.input_validator import InputValidator


@pytest.mark.parametrize("name", ["nvm", "system-python", "pyenv_win", "uru2", "a.b"])
def test_validate_provider_name_accepts(name: str) -> None:
    assert InputValidator.validate_provider_name(name)


@pytest.mark.parametrize("name", ["", "   ", "Nvm", "-nvm", "n vm", "n" * 51])
def test_validate_provider_name_rejects(name: str) -> None:
    with pytest.raises(InputValidationError):
        InputValidator.validate_provider_name(name)


def test_validate_runtime_name() -> None:
    assert InputValidator.validate_runtime_name("node")

    with pytest.raises(InputValidationError):
        InputValidator.validate_runtime_name("no.de")


def test_sanitize_name() -> None:
    assert InputValidator.sanitize_name("  Node ") == "node"
    assert InputValidator.sanitize_name("") == ""


@pytest.mark.parametrize(
    "raw, expected",
    [("v22.0.0", "22.0.0"), (" 3.12.1 ", "3.12.1"), ("V1.0", "1.0"), ("vnext", "vnext"), ("", "")],
)
def test_sanitize_version_string(raw: str, expected: str) -> None:
    assert InputValidator.sanitize_version_string(raw) == expected


@pytest.mark.parametrize("version", ["22.0.0", "3.13.0rc1", "ruby-3.2.2", "1.0.0+build.5"])
def test_validate_version_string_accepts(version: str) -> None:
    assert InputValidator.validate_version_string(version)


@pytest.mark.parametrize("version", ["", "1.0 && rm", "`id`", "../1.0", "1" * 101])
def test_validate_version_string_rejects(version: str) -> None:
    with pytest.raises(InputValidationError):
        InputValidator.validate_version_string(version)


def test_safe_get_config_value() -> None:
    config = {"settings": {"shims_dir": "/s", "nested": {"x": 1}}}

    assert InputValidator.safe_get_config_value(config, "settings.shims_dir") == "/s"
    assert InputValidator.safe_get_config_value(config, "settings.nested.x") == 1
    assert InputValidator.safe_get_config_value(config, "settings.missing", "d") == "d"
    assert InputValidator.safe_get_config_value(config, "settings.shims_dir.x") is None
