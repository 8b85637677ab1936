from __future__ import annotations

import json
import sys

from pathlib import Path

import pytest

from tests.helpers import assert_provider_contract
from tests.helpers import fake_version_script
from tests.helpers import touch_executable
from vmmigrate.providers import ChrubyProvider
from vmmigrate.providers import RbenvProvider
from vmmigrate.providers import RvmProvider
from vmmigrate.providers import SystemRubyProvider
from vmmigrate.providers import UruProvider
from vmmigrate.providers.ruby_providers import _ruby_executable


def _write_uru_manifest(uru_home: Path, rubies: dict) -> Path:
    uru_home.mkdir(parents=True, exist_ok=True)
    manifest = uru_home / "rubies.json"
    manifest.write_text(json.dumps({"Version": "1.0.0", "Rubies": rubies}), encoding="utf-8")
    return manifest


@pytest.mark.parametrize(
    "provider, name",
    [
        (RbenvProvider(), "rbenv"),
        (RvmProvider(), "rvm"),
        (UruProvider(), "uru"),
    ],
)
def test_contract(fake_home: Path, provider, name: str) -> None:
    assert_provider_contract(provider, name, "ruby")


def test_chruby_contract(tmp_path: Path) -> None:
    assert_provider_contract(ChrubyProvider(search_dirs=[str(tmp_path / "rubies")]), "chruby", "ruby")


def test_system_ruby_contract(fake_home: Path, empty_path: Path) -> None:
    assert_provider_contract(SystemRubyProvider(), "system-ruby", "ruby")


def test_rbenv_empty_home(fake_home: Path) -> None:
    provider = RbenvProvider()

    assert not provider.is_present()
    assert provider.detect_versions() == []


def test_rbenv_detects_exact_versions(fake_home: Path) -> None:
    versions_dir = fake_home / ".rbenv" / "versions"
    ruby = touch_executable(versions_dir / "3.2.2" / "bin" / "ruby")
    touch_executable(versions_dir / "3.3.0-preview1" / "bin" / "ruby")
    touch_executable(versions_dir / "jruby-9.4.5.0" / "bin" / "ruby")

    versions = RbenvProvider().detect_versions()

    assert [(v.version, v.path, v.source) for v in versions] == [("3.2.2", str(ruby), "rbenv")]
    assert RbenvProvider().uninstall_command("3.2.2") == "rbenv uninstall 3.2.2"


def test_rvm_detects_rubies(fake_home: Path) -> None:
    rubies = fake_home / ".rvm" / "rubies"
    ruby = touch_executable(rubies / "ruby-3.1.4" / "bin" / "ruby")
    touch_executable(rubies / "ruby-2.7.8-p225" / "bin" / "ruby")
    touch_executable(rubies / "default" / "bin" / "ruby")

    provider = RvmProvider()
    versions = provider.detect_versions()

    assert provider.is_present()
    assert sorted(v.version for v in versions) == ["2.7.8", "3.1.4"]
    assert next(v for v in versions if v.version == "3.1.4").path == str(ruby)
    assert provider.uninstall_command("3.1.4") == "rvm remove ruby-3.1.4"


def test_chruby_searches_dirs(tmp_path: Path) -> None:
    opt = tmp_path / "opt-rubies"
    home_rubies = tmp_path / "home-rubies"
    touch_executable(opt / "ruby-3.3.0" / "bin" / "ruby")
    touch_executable(home_rubies / "ruby-3.2.2" / "bin" / "ruby")
    touch_executable(home_rubies / "truffleruby-23.1.0" / "bin" / "ruby")

    provider = ChrubyProvider(search_dirs=[str(opt), str(home_rubies)])
    versions = provider.detect_versions()

    assert provider.is_present()
    assert [(v.version, v.source) for v in versions] == [("3.3.0", "chruby"), ("3.2.2", "chruby")]


def test_chruby_is_manual_only(tmp_path: Path) -> None:
    provider = ChrubyProvider(search_dirs=[str(tmp_path / "missing")])

    assert not provider.is_present()
    assert provider.detect_versions() == []
    assert not provider.can_auto_uninstall()
    assert provider.uninstall_command("3.2.2") == ""


def test_chruby_default_dirs_include_home(fake_home: Path) -> None:
    assert str(fake_home / ".rubies") in ChrubyProvider()._rubies_dirs()


def test_uru_reads_manifest(fake_home: Path, tmp_path: Path) -> None:
    ruby_home = tmp_path / "rubies" / "3.2.2" / "bin"
    ruby = touch_executable(ruby_home / _ruby_executable())
    _write_uru_manifest(fake_home / ".uru", {
        "322p53": {
            "ID": "3.2.2-p53",
            "TagLabel": "322p53",
            "Exe": "ruby",
            "Home": str(ruby_home),
            "GemHome": "",
            "Description": "ruby 3.2.2p53",
        },
        "missing": {"ID": "3.0.0", "Home": str(tmp_path / "gone")},
        "noid": {"ID": "", "Home": str(ruby_home)},
    })

    provider = UruProvider()
    versions = provider.detect_versions()

    assert provider.is_present()
    assert len(versions) == 1
    assert versions[0].version == "3.2.2"
    assert versions[0].path == str(ruby)
    assert versions[0].source == "uru (322p53)"


def test_uru_honours_uru_home(fake_home: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ruby_home = tmp_path / "ruby" / "bin"
    touch_executable(ruby_home / _ruby_executable())
    uru_home = tmp_path / "custom-uru"
    _write_uru_manifest(uru_home, {"330": {"ID": "3.3.0", "Home": str(ruby_home)}})
    monkeypatch.setenv("URU_HOME", str(uru_home))

    assert [v.version for v in UruProvider().detect_versions()] == ["3.3.0"]


@pytest.mark.parametrize("content", ["{not json", "[]", json.dumps({"Rubies": []})])
def test_uru_invalid_manifest(fake_home: Path, content: str) -> None:
    uru_home = fake_home / ".uru"
    uru_home.mkdir()
    (uru_home / "rubies.json").write_text(content, encoding="utf-8")

    provider = UruProvider()

    assert provider.is_present()
    assert provider.detect_versions() == []


def test_uru_missing_manifest(fake_home: Path) -> None:
    (fake_home / ".uru").mkdir()

    provider = UruProvider()

    assert not provider.is_present()
    assert provider.detect_versions() == []
    assert provider.uninstall_command("322p53") == "uru admin rm 322p53"


def test_system_ruby_absent(fake_home: Path, empty_path: Path) -> None:
    provider = SystemRubyProvider()

    assert not provider.is_present()
    assert provider.detect_versions() == []


@pytest.mark.skipif(sys.platform == "win32", reason="uses /bin/sh scripts")
def test_system_ruby_probes_version(fake_home: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ruby = fake_version_script(tmp_path / "bin" / "ruby", "ruby 3.3.0 (2023-12-25 revision 5124f9ac75) [x86_64-linux]")
    monkeypatch.setenv("PATH", str(tmp_path / "bin"))

    versions = SystemRubyProvider(shims_dir=str(tmp_path / "shims")).detect_versions()

    assert [(v.version, v.path, v.source, v.validated) for v in versions] == [
        ("3.3.0", str(ruby), "system", True),
    ]
