from __future__ import annotations

import subprocess

from pathlib import Path

import pytest

from tests.conftest import FakeProvider
from vmmigrate.core import migration_manager
from vmmigrate.core.config_manager import ConfigManager
from vmmigrate.core.interfaces import DetectedVersion
from vmmigrate.core.migration_manager import CleanupPlan
from vmmigrate.core.migration_manager import MigrationManager
from vmmigrate.core.migration_manager import UninstallError
from vmmigrate.core.registry import MigrationRegistry
from vmmigrate.core.registry import ProviderNotFoundError
from vmmigrate.utils.input_validator import InputValidationError


def _node_versions() -> list[DetectedVersion]:
    return [
        DetectedVersion("18.19.0", "/home/u/.nvm/versions/node/v18.19.0/bin/node", "nvm"),
        DetectedVersion("22.0.0", "/home/u/.nvm/versions/node/v22.0.0/bin/node", "nvm"),
    ]


@pytest.fixture
def manager(registry: MigrationRegistry) -> MigrationManager:
    registry.register(FakeProvider("nvm", runtime="node", versions=_node_versions(),
                                   auto_uninstall=True, command="nvm uninstall {version}"))
    registry.register(FakeProvider("fnm", runtime="node", present=False))
    registry.register(FakeProvider("pyenv", runtime="python"))
    return MigrationManager(registry)


def test_runtimes(manager: MigrationManager) -> None:
    assert manager.runtimes() == ["node", "python"]


def test_providers_for_sorted(manager: MigrationManager) -> None:
    assert [p.name() for p in manager.providers_for("node")] == ["fnm", "nvm"]
    assert [p.name() for p in manager.providers_for()] == ["fnm", "nvm", "pyenv"]
    assert manager.providers_for("ruby") == []


def test_providers_for_skips_disabled(registry: MigrationRegistry, tmp_path: Path) -> None:
    registry.register(FakeProvider("nvm"))
    registry.register(FakeProvider("fnm"))
    config = ConfigManager(tmp_path / "config.json")
    config.set_setting("disabled_providers", ["fnm"])

    manager = MigrationManager(registry, config)

    assert [p.name() for p in manager.providers_for("node")] == ["nvm"]


def test_scan_orders_versions(manager: MigrationManager) -> None:
    results = manager.scan("node")

    assert [r.provider for r in results] == ["fnm", "nvm"]
    nvm = results[1]
    assert nvm.present
    assert nvm.error is None
    assert [v.version for v in nvm.versions] == ["22.0.0", "18.19.0"]


def test_scan_skips_detection_when_absent(registry: MigrationRegistry) -> None:
    absent = FakeProvider("fnm", present=False, versions=_node_versions())
    registry.register(absent)

    result = MigrationManager(registry).scan("node")[0]

    assert not result.present
    assert result.versions == []
    assert absent.detect_calls == 0


def test_scan_records_detection_error(registry: MigrationRegistry) -> None:
    registry.register(FakeProvider("nvm", error="permission denied"))
    registry.register(FakeProvider("fnm", versions=_node_versions()[:1]))

    results = MigrationManager(registry).scan("node")

    by_name = {r.provider: r for r in results}
    assert by_name["nvm"].error == "permission denied"
    assert by_name["nvm"].versions == []
    assert len(by_name["fnm"].versions) == 1


def test_scan_result_to_dict(manager: MigrationManager) -> None:
    data = manager.scan("node")[1].to_dict()

    assert data["provider"] == "nvm"
    assert data["display_name"] == "NVM"
    assert data["runtime"] == "node"
    assert data["versions"][0]["version"] == "22.0.0"
    assert data["error"] is None


def test_detected_versions_merges_and_dedupes(registry: MigrationRegistry) -> None:
    shared = DetectedVersion("20.0.0", "/usr/bin/node", "system")
    registry.register(FakeProvider("a", versions=[shared]))
    registry.register(FakeProvider("b", versions=[DetectedVersion("20.0.0", "/usr/bin/node", "b"),
                                                  DetectedVersion("21.0.0", "/opt/node", "b")]))

    versions = MigrationManager(registry).detected_versions("node")

    assert [str(v) for v in versions] == ["v21.0.0 (b) /opt/node", "v20.0.0 (system) /usr/bin/node"]


def test_plan_cleanup_automatable(manager: MigrationManager) -> None:
    plan = manager.plan_cleanup("nvm", "v22.0.0")

    assert plan == CleanupPlan(
        provider="nvm",
        version="22.0.0",
        command="nvm uninstall 22.0.0",
        instructions="Remove nvm versions by hand",
    )
    assert plan.automatable


def test_plan_cleanup_manual(manager: MigrationManager) -> None:
    plan = manager.plan_cleanup("pyenv", "3.12.1")

    assert plan.command == ""
    assert not plan.automatable
    assert plan.instructions


def test_plan_cleanup_unknown_provider(manager: MigrationManager) -> None:
    with pytest.raises(ProviderNotFoundError):
        manager.plan_cleanup("asdf", "1.0.0")


@pytest.mark.parametrize("version", ["1.0.0; rm -rf /", "", "$(whoami)"])
def test_plan_cleanup_rejects_bad_version(manager: MigrationManager, version: str) -> None:
    with pytest.raises(InputValidationError):
        manager.plan_cleanup("nvm", version)


def test_execute_cleanup_manual_plan(manager: MigrationManager) -> None:
    with pytest.raises(UninstallError):
        manager.execute_cleanup(manager.plan_cleanup("pyenv", "3.12.1"))


def test_execute_cleanup_runs_without_shell(manager: MigrationManager, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_run(args, **kwargs):
        calls.append((args, kwargs))
        return subprocess.CompletedProcess(args, 0)

    monkeypatch.setattr(migration_manager.subprocess, "run", fake_run)

    manager.execute_cleanup(manager.plan_cleanup("nvm", "22.0.0"))

    assert calls == [(["nvm", "uninstall", "22.0.0"], {})]


def test_execute_cleanup_nonzero_exit(manager: MigrationManager, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        migration_manager.subprocess, "run",
        lambda args, **kwargs: subprocess.CompletedProcess(args, 3),
    )

    with pytest.raises(UninstallError, match="3"):
        manager.execute_cleanup(manager.plan_cleanup("nvm", "22.0.0"))


def test_execute_cleanup_missing_command(manager: MigrationManager, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(args, **kwargs):
        raise FileNotFoundError(args[0])

    monkeypatch.setattr(migration_manager.subprocess, "run", fake_run)

    with pytest.raises(UninstallError):
        manager.execute_cleanup(manager.plan_cleanup("nvm", "22.0.0"))


class CrashingProvider(FakeProvider):
    def detect_versions(self) -> list[DetectedVersion]:
        raise RuntimeError("unexpected layout")


def test_scan_contains_unexpected_provider_error(registry: MigrationRegistry) -> None:
    registry.register(CrashingProvider("fnm"))
    registry.register(FakeProvider("nvm", versions=_node_versions()))

    results = MigrationManager(registry).scan("node")

    by_name = {r.provider: r for r in results}
    assert by_name["fnm"].error == "RuntimeError: unexpected layout"
    assert by_name["fnm"].versions == []
    assert len(by_name["nvm"].versions) == 2


def test_collect_versions_uses_given_results(manager: MigrationManager) -> None:
    results = manager.scan("node")
    nvm = manager.registry.get("nvm")
    calls = nvm.detect_calls

    versions = manager.collect_versions(results)

    assert [v.version for v in versions] == ["22.0.0", "18.19.0"]
    assert nvm.detect_calls == calls
