from __future__ import annotations

import os.path
from pathlib import Path

import pytest

from luxcli.domain.project import ProjectConfig, ProjectConfigError
from luxcli.handlers import HandlerKind, HandlerNotRegisteredError, HandlerRegistry
from luxcli.handlers import loader as handlers_loader
from luxcli.handlers.loader import load_handlers


class DummyEntryPoint:
    def __init__(self, name: str, target) -> None:
        self.name = name
        self._target = target

    def load(self):
        return self._target


def _build(strict: bool) -> str:
    return f"built strict={strict}"


def _serve(**kwargs) -> dict:
    return kwargs


def _seed_entry_points(monkeypatch: pytest.MonkeyPatch, *entries: DummyEntryPoint) -> None:
    monkeypatch.setattr(handlers_loader, "iter_entry_points", lambda: list(entries))


def test_load_handlers_from_entry_points(monkeypatch: pytest.MonkeyPatch) -> None:
    _seed_entry_points(monkeypatch, DummyEntryPoint("build", _build), DummyEntryPoint("serve", _serve))
    registry = load_handlers()
    assert registry.get(HandlerKind.BUILD) is _build
    assert registry.get(HandlerKind.SERVE) is _serve
    assert HandlerKind.TEST not in registry


def test_duplicate_entry_points_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    _seed_entry_points(monkeypatch, DummyEntryPoint("build", _build), DummyEntryPoint("build", _serve))
    with pytest.raises(ValueError):
        load_handlers()


def test_unknown_entry_point_name_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    _seed_entry_points(monkeypatch, DummyEntryPoint("deploy", _build))
    with pytest.raises(ValueError) as exc:
        load_handlers()
    assert "Unknown handler 'deploy'" in str(exc.value)


def test_project_config_overrides_entry_point(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _seed_entry_points(monkeypatch, DummyEntryPoint("build", _build))
    project = ProjectConfig(path=tmp_path / "lux.yaml", handlers={"build": "os.path:join"})
    registry = load_handlers(project)
    assert registry.get(HandlerKind.BUILD) is os.path.join


def test_project_config_unknown_handler(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _seed_entry_points(monkeypatch)
    project = ProjectConfig(path=tmp_path / "lux.yaml", handlers={"deploy": "os.path:join"})
    with pytest.raises(ProjectConfigError):
        load_handlers(project)


def test_project_config_unimportable_handler(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _seed_entry_points(monkeypatch)
    project = ProjectConfig(path=tmp_path / "lux.yaml", handlers={"build": "luxcli_missing_module:build"})
    with pytest.raises(ProjectConfigError) as exc:
        load_handlers(project)
    assert "build=luxcli_missing_module:build" in str(exc.value)


def test_missing_handler_error_names_the_operation() -> None:
    with pytest.raises(HandlerNotRegisteredError) as exc:
        HandlerRegistry().get(HandlerKind.DB_SEED)
    assert "dbseed" in str(exc.value)


def test_only_create_is_not_project_scoped() -> None:
    unscoped = [kind for kind in HandlerKind if not kind.project_scoped]
    assert unscoped == [HandlerKind.CREATE]
