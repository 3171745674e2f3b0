from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SANDBOX_HOME = ROOT / ".test_place" / "global-home"
os.environ.setdefault("LUXCLI_HOME", str(SANDBOX_HOME))
SANDBOX_HOME.mkdir(parents=True, exist_ok=True)
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

MANAGED_VARS = ("NODE_ENV", "PORT", "NODE_REPL")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unset the variables the CLI writes; monkeypatch restores them afterwards."""

    for key in MANAGED_VARS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str = "app", dependencies: dict[str, str] | None = None) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        if dependencies is None:
            dependencies = {"lux-framework": "^1.2.0"}
        payload = {"name": name, "version": "0.0.1", "dependencies": dependencies}
        (root / "package.json").write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return root

    return _make


class HandlerRecorder:
    """Registers a coroutine for every handler kind and records each call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple, dict]] = []
        self._failures: dict = {}
        self._results: dict = {}

    def fail(self, kind, exc: Exception) -> None:
        self._failures[kind] = exc

    def returns(self, kind, value) -> None:
        self._results[kind] = value

    @property
    def names(self) -> list[str]:
        return [name for name, _, _ in self.calls]

    def registry(self, project=None):
        from luxcli.handlers import HandlerKind, HandlerRegistry

        registry = HandlerRegistry()
        for kind in HandlerKind:
            registry.register(kind, self._handler(kind))
        return registry

    def _handler(self, kind):
        async def handler(*args, **kwargs):
            self.calls.append((kind.value, args, kwargs))
            if kind in self._failures:
                raise self._failures[kind]
            return self._results.get(kind)

        return handler


@pytest.fixture
def recorder() -> HandlerRecorder:
    return HandlerRecorder()
