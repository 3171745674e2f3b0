"""Local log of command outcomes (opt-out)."""

from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass, field
from typing import Any

import jsonschema

from luxcli.resources import load_telemetry_schema
from luxcli.settings import RuntimeSettings

_DISABLE_VALUES = {"0", "false", "no", "off"}

_OUTCOME_VALIDATOR: jsonschema.Draft202012Validator | None = None


def telemetry_enabled() -> bool:
    value = os.getenv("LUXCLI_TELEMETRY", "1").lower()
    return value not in _DISABLE_VALUES


@dataclass(frozen=True)
class CommandOutcome:
    """What one ``lux`` invocation did and how it ended."""

    command: str
    cwd: str
    exit_code: int
    duration_ms: float
    steps: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    error: str | None = None
    ts: float = field(default_factory=time.time)

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_record(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "command": self.command,
            "cwd": self.cwd,
            "steps": list(self.steps),
            "skipped": list(self.skipped),
            "exit_code": self.exit_code,
        }
        if self.error is not None:
            payload["error"] = self.error
        return {
            "ts": float(self.ts),
            "event": f"command.{self.command}",
            "level": "error" if self.failed else "info",
            "status": "error" if self.failed else "success",
            "component": "cli",
            "durationMs": max(self.duration_ms, 0.0),
            "payload": payload,
        }


def record_outcome(settings: RuntimeSettings, outcome: CommandOutcome) -> bool:
    """Append ``outcome`` to the log; False when disabled or the log is not writable."""

    if not telemetry_enabled():
        return False
    record = outcome.to_record()
    _outcome_validator().validate(record)
    try:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        with settings.telemetry_file.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record, ensure_ascii=False) + "\n")
    except OSError:
        return False
    return True


def _outcome_validator() -> jsonschema.Draft202012Validator:  # pragma: no cover - trivial cache
    global _OUTCOME_VALIDATOR
    if _OUTCOME_VALIDATOR is None:
        _OUTCOME_VALIDATOR = jsonschema.Draft202012Validator(load_telemetry_schema())
    return _OUTCOME_VALIDATOR
