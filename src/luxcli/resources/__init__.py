"""Packaged resources for the lux CLI."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict

__all__ = ["load_telemetry_schema"]


@lru_cache(maxsize=1)
def load_telemetry_schema() -> Dict[str, Any]:
    """Return the JSON Schema every command outcome record must satisfy."""

    schema = resources.files(__name__) / "telemetry.schema.json"
    return json.loads(schema.read_text("utf-8"))
