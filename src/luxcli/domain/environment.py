"""Environment variable resolution and the per-invocation config struct."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, MutableMapping, Optional

NODE_ENV = "NODE_ENV"
PORT = "PORT"
REPL_MARKER = "NODE_REPL"

DEFAULT_NODE_ENV = "development"
DEFAULT_PORT = "4000"


@dataclass(frozen=True)
class EnvResolution:
    """Effective value of one variable and whether it must be written back."""

    key: str
    value: str
    persist: bool


def resolve_env(explicit: Any, existing: Optional[str], default: Any) -> tuple[str, bool]:
    """Return ``(effective, should_persist)`` for one variable.

    An explicit value wins whenever it is truthy. Without one, a non-empty value
    already in the process environment is kept as-is and never rewritten.
    Otherwise, including an exported but empty variable, the default applies.
    """

    if explicit:
        return str(explicit), True
    if existing:
        return existing, False
    return str(default), True


@dataclass(frozen=True)
class EnvBinding:
    """Ties an environment variable to the option that may override it.

    A binding without ``option`` always treats ``default`` as the explicit
    value, which is how fixed markers such as ``NODE_REPL`` are set.
    """

    key: str
    default: str
    option: Optional[str] = None

    def resolve(
        self,
        options: Mapping[str, Any],
        environ: Mapping[str, str],
        defaults: Mapping[str, str] | None = None,
    ) -> EnvResolution:
        if self.option is None:
            explicit: Any = self.default
        else:
            explicit = options.get(self.option)
        default = (defaults or {}).get(self.key, self.default)
        value, persist = resolve_env(explicit, environ.get(self.key), default)
        return EnvResolution(key=self.key, value=value, persist=persist)


def persist_env(resolutions: Iterable[EnvResolution], environ: MutableMapping[str, str]) -> list[str]:
    """Write pending resolutions into ``environ``; return the keys written."""

    written: list[str] = []
    for resolution in resolutions:
        if not resolution.persist:
            continue
        environ[resolution.key] = resolution.value
        written.append(resolution.key)
    return written


def resolve_env_var(
    key: str,
    explicit: Any,
    default: Any,
    environ: MutableMapping[str, str] | None = None,
) -> str:
    target = os.environ if environ is None else environ
    value, persist = resolve_env(explicit, target.get(key), default)
    persist_env([EnvResolution(key=key, value=value, persist=persist)], target)
    return value


@dataclass(frozen=True)
class InvocationConfig:
    """Everything a pipeline needs to know about the current invocation."""

    command: str
    cwd: Path
    options: Mapping[str, Any] = field(default_factory=dict)
    resolutions: tuple[EnvResolution, ...] = ()

    @classmethod
    def build(
        cls,
        command: str,
        cwd: Path,
        options: Mapping[str, Any],
        bindings: Iterable[EnvBinding],
        environ: Mapping[str, str],
        defaults: Mapping[str, str] | None = None,
    ) -> "InvocationConfig":
        resolutions = tuple(binding.resolve(options, environ, defaults) for binding in bindings)
        return cls(command=command, cwd=cwd, options=dict(options), resolutions=resolutions)

    @property
    def environment(self) -> dict[str, str]:
        return {resolution.key: resolution.value for resolution in self.resolutions}

    @property
    def strict(self) -> bool:
        return not self.options.get("use_weak", False)

    @property
    def skip_build(self) -> bool:
        return bool(self.options.get("skip_build", False))

    def option(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)
