"""Handler registry backing the command gateway."""

from __future__ import annotations

from enum import Enum
from importlib import metadata
from typing import Any, Callable, Dict, Iterable, ItemsView

ENTRY_POINT_GROUP = "luxcli.handlers"

Handler = Callable[..., Any]


class HandlerKind(str, Enum):
    CREATE = "create"
    TEST = "test"
    BUILD = "build"
    REPL = "repl"
    SERVE = "serve"
    GENERATE = "generate"
    DESTROY = "destroy"
    DB_CREATE = "dbcreate"
    DB_DROP = "dbdrop"
    DB_MIGRATE = "dbmigrate"
    DB_ROLLBACK = "dbrollback"
    DB_SEED = "dbseed"

    @property
    def project_scoped(self) -> bool:
        """Every operation except scaffolding a new app needs a Lux project."""

        return self is not HandlerKind.CREATE

    @classmethod
    def parse(cls, name: str) -> "HandlerKind":
        try:
            return cls(name)
        except ValueError:
            known = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown handler '{name}'. Expected one of {known}") from None


class HandlerNotRegisteredError(RuntimeError):
    pass


class HandlerRegistry:
    def __init__(self, handlers: Dict[HandlerKind, Handler] | None = None) -> None:
        self._handlers: Dict[HandlerKind, Handler] = dict(handlers or {})

    def register(self, kind: HandlerKind | str, handler: Handler, *, override: bool = False) -> None:
        if not isinstance(kind, HandlerKind):
            kind = HandlerKind.parse(kind)
        if kind in self._handlers and not override:
            raise ValueError(f"Handler {kind.value} already registered")
        self._handlers[kind] = handler

    def get(self, kind: HandlerKind) -> Handler:
        try:
            return self._handlers[kind]
        except KeyError:
            raise HandlerNotRegisteredError(
                f"No handler registered for '{kind.value}'. "
                f"Install a package providing the '{ENTRY_POINT_GROUP}' entry point "
                "or map it under 'handlers' in lux.yaml."
            ) from None

    def __contains__(self, kind: object) -> bool:
        return kind in self._handlers

    def items(self) -> ItemsView[HandlerKind, Handler]:
        return self._handlers.items()


def iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=ENTRY_POINT_GROUP)
