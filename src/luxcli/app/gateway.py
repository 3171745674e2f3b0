"""Single entry point through which pipelines reach command handlers."""

from __future__ import annotations

import asyncio
import inspect
from pathlib import Path
from typing import Any, Callable

from luxcli.domain.project import InvalidProjectError, is_eligible_project
from luxcli.handlers import HandlerKind, HandlerRegistry


class CommandGateway:
    def __init__(
        self,
        handlers: HandlerRegistry,
        cwd: Path,
        *,
        validator: Callable[[Path], bool] = is_eligible_project,
    ) -> None:
        self._handlers = handlers
        self._cwd = cwd
        self._validator = validator

    async def invoke(self, kind: HandlerKind, *args: Any, **kwargs: Any) -> Any:
        if kind.project_scoped and not await asyncio.to_thread(self._validator, self._cwd):
            raise InvalidProjectError(f"Directory {self._cwd} does not contain a valid Lux application.")
        handler = self._handlers.get(kind)
        result = handler(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result
