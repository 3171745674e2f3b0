"""Runtime handler loading for the lux CLI."""

from __future__ import annotations

from importlib import metadata

from luxcli.domain.project import ProjectConfig, ProjectConfigError
from luxcli.handlers import ENTRY_POINT_GROUP, HandlerKind, HandlerRegistry, iter_entry_points


def load_handlers(project: ProjectConfig | None = None) -> HandlerRegistry:
    registry = HandlerRegistry()
    for entry_point in iter_entry_points():
        registry.register(HandlerKind.parse(entry_point.name), entry_point.load())
    if project is None:
        return registry
    for name, target in project.handlers.items():
        try:
            kind = HandlerKind.parse(name)
        except ValueError as exc:
            raise ProjectConfigError(f"{project.path}: {exc}") from exc
        override = metadata.EntryPoint(name=name, value=target, group=ENTRY_POINT_GROUP)
        try:
            handler = override.load()
        except (ImportError, AttributeError) as exc:
            raise ProjectConfigError(f"{project.path}: cannot load handler {name}={target}: {exc}") from exc
        registry.register(kind, handler, override=True)
    return registry
