"""Command orchestration for the lux CLI."""

from __future__ import annotations

import argparse
import asyncio
import os
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, List, Mapping, MutableMapping, Sequence

from luxcli.app.gateway import CommandGateway
from luxcli.app.reporter import ExitReporter
from luxcli.domain.environment import (
    DEFAULT_NODE_ENV,
    DEFAULT_PORT,
    NODE_ENV,
    PORT,
    REPL_MARKER,
    EnvBinding,
    InvocationConfig,
    persist_env,
)
from luxcli.domain.project import ProjectConfig
from luxcli.handlers import HandlerKind, HandlerRegistry
from luxcli.handlers.loader import load_handlers
from luxcli.settings import RuntimeSettings
from luxcli.utils.telemetry import CommandOutcome, record_outcome


class CommandNotFoundError(RuntimeError):
    pass


DATABASES = ("postgres", "sqlite", "mysql", "mariadb", "oracle")
_DATABASE_PATTERN = re.compile(rf"^(?:{'|'.join(DATABASES)})$", re.IGNORECASE)


def database_type(value: str) -> str:
    if not _DATABASE_PATTERN.match(value):
        raise argparse.ArgumentTypeError(
            f"invalid database '{value}' (choose from {', '.join(DATABASES)})"
        )
    return value.lower()


@dataclass(frozen=True)
class OptionSpec:
    flags: tuple[str, ...]
    help: str = ""
    type: Callable[[str], Any] | None = None
    default: Any = None
    switch: bool = False
    nargs: str | None = None
    metavar: str | None = None

    def add_to(self, parser: argparse.ArgumentParser) -> None:
        if self.switch:
            parser.add_argument(*self.flags, action="store_true", help=self.help)
            return
        kwargs: dict[str, Any] = {"help": self.help}
        if self.type is not None:
            kwargs["type"] = self.type
        if self.default is not None:
            kwargs["default"] = self.default
        if self.nargs is not None:
            kwargs["nargs"] = self.nargs
        if self.metavar is not None:
            kwargs["metavar"] = self.metavar
        parser.add_argument(*self.flags, **kwargs)


@dataclass(frozen=True)
class Step:
    name: str
    handler: HandlerKind
    args: tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=dict)
    skip: Callable[[InvocationConfig], bool] | None = None

    def skipped(self, config: InvocationConfig) -> bool:
        return self.skip is not None and self.skip(config)


@dataclass
class Pipeline:
    name: str
    steps: List[Step]
    skipped: List[str] = field(default_factory=list)
    completed: List[str] = field(default_factory=list)

    async def run(self, gateway: CommandGateway) -> Any:
        result: Any = None
        for step in self.steps:
            result = await gateway.invoke(step.handler, *step.args, **step.kwargs)
            self.completed.append(step.name)
        return result


def build_pipeline(name: str, config: InvocationConfig, steps: Iterable[Step]) -> Pipeline:
    pipeline = Pipeline(name=name, steps=[])
    for step in steps:
        if step.skipped(config):
            pipeline.skipped.append(step.name)
        else:
            pipeline.steps.append(step)
    return pipeline


@dataclass(frozen=True)
class CommandDescriptor:
    name: str
    help: str
    steps: Callable[[InvocationConfig], Sequence[Step]]
    aliases: tuple[str, ...] = ()
    options: tuple[OptionSpec, ...] = ()
    env: tuple[EnvBinding, ...] = ()

    def pipeline(self, config: InvocationConfig) -> Pipeline:
        return build_pipeline(self.name, config, self.steps(config))


class CommandRegistry:
    def __init__(self, descriptors: Iterable[CommandDescriptor]) -> None:
        self._commands: dict[str, CommandDescriptor] = {}
        self._lookup: dict[str, str] = {}
        for descriptor in descriptors:
            for key in (descriptor.name, *descriptor.aliases):
                if key in self._lookup:
                    raise ValueError(f"Command name {key} already registered")
                self._lookup[key] = descriptor.name
            self._commands[descriptor.name] = descriptor

    @classmethod
    def default(cls) -> "CommandRegistry":
        return cls(DEFAULT_COMMANDS)

    def get(self, name: str) -> CommandDescriptor:
        if name not in self._lookup:
            raise CommandNotFoundError(f"{name} is not a valid command.")
        return self._commands[self._lookup[name]]

    def __contains__(self, name: object) -> bool:
        return name in self._lookup

    def __iter__(self) -> Iterator[CommandDescriptor]:
        return iter(self._commands.values())

    def list_commands(self) -> Iterable[str]:
        return sorted(self._commands)


ENVIRONMENT = OptionSpec(("-e", "--environment"), help="Environment to use (default: development)", metavar="ENV")
USE_WEAK = OptionSpec(("-w", "--use-weak"), help="Build without strict mode", switch=True)
SKIP_BUILD = OptionSpec(("--skip-build",), help="Reuse the existing build output", switch=True)
BUILD_OPTIONS = (ENVIRONMENT, USE_WEAK, SKIP_BUILD)

NODE_ENV_BINDING = EnvBinding(NODE_ENV, DEFAULT_NODE_ENV, option="environment")
PORT_BINDING = EnvBinding(PORT, DEFAULT_PORT, option="port")
REPL_BINDING = EnvBinding(REPL_MARKER, "true")


def _skip_build(config: InvocationConfig) -> bool:
    return config.skip_build


def _build_step(config: InvocationConfig) -> Step:
    return Step("build", HandlerKind.BUILD, (config.strict,), skip=_skip_build)


def _new_steps(config: InvocationConfig) -> list[Step]:
    return [Step("create", HandlerKind.CREATE, (config.option("name"), config.option("database")))]


def _test_steps(config: InvocationConfig) -> list[Step]:
    return [Step("test", HandlerKind.TEST)]


def _build_steps(config: InvocationConfig) -> list[Step]:
    return [Step("build", HandlerKind.BUILD, (config.strict,))]


def _console_steps(config: InvocationConfig) -> list[Step]:
    return [_build_step(config), Step("repl", HandlerKind.REPL)]


def _serve_steps(config: InvocationConfig) -> list[Step]:
    serve = Step(
        "serve",
        HandlerKind.SERVE,
        kwargs={
            "hot": bool(config.option("hot")),
            "cluster": bool(config.option("cluster")),
            "use_strict": config.strict,
        },
    )
    return [_build_step(config), serve]


def _generate_steps(config: InvocationConfig) -> list[Step]:
    kwargs = {
        "type": config.option("type"),
        "name": config.option("name"),
        "attrs": list(config.option("attrs") or []),
    }
    return [Step("generate", HandlerKind.GENERATE, kwargs=kwargs)]


def _destroy_steps(config: InvocationConfig) -> list[Step]:
    kwargs = {"type": config.option("type"), "name": config.option("name")}
    return [Step("destroy", HandlerKind.DESTROY, kwargs=kwargs)]


def _db_command(name: str, help_text: str, *actions: HandlerKind) -> CommandDescriptor:
    def steps(config: InvocationConfig) -> list[Step]:
        return [_build_step(config), *(Step(action.value, action) for action in actions)]

    return CommandDescriptor(name=name, help=help_text, steps=steps, options=BUILD_OPTIONS, env=(NODE_ENV_BINDING,))


DEFAULT_COMMANDS: tuple[CommandDescriptor, ...] = (
    CommandDescriptor(
        name="n",
        aliases=("new",),
        help="Create a new application",
        steps=_new_steps,
        options=(
            OptionSpec(("name",), help="Application name"),
            OptionSpec(
                ("--database",),
                help=f"Database driver, one of {', '.join(DATABASES)} (default: sqlite)",
                type=database_type,
                default="sqlite",
            ),
        ),
    ),
    CommandDescriptor(name="t", aliases=("test",), help="Run the test suite", steps=_test_steps),
    CommandDescriptor(
        name="b",
        aliases=("build",),
        help="Build the application",
        steps=_build_steps,
        options=(ENVIRONMENT, USE_WEAK),
        env=(NODE_ENV_BINDING,),
    ),
    CommandDescriptor(
        name="c",
        aliases=("console",),
        help="Load the application into an interactive console",
        steps=_console_steps,
        options=BUILD_OPTIONS,
        env=(NODE_ENV_BINDING, REPL_BINDING),
    ),
    CommandDescriptor(
        name="s",
        aliases=("serve",),
        help="Serve the application",
        steps=_serve_steps,
        options=(
            OptionSpec(("-c", "--cluster"), help="Run in cluster mode", switch=True),
            ENVIRONMENT,
            OptionSpec(("-p", "--port"), help=f"Port to listen on (default: {DEFAULT_PORT})", type=int),
            OptionSpec(("-H", "--hot"), help="Reload when application files change", switch=True),
            USE_WEAK,
            SKIP_BUILD,
        ),
        env=(PORT_BINDING, NODE_ENV_BINDING),
    ),
    CommandDescriptor(
        name="g",
        aliases=("generate",),
        help="Generate application files",
        steps=_generate_steps,
        options=(
            OptionSpec(("type",), help="Kind of file to generate"),
            OptionSpec(("name",), help="Name of the generated resource"),
            OptionSpec(("attrs",), help="Attributes as name:type", nargs="*"),
        ),
    ),
    CommandDescriptor(
        name="d",
        aliases=("destroy",),
        help="Remove generated application files",
        steps=_destroy_steps,
        options=(
            OptionSpec(("type",), help="Kind of file to remove"),
            OptionSpec(("name",), help="Name of the resource"),
        ),
    ),
    _db_command("db:create", "Create the database", HandlerKind.DB_CREATE),
    _db_command("db:drop", "Drop the database", HandlerKind.DB_DROP),
    _db_command("db:reset", "Drop and recreate the database", HandlerKind.DB_DROP, HandlerKind.DB_CREATE),
    _db_command("db:migrate", "Run pending migrations", HandlerKind.DB_MIGRATE),
    _db_command("db:rollback", "Roll back the last migration", HandlerKind.DB_ROLLBACK),
    _db_command("db:seed", "Seed the database", HandlerKind.DB_SEED),
)


class CommandService:
    def __init__(
        self,
        settings: RuntimeSettings,
        registry: CommandRegistry | None = None,
        *,
        handler_loader: Callable[[ProjectConfig], HandlerRegistry] = load_handlers,
        environ: MutableMapping[str, str] | None = None,
        cwd: Path | None = None,
        reporter: ExitReporter | None = None,
    ) -> None:
        self._settings = settings
        self._registry = registry or CommandRegistry.default()
        self._handler_loader = handler_loader
        self._environ = os.environ if environ is None else environ
        self._cwd = cwd
        self._reporter = reporter or ExitReporter()

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    def run(self, command: str, options: Mapping[str, Any]) -> int:
        descriptor = self._registry.get(command)
        cwd = self._cwd or Path.cwd()
        pipeline: Pipeline | None = None
        error: Exception | None = None
        start = time.perf_counter()
        try:
            project = ProjectConfig.load(cwd)
            config = InvocationConfig.build(
                descriptor.name, cwd, options, descriptor.env, self._environ, project.env
            )
            persist_env(config.resolutions, self._environ)
            pipeline = descriptor.pipeline(config)
            gateway = CommandGateway(self._handler_loader(project), cwd)
            result = asyncio.run(pipeline.run(gateway))
        except Exception as exc:
            error = exc
            exit_code = self._reporter.failure(exc)
        else:
            exit_code = self._reporter.success(result)

        record_outcome(
            self._settings,
            CommandOutcome(
                command=descriptor.name,
                cwd=str(cwd),
                exit_code=exit_code,
                duration_ms=(time.perf_counter() - start) * 1000,
                steps=tuple(pipeline.completed) if pipeline else (),
                skipped=tuple(pipeline.skipped) if pipeline else (),
                error=str(error) if error is not None else None,
            ),
        )
        return exit_code
