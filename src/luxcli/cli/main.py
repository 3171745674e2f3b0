#!/usr/bin/env python3
"""Entry point for the lux CLI."""

from __future__ import annotations

import argparse
import sys
from textwrap import dedent
from typing import Any

from luxcli import __version__
from luxcli.app.command_service import CommandRegistry, CommandService
from luxcli.handlers.loader import load_handlers
from luxcli.settings import SETTINGS

PROG = "lux"

HELP_OVERVIEW = dedent(
    """
    Examples:
      lux new my-app --database postgres
      lux serve --port 5000 --hot
      lux db:migrate --environment production --skip-build

    Environment:
      NODE_ENV          - application environment (default: development)
      PORT              - port used by `lux serve` (default: 4000)
      LUXCLI_HOME       - where the CLI keeps its logs (default: ~/.luxcli)
      LUXCLI_TELEMETRY=0 - disable the local telemetry log
    """
)

_PARSER_KEYS = {"command", "descriptor"}


def build_parser(registry: CommandRegistry) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        epilog=HELP_OVERVIEW,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"{PROG} {__version__}")

    sub = parser.add_subparsers(dest="command", metavar="<command>")
    for descriptor in registry:
        command_parser = sub.add_parser(descriptor.name, aliases=list(descriptor.aliases), help=descriptor.help)
        for option in descriptor.options:
            option.add_to(command_parser)
        command_parser.set_defaults(descriptor=descriptor.name)
    return parser


def _build_service() -> CommandService:
    return CommandService(SETTINGS, handler_loader=load_handlers)


def _print_unknown_command(name: str) -> None:
    print(f"{name} is not a valid command.")
    print(f"Use `{PROG} --help` for a full list of commands.")


def _options(args: argparse.Namespace) -> dict[str, Any]:
    return {key: value for key, value in vars(args).items() if key not in _PARSER_KEYS}


def main(argv: list[str] | None = None) -> int:
    service = _build_service()
    parser = build_parser(service.registry)
    raw_args = sys.argv[1:] if argv is None else list(argv)

    if raw_args and not raw_args[0].startswith("-") and raw_args[0] not in service.registry:
        _print_unknown_command(raw_args[0])
        return 0

    args = parser.parse_args(raw_args)
    if getattr(args, "descriptor", None) is None:
        parser.print_help()
        return 0
    return service.run(args.descriptor, _options(args))


if __name__ == "__main__":
    sys.exit(main())
