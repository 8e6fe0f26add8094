"""
Command-line entry point.

    python -m cmdexec commands.yaml -p path=/tmp -p msg=hello
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections import defaultdict

from .command_config import DEFAULT_TIMEOUT_SECS
from .command_orchestrator import CommandOrchestrator
from .exceptions import ConfigError, ParameterValidationError
from .formatters import response_to_json, response_to_text
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARAMETER_ERROR = 1
EXIT_CONFIG_ERROR = 2


def parse_parameters(pairs: list[str]) -> dict[str, list[str]]:
    """Turn ["a=1", "a=2", "b=x"] into {"a": ["1", "2"], "b": ["x"]}."""
    parameters: dict[str, list[str]] = defaultdict(list)
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise argparse.ArgumentTypeError(f"Parameter must look like name=value, got {pair!r}")
        parameters[name].append(value)
    return dict(parameters)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmdexec",
        description="Run the commands declared in a config file with validated parameters.",
    )
    parser.add_argument("config", help="Path to a YAML, TOML or JSON command config")
    parser.add_argument(
        "-p",
        "--param",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Parameter value (repeat for several values or parameters)",
    )
    parser.add_argument(
        "--json", action="store_true", help="Print {\"Result\": {command: output}} instead of text"
    )
    parser.add_argument(
        "--timeout-default",
        type=int,
        default=DEFAULT_TIMEOUT_SECS,
        help=f"Timeout for commands without one (default: {DEFAULT_TIMEOUT_SECS}s)",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        parameters = parse_parameters(args.param)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    orchestrator = CommandOrchestrator(default_timeout=args.timeout_default)
    try:
        config = orchestrator.load(args.config)
        aggregate = asyncio.run(orchestrator.run(config, parameters))
    except ConfigError as e:
        print(f"cmdexec: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except ParameterValidationError as e:
        print(response_to_json(e))
        return EXIT_PARAMETER_ERROR

    if args.json:
        print(response_to_json(aggregate))
    else:
        sys.stdout.write(response_to_text(aggregate))
        sys.stdout.flush()
    return EXIT_OK
