from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from .exceptions import ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECS = 10
"""Timeout applied when neither the command nor the config declares one."""

CACHE_TTL_SECS = 30
"""How long a loaded configuration is served before it is re-read."""


def split_command(template: str) -> list[str]:
    """
    Split a command string into argv tokens on whitespace.

    No shell quoting is honoured: an argument containing spaces cannot be
    expressed and is split into several tokens.
    """
    return template.split()


def placeholder(name: str) -> str:
    """Return the literal placeholder text for a parameter name."""
    return "{{" + name + "}}"


# ─────────────────────────────────────────────────────────────────────────────
# Required parameter rules
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class RequiredParameter:
    """
    A named parameter plus the regex every supplied value must match.

    The pattern is compiled lazily at validation time so that a broken regex
    surfaces as a request error rather than a load failure.
    """

    name: str
    pattern: str

    def __post_init__(self) -> None:
        if not self.name:
            logger.warning("Invalid config: required parameter name cannot be empty")
            raise ConfigValidationError("Required parameter name cannot be empty")
        if not isinstance(self.pattern, str):
            logger.warning(f"Invalid config: pattern for '{self.name}' is not a string")
            raise ConfigValidationError(
                f"Validation pattern for '{self.name}' must be a string, "
                f"got {type(self.pattern).__name__}"
            )


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class CommandConfig:
    """
    Immutable configuration for a single command.
    Used both when loading from a file and when passed programmatically.
    """

    command: str
    """Command template, e.g. "ls {{path}}". First token is the executable."""

    required: list[RequiredParameter] = field(default_factory=list)
    """Rules checked in declaration order before anything runs."""

    timeout: int = 0
    """Hard timeout in seconds. 0 inherits the config or system default."""

    def __post_init__(self) -> None:
        if not isinstance(self.command, str) or not self.command.strip():
            logger.warning("Invalid config: Command template cannot be empty")
            raise ConfigValidationError("Command template cannot be empty")
        if not isinstance(self.timeout, int) or isinstance(self.timeout, bool):
            raise ConfigValidationError(
                f"timeout for '{self.executable}' must be an integer number of seconds"
            )
        if self.timeout < 0:
            logger.warning(f"Invalid config for '{self.executable}': timeout cannot be negative")
            raise ConfigValidationError("timeout cannot be negative")

    @property
    def argv(self) -> list[str]:
        return split_command(self.command)

    @property
    def executable(self) -> str:
        """First whitespace-delimited token of the template."""
        return self.argv[0]

    @property
    def arguments(self) -> list[str]:
        return self.argv[1:]

    def with_command(self, command: str) -> CommandConfig:
        """Return a copy with a different (usually substituted) template."""
        return replace(self, command=command)


@dataclass(frozen=True)
class ExecConfig:
    """
    Top-level configuration object returned by load_config().
    Contains everything needed for one CommandOrchestrator.run() call.
    """

    commands: list[CommandConfig]
    """Commands in the order they are executed."""

    name: str = ""
    version: str = ""

    default_timeout: int = 0
    """Timeout for commands that declare none. 0 falls back to DEFAULT_TIMEOUT_SECS."""

    def __post_init__(self) -> None:
        if not isinstance(self.default_timeout, int) or isinstance(self.default_timeout, bool):
            raise ConfigValidationError("default_timeout must be an integer number of seconds")
        if self.default_timeout < 0:
            raise ConfigValidationError("default_timeout cannot be negative")

    def with_commands(self, commands: list[CommandConfig]) -> ExecConfig:
        return replace(self, commands=commands)
