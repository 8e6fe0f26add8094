# cmdexec/parameter_validator.py
"""
Validate caller parameters against each command's required rules and
substitute the accepted values into the command templates.

Validation is all-or-nothing: the first failing rule raises and nothing
is returned, so the orchestrator never starts a subprocess for a request
with bad parameters.
"""

from __future__ import annotations

import functools
import logging
import re
from collections.abc import Mapping, Sequence

from .command_config import CommandConfig, ExecConfig, RequiredParameter, placeholder
from .exceptions import InvalidPatternError, InvalidValueError, MissingParameterError

logger = logging.getLogger(__name__)

Parameters = Mapping[str, "Sequence[str] | str"]


@functools.lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


def compile_rule(rule: RequiredParameter) -> re.Pattern[str]:
    """
    Compile a rule's regex (cached per pattern string).

    Raises:
        InvalidPatternError: The pattern is not a valid regex
    """
    try:
        return _compile(rule.pattern)
    except re.error as e:
        logger.warning(f"Bad validation regex for '{rule.name}': {rule.pattern!r} ({e})")
        raise InvalidPatternError(rule.name, rule.pattern) from e


def values_for(parameters: Parameters, name: str) -> list[str]:
    """Values supplied for `name`. A bare string counts as one value."""
    values = parameters.get(name)
    if values is None:
        return []
    if isinstance(values, str):
        return [values]
    return list(values)


def substitute(template: str, name: str, value: str) -> str:
    """Replace every `{{name}}` in template with value."""
    return template.replace(placeholder(name), value)


def validate_command(command: CommandConfig, parameters: Parameters) -> CommandConfig:
    """
    Check one command's rules in declaration order and return a copy with
    its placeholders filled in.

    Every supplied value of a parameter must match. Substituting a value
    consumes the placeholder, so when several values are given it is the
    last one that ends up in the template.
    """
    template = command.command
    for rule in command.required:
        values = values_for(parameters, rule.name)
        if not values:
            logger.debug(f"Missing required parameter '{rule.name}' for '{command.executable}'")
            raise MissingParameterError(rule.name)

        pattern = compile_rule(rule)
        for value in values:
            if pattern.search(value) is None:
                logger.debug(f"Value {value!r} rejected by {rule.pattern!r} for '{rule.name}'")
                raise InvalidValueError(rule.name, value)

        template = substitute(template, rule.name, values[-1])
        if not template.strip():
            # Nothing left to execute
            raise InvalidValueError(rule.name, values[-1])

    if template == command.command:
        return command
    return command.with_command(template)


def validate_and_substitute(config: ExecConfig, parameters: Parameters) -> ExecConfig:
    """
    Validate parameters for every command and return a substituted copy.

    The input config is left untouched.

    Raises:
        MissingParameterError: A required parameter has no value
        InvalidPatternError: A configured regex does not compile
        InvalidValueError: A supplied value does not match its regex
    """
    commands = [validate_command(cmd, parameters) for cmd in config.commands]
    logger.debug(f"Validated parameters for {len(commands)} commands")
    return config.with_commands(commands)
