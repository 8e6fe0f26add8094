# cmdexec/exceptions.py
"""
Custom exception hierarchy for cmdexec.

All cmdexec-specific exceptions inherit from CmdexecError to enable
catch-all error handling while still providing specific exception types
for different error conditions.

Command execution failures are deliberately absent here: a command that
exits non-zero, cannot be spawned or times out is recorded on its RunResult
(state=FAILED) and never raised.
"""

from __future__ import annotations

# Numeric code reported in the JSON error body for parameter failures.
PARAMETER_ERROR_CODE = 1


class CmdexecError(Exception):
    """
    Base exception for all cmdexec errors.

    Catch this to handle any cmdexec-specific error.
    """

    pass


class ConfigError(CmdexecError):
    """Base class for problems with a configuration file."""

    pass


class ConfigLoadError(ConfigError):
    """
    Raised when a configuration file cannot be read or deserialized.

    Fatal to the whole invocation. The original exception is chained
    as __cause__.

    Attributes:
        path: The configuration source that failed to load
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load config '{path}': {reason}")


class ConfigValidationError(ConfigError):
    """
    Raised when a parsed configuration has the wrong shape.

    Example:
        >>> CommandConfig(command="   ")
        ConfigValidationError: Command template cannot be empty
    """

    pass


class ParameterValidationError(CmdexecError):
    """
    Raised when caller-supplied parameters do not satisfy a command's
    required rules. No command is executed when this is raised.

    Attributes:
        parameter_name: Name of the offending parameter
        code: Numeric code used in the structured error response
    """

    code: int = PARAMETER_ERROR_CODE

    def __init__(self, parameter_name: str, message: str):
        self.parameter_name = parameter_name
        super().__init__(message)


class MissingParameterError(ParameterValidationError):
    """
    Raised when a required parameter has no supplied value.

    Example:
        >>> validate_and_substitute(config, {})
        MissingParameterError: Parameter path is missing
    """

    def __init__(self, parameter_name: str):
        super().__init__(parameter_name, f"Parameter {parameter_name} is missing")


class InvalidPatternError(ParameterValidationError):
    """
    Raised when a configured validation regex does not compile.

    Attributes:
        pattern: The regex source that failed to compile
    """

    def __init__(self, parameter_name: str, pattern: str):
        self.pattern = pattern
        super().__init__(
            parameter_name, f"Can not parse regexp '{pattern}' for '{parameter_name}'"
        )


class InvalidValueError(ParameterValidationError):
    """
    Raised when a supplied value does not match its validation regex.

    Attributes:
        value: The rejected value
    """

    def __init__(self, parameter_name: str, value: str):
        self.value = value
        super().__init__(parameter_name, f"Value '{value}' is not valid for '{parameter_name}'")
