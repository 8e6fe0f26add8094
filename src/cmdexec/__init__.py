__version__ = "0.1.0"

import logging

from .command_config import (
    CACHE_TTL_SECS,
    DEFAULT_TIMEOUT_SECS,
    CommandConfig,
    ExecConfig,
    RequiredParameter,
    split_command,
)
from .command_orchestrator import (
    CommandOrchestrator,
    exec_file,
    get_default_orchestrator,
    render_file,
)
from .config_cache import CacheEntry, ConfigCache
from .exceptions import (
    CmdexecError,
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
    InvalidPatternError,
    InvalidValueError,
    MissingParameterError,
    ParameterValidationError,
)
from .formatters import error_response, response_to_json, response_to_mapping, response_to_text
from .load_config import load_config
from .local_subprocess_executor import LocalSubprocessExecutor
from .logging_config import disable_logging, get_log_file_path, setup_logging
from .parameter_validator import validate_and_substitute
from .run_result import AggregateResult, RunResult, RunState

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version
    "__version__",
    # Core Components
    "AggregateResult",
    "CacheEntry",
    "CommandConfig",
    "CommandOrchestrator",
    "ConfigCache",
    "ExecConfig",
    "load_config",
    "RequiredParameter",
    "RunResult",
    "RunState",
    "split_command",
    "validate_and_substitute",
    # Entrypoints
    "exec_file",
    "get_default_orchestrator",
    "render_file",
    # Formatting
    "error_response",
    "response_to_json",
    "response_to_mapping",
    "response_to_text",
    # Executors
    "LocalSubprocessExecutor",
    # Logging
    "disable_logging",
    "get_log_file_path",
    "setup_logging",
    # Constants
    "CACHE_TTL_SECS",
    "DEFAULT_TIMEOUT_SECS",
    # Exceptions
    "CmdexecError",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "InvalidPatternError",
    "InvalidValueError",
    "MissingParameterError",
    "ParameterValidationError",
]
