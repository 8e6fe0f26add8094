# cmdexec/command_orchestrator.py
"""
CommandOrchestrator - the request lifecycle.

    path ─► ConfigCache.get ─► validate_and_substitute ─► executor.run (per command,
    in order) ─► AggregateResult ─► text / JSON

Parameter validation runs once over every command before anything executes.
Commands then run strictly one after another; a failing command is logged
and recorded but never stops the ones after it.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from collections.abc import Callable
from typing import BinaryIO

from .command_config import DEFAULT_TIMEOUT_SECS, ExecConfig
from .config_cache import ConfigCache
from .exceptions import ParameterValidationError
from .formatters import response_to_json, response_to_text
from .local_subprocess_executor import LocalSubprocessExecutor
from .parameter_validator import Parameters, validate_and_substitute
from .run_result import AggregateResult, RunResult

logger = logging.getLogger(__name__)

PathLike = str | os.PathLike[str]


class CommandOrchestrator:
    """
    Runs the commands of a configuration for one set of parameters.

    Owns (or is given) the ConfigCache and the executor. One instance can
    serve many requests concurrently; each request runs its own commands
    sequentially.
    """

    def __init__(
        self,
        cache: ConfigCache | None = None,
        executor: LocalSubprocessExecutor | None = None,
        *,
        default_timeout: int = DEFAULT_TIMEOUT_SECS,
    ):
        """
        Args:
            cache: Config cache to read through. A fresh one is created if omitted.
            executor: Subprocess executor. A LocalSubprocessExecutor if omitted.
            default_timeout: System default for commands and configs without one
        """
        self._cache = cache or ConfigCache()
        self._executor = executor or LocalSubprocessExecutor(default_timeout=default_timeout)
        self._default_timeout = default_timeout

    @property
    def cache(self) -> ConfigCache:
        return self._cache

    def load(self, path: PathLike) -> ExecConfig:
        """Get the config for path from the cache (loading it if needed)."""
        return self._cache.get(path)

    def effective_timeout(self, config: ExecConfig, index: int) -> int:
        """Command timeout, else the config's default_timeout, else the orchestrator default."""
        command = config.commands[index]
        return command.timeout or config.default_timeout or self._default_timeout

    # ------------------------------------------------------------------ #
    # Core
    # ------------------------------------------------------------------ #
    async def run(
        self,
        config: ExecConfig,
        parameters: Parameters | None = None,
        *,
        on_result: Callable[[RunResult], None] | None = None,
    ) -> AggregateResult:
        """
        Validate parameters, then run every command in declared order.

        Args:
            config: Loaded configuration
            parameters: name → list of values
            on_result: Called with each RunResult as soon as it finishes

        Raises:
            ParameterValidationError: Before any command has been started
        """
        resolved = validate_and_substitute(config, parameters or {})

        aggregate = AggregateResult()
        for index, command in enumerate(resolved.commands):
            timeout = self.effective_timeout(resolved, index)
            logger.info(f"Running #{index}: {command.command} (timeout={timeout}s)")
            result = await self._executor.run(command.argv, timeout, index=index)
            aggregate.append(result)
            if on_result is not None:
                on_result(result)

        failed = len(aggregate.failed)
        logger.debug(
            f"Finished {len(aggregate)} commands for '{config.name or '<unnamed>'}'"
            + (f" ({failed} failed)" if failed else "")
        )
        return aggregate

    async def run_commands(self, config: ExecConfig) -> str:
        """Run a config that needs no parameters and return its text output."""
        return response_to_text(await self.run(config))

    # ------------------------------------------------------------------ #
    # Entrypoints
    # ------------------------------------------------------------------ #
    async def execute(self, path: PathLike, parameters: Parameters | None = None) -> str:
        """
        Run the config at path and return the aggregate text.

        On a parameter error the JSON error body is returned instead.

        Raises:
            ConfigLoadError / ConfigValidationError: The config is unusable
        """
        # Reading and parsing a file blocks, keep it off the event loop
        config = await asyncio.to_thread(self.load, path)
        try:
            aggregate = await self.run(config, parameters)
        except ParameterValidationError as e:
            logger.warning(f"Rejected parameters for '{os.fspath(path)}': {e}")
            return response_to_json(e)
        return response_to_text(aggregate)

    async def render(
        self,
        path: PathLike,
        parameters: Parameters | None,
        sink: BinaryIO,
    ) -> None:
        """
        Run the config at path, writing each command's stdout to sink as it
        completes.

        On a parameter error the JSON error body is written to sink and the
        error is re-raised so the caller can fail the request.

        Raises:
            ParameterValidationError: After the error body was written
            ConfigLoadError / ConfigValidationError: The config is unusable
        """
        config = await asyncio.to_thread(self.load, path)
        try:
            await self.run(config, parameters, on_result=lambda r: sink.write(r.output))
        except ParameterValidationError as e:
            logger.warning(f"Rejected parameters for '{os.fspath(path)}': {e}")
            sink.write(response_to_json(e).encode("utf-8"))
            raise

    def __repr__(self) -> str:
        return f"CommandOrchestrator(cache={self._cache!r}, executor={self._executor!r})"


# ─────────────────────────────────────────────────────────────────────────────
# Synchronous helpers for non-async callers
# ─────────────────────────────────────────────────────────────────────────────
_default_orchestrator: CommandOrchestrator | None = None
_default_lock = threading.Lock()


def get_default_orchestrator() -> CommandOrchestrator:
    """Process-wide orchestrator (and cache) shared by exec_file/render_file."""
    global _default_orchestrator
    if _default_orchestrator is None:
        with _default_lock:
            if _default_orchestrator is None:
                _default_orchestrator = CommandOrchestrator()
    return _default_orchestrator


def exec_file(path: PathLike, parameters: Parameters | None = None) -> str:
    """Blocking version of CommandOrchestrator.execute()."""
    return asyncio.run(get_default_orchestrator().execute(path, parameters))


def render_file(path: PathLike, parameters: Parameters | None, sink: BinaryIO) -> None:
    """Blocking version of CommandOrchestrator.render()."""
    asyncio.run(get_default_orchestrator().render(path, parameters, sink))
