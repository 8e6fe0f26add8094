# cmdexec/local_subprocess_executor.py
"""
LocalSubprocessExecutor - runs one command as a local subprocess.

Executes commands with:
- No shell: argv[0] is exec'd directly with argv[1:] as arguments
- stdout capture (stderr captured separately and only logged), kept on timeout
- Timeout handling (SIGTERM → SIGKILL to the whole process group)
- Failures recorded on the RunResult instead of raised
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from collections.abc import Sequence

from .command_config import DEFAULT_TIMEOUT_SECS
from .run_result import RunResult, RunState

logger = logging.getLogger(__name__)


class LocalSubprocessExecutor:
    """
    Executes commands as local subprocesses using asyncio.

    A command that exits non-zero, cannot be spawned or runs past its
    deadline yields a FAILED RunResult holding whatever stdout was captured.
    run() never raises for these cases.
    """

    def __init__(
        self,
        default_timeout: int = DEFAULT_TIMEOUT_SECS,
        cancel_grace_period: float = 0.2,
        partial_read_timeout: float = 0.5,
    ):
        """
        Initialize the executor.

        Args:
            default_timeout: Seconds allowed when run() gets no timeout
            cancel_grace_period: Seconds to wait for SIGTERM before SIGKILL
            partial_read_timeout: Max seconds spent draining pipes once the process has exited
        """
        self._default_timeout = default_timeout
        self._cancel_grace_period = cancel_grace_period
        self._partial_read_timeout = partial_read_timeout

        logger.debug(
            f"Initialized LocalSubprocessExecutor ("
            f"default_timeout={default_timeout}s, "
            f"cancel_grace_period={cancel_grace_period}s)"
        )

    @property
    def default_timeout(self) -> int:
        return self._default_timeout

    async def run(
        self,
        argv: Sequence[str],
        timeout_secs: int | None = None,
        *,
        index: int = 0,
    ) -> RunResult:
        """
        Run argv to completion or until the deadline.

        stdout and stderr are drained into buffers by background readers
        while the deadline is applied to process.wait(), so everything read
        before a kill is kept.

        Args:
            argv: Executable followed by its arguments
            timeout_secs: Deadline in seconds; None or 0 uses the default
            index: Position of the command, recorded on the result

        Returns:
            RunResult in state SUCCESS or FAILED
        """
        timeout = timeout_secs or self._default_timeout
        result = RunResult(argv=list(argv), index=index, timeout_secs=timeout)
        result.mark_running()

        if not result.argv:
            result.mark_failed("Empty command")
            return result

        process = None
        readers: list[asyncio.Task] = []
        stdout_buf = bytearray()
        stderr_buf = bytearray()
        try:
            logger.debug(f"Launching subprocess for run #{index}: {result.argv}")
            process = await asyncio.create_subprocess_exec(
                *result.argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                # Own process group so a timeout also reaches grandchildren
                preexec_fn=os.setpgrp if os.name != "nt" else None,
            )
            readers = [
                asyncio.create_task(_drain(process.stdout, stdout_buf), name=f"stdout_{index}"),
                asyncio.create_task(_drain(process.stderr, stderr_buf), name=f"stderr_{index}"),
            ]

            try:
                await asyncio.wait_for(process.wait(), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    f"Command '{result.command_name}' (#{index}) timed out after {timeout}s"
                )
                # Mark as failed FIRST (before killing, which might get cancelled)
                result.mark_failed(f"Command timed out after {timeout} seconds")
                await self._terminate_process(process)

            await self._finish_readers(readers)
            result.output = bytes(stdout_buf)
            result.stderr = bytes(stderr_buf)
            result.returncode = process.returncode

            if result.state is RunState.RUNNING:
                if process.returncode == 0:
                    result.mark_success()
                else:
                    result.mark_failed(f"Command exited with code {process.returncode}")

        except (OSError, ValueError) as e:
            # ValueError: NUL byte in an argument
            logger.warning(f"Could not start '{result.command_name}' (#{index}): {e}")
            result.mark_failed(e)

        except asyncio.CancelledError:
            logger.debug(f"Run #{index} was cancelled, killing subprocess")
            if process is not None:
                await self._terminate_process(process)
            for reader in readers:
                reader.cancel()
            raise

        finally:
            if result.state is RunState.FAILED:
                stderr_text = result.stderr.decode("utf-8", errors="replace").strip()
                logger.warning(
                    f"Command '{result.command_name}' (#{index}) failed: {result.error}"
                    + (f"\n{stderr_text}" if stderr_text else "")
                )

        return result

    async def _terminate_process(self, process: asyncio.subprocess.Process) -> None:
        """
        Gracefully terminate a subprocess (and its process group):
        - send SIGTERM
        - wait `cancel_grace_period` seconds
        - if still alive, send SIGKILL
        - always wait for the process to exit
        """
        try:
            if process.returncode is None:
                _send_signal(process, kill=False)
                try:
                    await asyncio.wait_for(process.wait(), timeout=self._cancel_grace_period)
                except asyncio.TimeoutError:
                    logger.debug("Process ignored SIGTERM, sending SIGKILL")
                    _send_signal(process, kill=True)
                    await process.wait()
        except ProcessLookupError:
            # Already dead
            pass

    async def _finish_readers(self, readers: list[asyncio.Task]) -> None:
        """
        Let the pipe readers reach EOF. A pipe still held open by an
        escaped descendant is abandoned after `partial_read_timeout`.
        """
        _, pending = await asyncio.wait(readers, timeout=self._partial_read_timeout)
        if pending:
            logger.debug(f"Abandoning {len(pending)} pipe reader(s) still open after exit")
            for reader in pending:
                reader.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

    def __repr__(self) -> str:
        return (
            f"LocalSubprocessExecutor("
            f"default_timeout={self._default_timeout}s, "
            f"cancel_grace_period={self._cancel_grace_period}s)"
        )


async def _drain(stream: asyncio.StreamReader | None, buffer: bytearray) -> None:
    """Append everything read from stream to buffer until EOF."""
    if stream is None:
        return
    while True:
        chunk = await stream.read(65536)
        if not chunk:
            return
        buffer.extend(chunk)


def _send_signal(process: asyncio.subprocess.Process, *, kill: bool) -> None:
    if os.name != "nt":
        os.killpg(process.pid, signal.SIGKILL if kill else signal.SIGTERM)
    elif kill:
        process.kill()
    else:
        process.terminate()
