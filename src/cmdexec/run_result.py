# cmdexec/run_result.py
from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class RunState(Enum):
    """Possible states of a command execution."""
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class RunResult:
    """
    Represents a single execution of a command within one request.

    Created and filled in by LocalSubprocessExecutor. A FAILED run still
    carries whatever stdout was captured before the failure.
    """

    # ------------------------------------------------------------------ #
    # Identification
    # ------------------------------------------------------------------ #
    argv: list[str] = field(default_factory=list)
    """Executable followed by its arguments, after substitution."""

    index: int = 0
    """Position of the command in the config's command list."""

    # ------------------------------------------------------------------ #
    # Execution output & result
    # ------------------------------------------------------------------ #
    output: bytes = b""
    """Captured stdout."""

    stderr: bytes = b""
    """Captured stderr. Logged on failure, never part of the response."""

    returncode: int | None = None

    error: str | None = None
    """Failure description if the run failed."""

    state: RunState = RunState.PENDING

    timeout_secs: int | None = None
    """Effective timeout applied to this run."""

    # ------------------------------------------------------------------ #
    # Timing
    # ------------------------------------------------------------------ #
    start_time: datetime.datetime | None = None
    end_time: datetime.datetime | None = None
    duration: datetime.timedelta | None = None

    @property
    def command_name(self) -> str:
        """Executable token; used as the key in structured responses."""
        return self.argv[0] if self.argv else ""

    # ------------------------------------------------------------------ #
    # State transitions
    # ------------------------------------------------------------------ #
    def mark_running(self) -> None:
        """Transition to RUNNING and record start time."""
        if self.state is not RunState.PENDING:
            logger.warning(f"Run #{self.index} marked running from invalid state {self.state}")
        self.state = RunState.RUNNING
        self.start_time = datetime.datetime.now()
        logger.debug(f"Run #{self.index} ('{self.command_name}') started")

    def mark_success(self) -> None:
        """Mark as successfully completed."""
        self.state = RunState.SUCCESS
        self.error = None
        self._finalize()
        logger.debug(f"Run #{self.index} ('{self.command_name}') succeeded in {self.duration_str}")

    def mark_failed(self, error: str | Exception) -> None:
        """Mark as failed."""
        self.state = RunState.FAILED
        self.error = str(error)
        self._finalize()
        logger.debug(f"Run #{self.index} ('{self.command_name}') failed: {self.error}")

    def _finalize(self) -> None:
        self.end_time = datetime.datetime.now()
        if self.start_time:
            self.duration = self.end_time - self.start_time
        else:
            self.duration = datetime.timedelta(0)

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #
    @property
    def success(self) -> bool | None:
        """True = success, False = failed, None = not finished."""
        if self.state is RunState.SUCCESS:
            return True
        if self.state is RunState.FAILED:
            return False
        return None

    @property
    def is_finished(self) -> bool:
        return self.state in {RunState.SUCCESS, RunState.FAILED}

    @property
    def text(self) -> str:
        return self.output.decode("utf-8", errors="replace")

    @property
    def duration_secs(self) -> float | None:
        return self.duration.total_seconds() if self.duration is not None else None

    @property
    def duration_str(self) -> str:
        """Human-readable duration (e.g. '452ms', '2.4s', '1m 23s')."""
        secs = self.duration_secs
        if secs is None:
            return "-"
        if secs < 1:
            return f"{secs * 1000:.0f}ms"
        if secs < 60:
            return f"{secs:.1f}s"
        mins, secs = divmod(secs, 60)
        return f"{int(mins)}m {secs:.0f}s"

    # ------------------------------------------------------------------ #
    # Representation & serialization
    # ------------------------------------------------------------------ #
    def __repr__(self) -> str:
        return (
            f"RunResult(#{self.index}, cmd='{self.command_name}', "
            f"state={self.state.value}, dur={self.duration_str}, rc={self.returncode})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "index": self.index,
            "command_name": self.command_name,
            "argv": list(self.argv),
            "output": self.text,
            "state": self.state.value,
            "success": self.success,
            "error": self.error,
            "returncode": self.returncode,
            "timeout_secs": self.timeout_secs,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_secs": self.duration_secs,
        }


@dataclass
class AggregateResult:
    """All runs of one request, in execution order."""

    results: list[RunResult] = field(default_factory=list)

    def append(self, result: RunResult) -> None:
        self.results.append(result)

    def __iter__(self):
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def output(self) -> bytes:
        """Raw stdout of every run concatenated, no separators."""
        return b"".join(r.output for r in self.results)

    @property
    def text(self) -> str:
        return self.output.decode("utf-8", errors="replace")

    @property
    def failed(self) -> list[RunResult]:
        return [r for r in self.results if r.state is RunState.FAILED]

    @property
    def success(self) -> bool:
        return all(r.state is RunState.SUCCESS for r in self.results)

    def by_command(self) -> dict[str, str]:
        """
        Map executable token → decoded output.

        Two commands with the same executable share a key; the later one
        wins and a warning is logged.
        """
        mapping: dict[str, str] = {}
        for r in self.results:
            if r.command_name in mapping:
                logger.warning(
                    f"Result key '{r.command_name}' used by more than one command; "
                    f"keeping output of command #{r.index}"
                )
            mapping[r.command_name] = r.text
        return mapping
