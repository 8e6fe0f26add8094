# tests/conftest.py
import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

import asyncio
import logging
from unittest.mock import Mock

import pytest
from cmdexec.command_config import CommandConfig, ExecConfig, RequiredParameter


@pytest.fixture
def sample_command_config():
    return CommandConfig(
        command="echo {{message}}",
        required=[RequiredParameter(name="message", pattern=r"^\w+$")],
        timeout=3,
    )


@pytest.fixture
def sample_exec_config(sample_command_config):
    return ExecConfig(
        name="sample",
        version="1.0",
        default_timeout=5,
        commands=[sample_command_config, CommandConfig(command="echo done")],
    )


@pytest.fixture
def write_config(tmp_path):
    """
    Factory fixture writing a config file and returning its path.
    Use it like:
        path = write_config("commands:\\n  - command: echo hi\\n")
    """
    def _write(text: str, name: str = "commands.yaml"):
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write


class FakeClock:
    """Manually advanced time source for cache tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def create_proc():
    """
    Factory fixture that returns properly configured asyncio subprocess mocks.
    Use it like:
        proc = create_proc(stdout=b"hello\\n", returncode=0)
        with patch("asyncio.create_subprocess_exec", return_value=proc):
            ...
    """
    def _make(stdout=b"", stderr=b"", returncode=0, delay=0.0):
        proc = Mock()
        proc.pid = 4242
        proc.returncode = None
        exited = asyncio.Event()

        # Real readers: data is available at once, EOF only when the process exits
        proc.stdout = asyncio.StreamReader()
        proc.stderr = asyncio.StreamReader()
        proc.stdout.feed_data(stdout)
        proc.stderr.feed_data(stderr)

        def finish(code):
            if proc.returncode is None:
                proc.returncode = code
                proc.stdout.feed_eof()
                proc.stderr.feed_eof()
            exited.set()

        async def wait():
            if delay:
                try:
                    await asyncio.wait_for(exited.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
            finish(returncode)
            return proc.returncode

        proc.wait = wait
        proc.kill = Mock(side_effect=lambda: finish(-9))
        proc.terminate = Mock(side_effect=lambda: finish(-15))

        return proc

    return _make


@pytest.fixture
def restore_logging():
    """Undo setup_logging() side effects on the "cmdexec" logger."""
    from cmdexec.logging_config import LOGGER_NAME, disable_logging

    logger = logging.getLogger(LOGGER_NAME)
    level, propagate = logger.level, logger.propagate
    yield
    disable_logging()
    logger.setLevel(level)
    logger.propagate = propagate
