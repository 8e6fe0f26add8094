# tests/test_command_orchestrator/test_entrypoints.py
"""
execute() / render() against config files, and the blocking helpers.
"""

import io
import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock, patch

import pytest

from cmdexec import (
    CommandOrchestrator,
    ConfigCache,
    ConfigLoadError,
    ConfigValidationError,
    InvalidPatternError,
    MissingParameterError,
    exec_file,
    load_config,
    render_file,
)
from cmdexec import command_orchestrator
from cmdexec.command_orchestrator import get_default_orchestrator

ECHO_YAML = """
name: echo
version: "1"
commands:
  - command: echo {{msg}}
    required:
      - msg: .*
    timeout: 2
"""

TWO_COMMANDS_YAML = """
commands:
  - command: echo first
  - command: echo {{word}}
    required:
      - word: ^[a-z]+$
"""


@pytest.mark.asyncio
async def test_execute_returns_text(write_config):
    path = write_config(ECHO_YAML)
    text = await CommandOrchestrator().execute(path, {"msg": ["hello"]})
    assert text == "hello\n"


@pytest.mark.asyncio
async def test_execute_returns_json_error_on_bad_parameters(write_config):
    path = write_config(TWO_COMMANDS_YAML)
    text = await CommandOrchestrator().execute(path, {"word": ["UPPER"]})
    assert json.loads(text) == {"Message": "Value 'UPPER' is not valid for 'word'", "Code": 1}


@pytest.mark.asyncio
async def test_execute_missing_parameter_json(write_config):
    path = write_config(TWO_COMMANDS_YAML)
    body = json.loads(await CommandOrchestrator().execute(path, {}))
    assert body == {"Message": "Parameter word is missing", "Code": 1}


@pytest.mark.asyncio
async def test_execute_invalid_pattern_json(write_config):
    path = write_config("commands:\n  - command: echo {{x}}\n    required:\n      - x: '(['\n")
    body = json.loads(await CommandOrchestrator().execute(path, {"x": ["a"]}))
    assert body["Code"] == 1
    assert "Can not parse regexp" in body["Message"]


@pytest.mark.asyncio
async def test_render_writes_outputs_to_sink(write_config):
    path = write_config(TWO_COMMANDS_YAML)
    sink = io.BytesIO()
    await CommandOrchestrator().render(path, {"word": ["second"]}, sink)
    assert sink.getvalue() == b"first\nsecond\n"


@pytest.mark.asyncio
async def test_render_writes_error_body_and_raises(write_config):
    path = write_config(TWO_COMMANDS_YAML)
    sink = io.BytesIO()
    with pytest.raises(MissingParameterError):
        await CommandOrchestrator().render(path, {}, sink)
    assert json.loads(sink.getvalue()) == {"Message": "Parameter word is missing", "Code": 1}


@pytest.mark.asyncio
async def test_render_invalid_pattern_raises(write_config):
    path = write_config("commands:\n  - command: echo {{x}}\n    required:\n      - x: '(['\n")
    sink = io.BytesIO()
    with pytest.raises(InvalidPatternError):
        await CommandOrchestrator().render(path, {"x": ["a"]}, sink)
    assert b'"Code": 1' in sink.getvalue()


@pytest.mark.asyncio
async def test_config_load_failure_is_raised_not_rendered(tmp_path):
    sink = io.BytesIO()
    with pytest.raises(ConfigLoadError):
        await CommandOrchestrator().render(tmp_path / "missing.yaml", {}, sink)
    with pytest.raises(ConfigLoadError):
        await CommandOrchestrator().execute(tmp_path / "missing.yaml", {})
    assert sink.getvalue() == b""


@pytest.mark.asyncio
async def test_config_shape_failure_is_raised(write_config):
    path = write_config("commands: []\n")
    with pytest.raises(ConfigValidationError):
        await CommandOrchestrator().execute(path, {})


@pytest.mark.asyncio
async def test_orchestrator_reads_through_its_cache(write_config):
    path = write_config(ECHO_YAML)
    loader = Mock(side_effect=load_config)
    orchestrator = CommandOrchestrator(cache=ConfigCache(loader=loader))

    await orchestrator.execute(path, {"msg": ["a"]})
    await orchestrator.execute(path, {"msg": ["b"]})

    assert loader.call_count == 1
    assert path in orchestrator.cache


def test_exec_file_blocking(write_config):
    path = write_config(ECHO_YAML)
    assert exec_file(path, {"msg": ["sync"]}) == "sync\n"


def test_render_file_blocking(write_config):
    path = write_config(ECHO_YAML)
    sink = io.BytesIO()
    render_file(path, {"msg": ["sync"]}, sink)
    assert sink.getvalue() == b"sync\n"


def test_default_orchestrator_is_shared():
    assert get_default_orchestrator() is get_default_orchestrator()


@pytest.mark.asyncio
async def test_config_is_loaded_off_the_event_loop(write_config):
    path = write_config(ECHO_YAML)
    loader_threads = []

    def loader(p):
        loader_threads.append(threading.get_ident())
        return load_config(p)

    orchestrator = CommandOrchestrator(cache=ConfigCache(loader=loader))
    assert await orchestrator.execute(path, {"msg": ["a"]}) == "a\n"

    sink = io.BytesIO()
    orchestrator.cache.invalidate(path)
    await orchestrator.render(path, {"msg": ["b"]}, sink)

    assert len(loader_threads) == 2
    assert threading.get_ident() not in loader_threads


def test_default_orchestrator_created_once_across_threads(monkeypatch):
    monkeypatch.setattr(command_orchestrator, "_default_orchestrator", None)

    def slow_factory():
        time.sleep(0.05)
        return object()

    with patch.object(command_orchestrator, "CommandOrchestrator", side_effect=slow_factory) as factory:
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: get_default_orchestrator(), range(8)))

    assert factory.call_count == 1
    assert all(r is results[0] for r in results)
