"""
02_yaml_config/run.py - Loading and running commands from a YAML file

This example demonstrates:
- Reading a config file through the orchestrator's cache
- Getting plain text with execute()
- Streaming output into a byte sink with render()

The commands.yaml file in this directory defines the commands.

Try it:
    python examples/basic/02_yaml_config/run.py /tmp
"""
# ruff: noqa: T201

import asyncio
import io
import sys
from pathlib import Path

from cmdexec import CommandOrchestrator


async def main(directory: str):
    config_path = Path(__file__).parent / "commands.yaml"
    orchestrator = CommandOrchestrator()

    # Step 1: execute() returns the concatenated output of every command
    print(f"Running {config_path.name} for {directory}...\n")
    text = await orchestrator.execute(config_path, {"dir": [directory]})
    print(text)

    # Step 2: render() writes into any object with write(bytes), e.g. a response body.
    # The config is served from the cache this time.
    sink = io.BytesIO()
    await orchestrator.render(config_path, {"dir": [directory]}, sink)
    print(f"render() wrote {len(sink.getvalue())} bytes")

    # Step 3: A relative path fails the regex, so nothing runs and a JSON error comes back
    print(await orchestrator.execute(config_path, {"dir": ["relative/path"]}))


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "/tmp"))
