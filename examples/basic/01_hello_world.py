"""
01_hello_world.py - Minimal cmdexec example

This is the simplest possible cmdexec example. It demonstrates:
- Building an ExecConfig in code with a single parameterised command
- Running it with CommandOrchestrator.run()
- Reading the aggregated output

Try it:
    python examples/basic/01_hello_world.py
"""
# ruff: noqa: T201

import asyncio

from cmdexec import CommandConfig, CommandOrchestrator, ExecConfig, RequiredParameter


async def main():
    """Run a simple 'echo' command using cmdexec."""

    # Step 1: One command whose argument comes from the caller.
    # The regex restricts {{name}} to a single word.
    echo_config = CommandConfig(
        command="echo Hello {{name}}",
        required=[RequiredParameter(name="name", pattern=r"^\w+$")],
        timeout=2,
    )
    config = ExecConfig(name="hello", commands=[echo_config])

    # Step 2: Run it. Parameters map a name to a list of values.
    orchestrator = CommandOrchestrator()
    aggregate = await orchestrator.run(config, {"name": ["cmdexec"]})

    # Step 3: Inspect the result
    for result in aggregate:
        print(f"{result.command_name}: state={result.state.value} in {result.duration_str}")
    print(f"Output: {aggregate.text}", end="")


if __name__ == "__main__":
    asyncio.run(main())
