"""
01_error_handling.py - Error handling patterns

This example demonstrates:
- Catching parameter validation errors (nothing runs)
- Config load failures (raised, never rendered as JSON)
- Execution failures and timeouts (recorded, later commands still run)

Try it:
    python examples/advanced/01_error_handling.py
"""
# ruff: noqa: T201

import asyncio

from cmdexec import (
    CommandConfig,
    CommandOrchestrator,
    ConfigLoadError,
    ExecConfig,
    ParameterValidationError,
    RequiredParameter,
    error_response,
    setup_logging,
)


async def main():
    """Demonstrate error handling patterns."""
    setup_logging(level="WARNING", format_string="[%(levelname)s] %(message)s")
    orchestrator = CommandOrchestrator()

    # Step 1: Parameter errors abort the whole request
    print("1. ParameterValidationError:")
    config = ExecConfig(
        commands=[
            CommandConfig(command="echo never runs"),
            CommandConfig(command="seq {{n}}", required=[RequiredParameter("n", r"^\d+$")]),
        ]
    )
    for parameters in ({}, {"n": ["12a"]}):
        try:
            await orchestrator.run(config, parameters)
        except ParameterValidationError as e:
            print(f"   ✓ {type(e).__name__}: {error_response(e)}")

    # Step 2: Config load errors are fatal to the invocation
    print("\n2. ConfigLoadError:")
    try:
        await orchestrator.execute("/nonexistent/commands.yaml", {})
    except ConfigLoadError as e:
        print(f"   ✓ Caught: {e}")

    # Step 3: Execution failures degrade their slot only
    print("\n3. Execution failures:")
    config = ExecConfig(
        commands=[
            CommandConfig(command="sleep 3", timeout=1),
            CommandConfig(command="no-such-program"),
            CommandConfig(command="false"),
            CommandConfig(command="echo still running"),
        ]
    )
    aggregate = await orchestrator.run(config)
    for result in aggregate:
        print(f"   #{result.index} {result.command_name}: {result.state.value} ({result.error})")
    print(f"   Output: {aggregate.text!r}")


if __name__ == "__main__":
    asyncio.run(main())
