"""Main MCP Server implementation for interactive browser test debugging."""

import argparse
import asyncio
import logging
from typing import Any, Dict, List

from fastmcp import FastMCP

from debugmcp.components.debugging import DebugSessionManager
from debugmcp.models.config_models import load_config

logger = logging.getLogger(__name__)


# Initialize FastMCP server
mcp = FastMCP("Browser Debug MCP Server")

config = load_config()
debug_manager = DebugSessionManager(config)


def _log_config_banner() -> None:
    """Log the effective configuration and any problems with it at server start."""

    logger.info(
        (
            "--- Debug MCP configuration ---\n"
            f"browser: {config.BROWSER_TYPE} (headless={config.HEADLESS}, slow_mo={config.SLOW_MO_MS}ms)\n"
            f"action timeout: {config.ACTION_TIMEOUT_MS}ms\n"
            f"debug output: {config.debug_dir}\n"
        )
    )
    for problem in config.validate():
        logger.warning(f"Configuration problem: {problem}")


@mcp.tool
async def debug_test(
    test_name: str,
    step_source: List[Dict[str, Any]] | str | None = None,
    run_immediately: bool = False,
    break_at: List[str] | None = None,
    clear_previous: bool = False,
) -> Dict[str, Any]:
    """Prepare (or update) the interactive debug session for a test.

    Args:
        test_name: Name of the debug test. A different name, or clear_previous,
            replaces the current session and closes its browser.
        step_source: Steps as a list of {"id", "type", "params"} records, or the
            same list as JSON text. Types: navigate, click, type, extract,
            screenshot, wait, assert, execute. Replaces the current step list.
        run_immediately: Run the steps right away when any are defined.
        break_at: Step ids to pause before.
        clear_previous: Start a fresh session even when test_name matches.

    Returns:
        Dict[str, Any]: Result with:
            - success: bool
            - test_name, step_count, breakpoints, message on success
            - run results (see run_debug_test) when run_immediately is set
            - error/error_type/logs/screenshots on failure
    """
    return await debug_manager.debug_test(
        test_name=test_name,
        step_source=step_source,
        run_immediately=run_immediately,
        break_at=break_at,
        clear_previous=clear_previous,
    )


@mcp.tool
async def run_debug_test(
    test_name: str,
    from_step: int = 0,
    to_step: int = -1,
    run_to_breakpoint: bool = True,
) -> Dict[str, Any]:
    """Run the prepared debug test, stopping at breakpoints or the first failure.

    Args:
        test_name: Name used with debug_test.
        from_step: First step index to run.
        to_step: Last step index to run (-1 for the last step).
        run_to_breakpoint: Pause before steps listed as breakpoints.

    Returns:
        Dict[str, Any]: Run result with:
            - success: False only when a step or the run itself failed
            - state: paused, completed or failed
            - current_step_index, paused, current_step
            - logs, screenshots: diagnostics of this run
            - error/error_type/failed_step_index on failure
    """
    return await debug_manager.run_debug_test(
        test_name=test_name,
        from_step=from_step,
        to_step=to_step,
        run_to_breakpoint=run_to_breakpoint,
    )


@mcp.tool
async def continue_debug_test(
    steps: int = -1,
    run_to_breakpoint: bool = True,
) -> Dict[str, Any]:
    """Resume a paused debug test at the step it paused before.

    Args:
        steps: Number of steps to run before pausing again (-1 runs to the end).
        run_to_breakpoint: Pause at the next breakpoint.

    Returns:
        Dict[str, Any]: Same shape as run_debug_test.
    """
    return await debug_manager.continue_debug_test(
        steps=steps, run_to_breakpoint=run_to_breakpoint
    )


@mcp.tool
async def modify_debug_step(
    step_id: str,
    type: str,
    params: Dict[str, Any] | None = None,
    index: int = -1,
    run_after: bool = False,
) -> Dict[str, Any]:
    """Add a step to the debug test or replace an existing one.

    Args:
        step_id: Id of the step. An existing id is updated in place and reset to pending.
        type: Step type (navigate, click, type, extract, screenshot, wait, assert, execute).
        params: Step parameters, e.g. {"url": ...} or {"selector": ..., "text": ...}.
        index: Insert position for new steps (-1 appends).
        run_after: Run only this step right after the change.

    Returns:
        Dict[str, Any]: success, message, step_index, step_count; run results when run_after is set.
    """
    return await debug_manager.modify_debug_step(
        step_id=step_id,
        step_type=type,
        params=params,
        index=index,
        run_after=run_after,
    )


@mcp.tool
async def get_debug_state(include_step_results: bool = True) -> Dict[str, Any]:
    """Return the debug session: position, breakpoints, steps, logs and screenshots.

    Args:
        include_step_results: Include each step's result, error and screenshot.
    """
    return await debug_manager.get_debug_state(include_step_results=include_step_results)


@mcp.tool
async def cleanup_debug_session() -> Dict[str, Any]:
    """Close the debug browser and reset the session. Safe to call repeatedly."""
    return await debug_manager.cleanup_debug_session()


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Debug MCP server for interactive browser test debugging."
    )
    parser.add_argument(
        "--transport",
        dest="transport",
        choices=["stdio", "http", "sse"],
        help="Transport to use for the MCP server (default: stdio).",
    )
    parser.add_argument(
        "--host",
        dest="host",
        help="Host/interface for HTTP transport (default 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        dest="port",
        type=int,
        help="Port for HTTP transport (default 8000).",
    )
    parser.add_argument(
        "--path",
        dest="path",
        help="Path for HTTP/streamable endpoints (default '/').",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        help="Log level for the MCP server (e.g., INFO, DEBUG).",
    )
    return parser


def main(argv: List[str] | None = None) -> None:
    """Start the debug MCP server."""

    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=(args.log_level or "INFO").upper())
    _log_config_banner()

    try:
        run_kwargs = {}

        # Default to stdio when no transport is provided
        transport = args.transport or "stdio"
        run_kwargs["transport"] = transport

        if args.log_level:
            run_kwargs["log_level"] = args.log_level

        # Only pass host/port/path when using HTTP/SSE transports
        if transport != "stdio":
            if args.host:
                run_kwargs["host"] = args.host
            if args.port:
                run_kwargs["port"] = args.port
            if args.path:
                run_kwargs["path"] = args.path

        mcp.run(**run_kwargs)
    except KeyboardInterrupt:
        logger.info("Debug MCP server interrupted by user")
    finally:
        try:
            asyncio.run(debug_manager.cleanup())
        except Exception:
            logger.debug("Failed to cleanup debug session on shutdown", exc_info=True)


if __name__ == "__main__":
    main()
