"""Main module entrypoint for local runtime execution.

This module validates startup configuration and either launches the FastAPI
service or runs one fetch-then-submit workflow.
"""

import argparse
import asyncio

import structlog
import uvicorn

from oracle_relay.adapters import OracleRelayError
from oracle_relay.bootstrap import RuntimeComponents, bootstrap_create_application, bootstrap_create_runtime
from oracle_relay.config import config_load_settings
from oracle_relay.observability import observability_configure_logging

logger = structlog.get_logger(__name__)

MAIN_DEFAULT_LISTEN_SECONDS = 15.0


def main_build_argument_parser() -> argparse.ArgumentParser:
    """Build the command-line parser for the runtime entrypoint.

    Returns:
        argparse.ArgumentParser: Parser for `api` and `workflow-run` commands.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    argument_parser = argparse.ArgumentParser(description="Oracle relay runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "workflow-run"),
        help="Runtime command: `api` starts server, `workflow-run` fetches once and submits the result",
        type=str,
    )
    argument_parser.add_argument(
        "--source-uri",
        dest="source_uri",
        type=str,
        help="Optional data source URI override for `workflow-run`",
    )
    argument_parser.add_argument(
        "--request-id",
        dest="request_id",
        type=int,
        help="Optional oracle request id override for `workflow-run`",
    )
    argument_parser.add_argument(
        "--listen-seconds",
        dest="listen_seconds",
        type=float,
        default=MAIN_DEFAULT_LISTEN_SECONDS,
        help=(
            "Seconds `workflow-run` keeps the completion listener alive after finality so the "
            f"correlated completion event is logged (default {MAIN_DEFAULT_LISTEN_SECONDS:g}); "
            "`0` exits right after confirmation and may miss the event"
        ),
    )
    return argument_parser


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with code 1 when the workflow fails or fetches no data.
    """

    parsed_arguments = main_build_argument_parser().parse_args()

    settings = config_load_settings()
    observability_configure_logging(level=settings.log_level, fmt=settings.log_format)

    if parsed_arguments.command == "workflow-run":
        runtime = bootstrap_create_runtime(settings=settings)
        exit_code = asyncio.run(
            main_run_workflow(
                runtime=runtime,
                source_uri=parsed_arguments.source_uri,
                request_id=parsed_arguments.request_id,
                listen_seconds=parsed_arguments.listen_seconds,
            )
        )
        if exit_code != 0:
            raise SystemExit(exit_code)
        return

    application = bootstrap_create_application(runtime=bootstrap_create_runtime(settings=settings))
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


async def main_run_workflow(
    runtime: RuntimeComponents,
    source_uri: str | None = None,
    request_id: int | None = None,
    listen_seconds: float = 0.0,
) -> int:
    """Run one workflow and report the outcome as a process exit code.

    Args:
        runtime: Wired runtime collaborators.
        source_uri: Optional source URI override.
        request_id: Optional request id override.
        listen_seconds: Seconds to keep the completion listener alive after confirmation.

    Returns:
        int: `0` on success, `1` when no data was fetched or submission failed.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    orchestrator = runtime.workflow_orchestrator
    try:
        execution_result = await orchestrator.job_execute_for(
            source_uri=(source_uri or "").strip() or orchestrator.config.source_uri,
            request_id=request_id if request_id is not None else orchestrator.config.request_id,
        )
        if execution_result.status != "success":
            return 1
        if listen_seconds > 0:
            await asyncio.sleep(listen_seconds)
        return 0
    except OracleRelayError as error:
        logger.error(
            "workflow submission failed",
            error_type=type(error).__name__,
            error=str(error),
            operation_handle=error.operation_handle,
        )
        return 1
    finally:
        await runtime.runtime_close()


if __name__ == "__main__":
    main()
