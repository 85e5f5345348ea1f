"""CLI entrypoint for worker-bridge."""

from pathlib import Path

import rich_click as click

from worker_bridge import __version__
from worker_bridge.controllers import (
    BridgeCliController,
    BridgeCommandResult,
    DispatchCommand,
    HealthCommand,
    InvokeCommand,
)

click.rich_click.USE_MARKDOWN = True
CONTROLLER = BridgeCliController()


@click.group()
@click.version_option(version=__version__, prog_name="worker-bridge")
def worker_bridge() -> None:
    """Run JSON-emitting scripts and dispatch files to remote model services."""


@worker_bridge.command("invoke", context_settings={"ignore_unknown_options": True})
@click.argument("script_path", type=click.Path(path_type=Path))
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "--python",
    default=None,
    help="Interpreter used to run the script. Defaults to WORKER_BRIDGE_PYTHON.",
)
@click.option(
    "--timeout",
    "timeout_seconds",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Terminate the script after this many seconds.",
)
def invoke(
    script_path: Path,
    args: tuple[str, ...],
    python: str | None,
    timeout_seconds: float | None,
) -> None:
    """Run a script and print the JSON document it writes to stdout."""

    _emit(
        CONTROLLER.invoke(
            InvokeCommand(
                script_path=script_path,
                args=args,
                python=python,
                timeout_seconds=timeout_seconds,
            ),
        ),
    )


@worker_bridge.command("health")
@click.option("--url", default=None, help="Model URL. Defaults to WORKER_BRIDGE_MODEL_URL.")
@click.option("--health-url", default=None, help="Explicit health endpoint URL.")
@click.option(
    "--max-wait",
    "max_wait_seconds",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Total wait budget in seconds.",
)
@click.option(
    "--poll-interval",
    "poll_interval_seconds",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between health probes.",
)
def health(
    url: str | None,
    health_url: str | None,
    max_wait_seconds: float | None,
    poll_interval_seconds: float | None,
) -> None:
    """Wait until the model service reports healthy."""

    _emit(
        CONTROLLER.health(
            HealthCommand(
                url=url,
                health_url=health_url,
                max_wait_seconds=max_wait_seconds,
                poll_interval_seconds=poll_interval_seconds,
            ),
        ),
    )


@worker_bridge.command("dispatch")
@click.argument("file_path", type=click.Path(path_type=Path, exists=True, dir_okay=False))
@click.option("--url", default=None, help="Model URL. Defaults to WORKER_BRIDGE_MODEL_URL.")
@click.option("--health-url", default=None, help="Explicit health endpoint URL.")
@click.option("--token", default=None, help="Bearer token. Defaults to WORKER_BRIDGE_MODEL_TOKEN.")
def dispatch(
    file_path: Path,
    url: str | None,
    health_url: str | None,
    token: str | None,
) -> None:
    """Send a file to the model service once it is healthy and print the response."""

    _emit(
        CONTROLLER.dispatch(
            DispatchCommand(
                file_path=file_path,
                url=url,
                health_url=health_url,
                token=token,
            ),
        ),
    )


def _emit(result: BridgeCommandResult) -> None:
    if not result.success:
        raise click.ClickException("\n".join(result.lines))
    for line in result.lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    worker_bridge()
