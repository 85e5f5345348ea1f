"""Deterministic classification of a finished process into a JSON result or error."""

from __future__ import annotations

import json
from typing import Any

from worker_bridge.errors import ExitCodeError, OutputParseError
from worker_bridge.process.base import ProcessRun

ERROR_KEY = "error"


def classify_process_run(run: ProcessRun) -> Any:
    """Return parsed stdout JSON, or raise the error matching the run outcome.

    Stdout is always parsed first, whatever the exit code. A non-zero exit
    still yields a result when stdout is a JSON object carrying an ``error``
    key: that is the child's structured way to report a domain failure.
    """

    try:
        result = json.loads(run.stdout)
    except json.JSONDecodeError as error:
        raise OutputParseError(
            f"Failed to parse process output: {error}",
            exit_code=run.exit_code,
            stderr=run.stderr,
        ) from error

    if run.succeeded:
        return result
    if isinstance(result, dict) and ERROR_KEY in result:
        return result
    raise ExitCodeError(
        f"Process exited with {_describe_exit(run)}: {run.stderr}",
        exit_code=run.exit_code,
        stderr=run.stderr,
    )


def _describe_exit(run: ProcessRun) -> str:
    if run.exit_code is None and run.signal_number is not None:
        return f"signal {run.signal_number}"
    return f"code {run.exit_code}"
