"""Subprocess runner for scripts that answer with one JSON document on stdout."""

from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path
from typing import Any

from worker_bridge.errors import InvocationTimeoutError, ProcessStartError
from worker_bridge.process.base import ArgsInput, InvocationRequest, ProcessRun, normalize_args
from worker_bridge.process.classifier import classify_process_run

logger = logging.getLogger(__name__)

_TERMINATE_GRACE_SECONDS = 2


class ProcessInvoker:
    """Run ``executable script *args`` and classify its JSON output."""

    def __init__(self, executable: str, *, timeout_seconds: float | None = None) -> None:
        self.executable = executable
        self.timeout_seconds = timeout_seconds

    def build_request(
        self,
        script_path: str | Path,
        args: ArgsInput = None,
        *,
        timeout_seconds: float | None = None,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> InvocationRequest:
        return InvocationRequest(
            executable=self.executable,
            script_path=str(script_path),
            args=tuple(normalize_args(args)),
            timeout_seconds=(
                timeout_seconds if timeout_seconds is not None else self.timeout_seconds
            ),
            cwd=cwd,
            env=env,
        )

    def invoke(
        self,
        script_path: str | Path,
        args: ArgsInput = None,
        *,
        timeout_seconds: float | None = None,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> Any:
        """Run the script and return its parsed JSON output.

        Raises ``ProcessStartError``, ``InvocationTimeoutError``,
        ``OutputParseError`` or ``ExitCodeError``.
        """

        request = self.build_request(
            script_path,
            args,
            timeout_seconds=timeout_seconds,
            cwd=cwd,
            env=env,
        )
        run = run_process(request)
        if run.signal_number is not None:
            logger.warning(
                "Process %s was killed by signal %s",
                request.script_path,
                run.signal_number,
            )
        return classify_process_run(run)


def run_process(request: InvocationRequest) -> ProcessRun:
    """Run one process to completion, accumulating both output streams."""

    argv = request.argv
    try:
        process = subprocess.Popen(  # noqa: S603
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=request.cwd,
            env=request.env,
        )
    except OSError as error:
        raise ProcessStartError(f"Failed to start process: {error}") from error

    start_monotonic = time.monotonic()
    try:
        stdout_bytes, stderr_bytes = process.communicate(timeout=request.timeout_seconds)
    except subprocess.TimeoutExpired as error:
        _terminate_process(process)
        try:
            _, stderr_bytes = process.communicate(timeout=_TERMINATE_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            stderr_bytes = b""
        logger.warning(
            "Process %s exceeded timeout of %ss and was terminated",
            request.script_path,
            request.timeout_seconds,
        )
        raise InvocationTimeoutError(
            f"Process timed out after {request.timeout_seconds}s: {request.script_path}",
            timeout_seconds=float(request.timeout_seconds or 0),
            stderr=_decode(stderr_bytes),
        ) from error

    returncode = process.returncode
    exit_code: int | None = returncode
    signal_number: int | None = None
    if returncode < 0:
        exit_code = None
        signal_number = -returncode

    return ProcessRun(
        argv=tuple(argv),
        exit_code=exit_code,
        stdout=_decode(stdout_bytes),
        stderr=_decode(stderr_bytes),
        signal_number=signal_number,
        elapsed_seconds=time.monotonic() - start_monotonic,
    )


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def _terminate_process(process: subprocess.Popen[bytes]) -> None:
    try:
        process.terminate()
    except OSError:
        return
    try:
        process.wait(timeout=_TERMINATE_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        try:
            process.kill()
        except OSError:
            return
        process.wait(timeout=_TERMINATE_GRACE_SECONDS)
