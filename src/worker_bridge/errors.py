"""Error taxonomy for process invocation, readiness checks and payload dispatch."""

from __future__ import annotations


class WorkerBridgeError(RuntimeError):
    """Base error; ``stage`` names the step that failed."""

    stage = "unknown"


class InvocationError(WorkerBridgeError):
    """External process did not produce an acceptable JSON result."""

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class ProcessStartError(InvocationError):
    """Process could not be launched at all."""

    stage = "process_start"


class InvocationTimeoutError(InvocationError):
    """Process was terminated after exceeding its timeout."""

    stage = "process_timeout"

    def __init__(self, message: str, *, timeout_seconds: float, stderr: str = "") -> None:
        super().__init__(message, exit_code=None, stderr=stderr)
        self.timeout_seconds = timeout_seconds


class OutputParseError(InvocationError):
    """Process stdout is not a single valid JSON document."""

    stage = "process_output"


class ExitCodeError(InvocationError):
    """Process exited non-zero without a structured ``error`` payload."""

    stage = "process_exit"


class ReadinessTimeoutError(WorkerBridgeError):
    """Health endpoint never reported ready within the wait budget."""

    stage = "health_check"

    def __init__(
        self,
        *,
        health_url: str,
        elapsed_seconds: float,
        wait_budget_seconds: float,
    ) -> None:
        super().__init__(
            f"Health check failed after {wait_budget_seconds:g}s at {health_url} "
            f"(elapsed {elapsed_seconds:.1f}s)",
        )
        self.health_url = health_url
        self.elapsed_seconds = elapsed_seconds
        self.wait_budget_seconds = wait_budget_seconds


class HealthUrlUnresolvedError(WorkerBridgeError):
    """No health URL could be resolved and skipping the check is disabled."""

    stage = "health_check"


class DispatchError(WorkerBridgeError):
    """Payload request failed or was never sent."""

    stage = "dispatch"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: object = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
