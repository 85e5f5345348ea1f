"""External JSON-emitting process invocation."""

from worker_bridge.process.base import InvocationRequest, ProcessRun, normalize_args
from worker_bridge.process.classifier import classify_process_run
from worker_bridge.process.invoker import ProcessInvoker, run_process

__all__ = [
    "InvocationRequest",
    "ProcessInvoker",
    "ProcessRun",
    "classify_process_run",
    "normalize_args",
    "run_process",
]
