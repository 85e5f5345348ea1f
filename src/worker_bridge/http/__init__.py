"""HTTP readiness gate and payload dispatch."""

from worker_bridge.http.dispatcher import PayloadDispatcher, encode_file_payload
from worker_bridge.http.readiness import (
    ReadinessGate,
    derive_health_url,
    probe_health,
    resolve_health_url,
)

__all__ = [
    "PayloadDispatcher",
    "ReadinessGate",
    "derive_health_url",
    "encode_file_payload",
    "probe_health",
    "resolve_health_url",
]
