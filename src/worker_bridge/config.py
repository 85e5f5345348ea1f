"""Runtime configuration for process invocation, readiness checks and dispatch."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from urllib.parse import urlparse

DEFAULT_HEALTH_MAX_WAIT_SECONDS = 120.0
DEFAULT_HEALTH_POLL_INTERVAL_SECONDS = 3.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 120.0


@dataclass(frozen=True, slots=True)
class ProcessSettings:
    """External JSON-emitting process settings."""

    executable: str = sys.executable
    timeout_seconds: float | None = None


@dataclass(frozen=True, slots=True)
class HealthSettings:
    """Readiness gate settings, fixed for one gate evaluation."""

    health_url: str | None = None
    default_health_url: str | None = None
    wait_budget_seconds: float = DEFAULT_HEALTH_MAX_WAIT_SECONDS
    poll_interval_seconds: float = DEFAULT_HEALTH_POLL_INTERVAL_SECONDS
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    allow_unresolved: bool = True

    @property
    def poll_timeout_seconds(self) -> float:
        """Per-poll timeout: never longer than two poll intervals."""

        return min(self.request_timeout_seconds, self.poll_interval_seconds * 2)


@dataclass(frozen=True, slots=True)
class DispatchSettings:
    """Remote model endpoint settings."""

    target_url: str | None = None
    token: str | None = None
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS

    def default_headers(self) -> dict[str, str]:
        """Bearer authorization header when a token is configured."""

        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


@dataclass(frozen=True, slots=True)
class Settings:
    """Application settings grouped by domain concerns."""

    process: ProcessSettings = field(default_factory=ProcessSettings)
    health: HealthSettings = field(default_factory=HealthSettings)
    dispatch: DispatchSettings = field(default_factory=DispatchSettings)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables with local development defaults."""

        request_timeout = float(
            os.getenv(
                "WORKER_BRIDGE_REQUEST_TIMEOUT_SECONDS",
                str(DEFAULT_REQUEST_TIMEOUT_SECONDS),
            ),
        )
        return cls(
            process=ProcessSettings(
                executable=os.getenv("WORKER_BRIDGE_PYTHON") or sys.executable,
                timeout_seconds=_env_optional_float("WORKER_BRIDGE_PROCESS_TIMEOUT_SECONDS"),
            ),
            health=HealthSettings(
                health_url=_env_optional("WORKER_BRIDGE_HEALTH_URL"),
                default_health_url=_env_optional("WORKER_BRIDGE_DEFAULT_HEALTH_URL"),
                wait_budget_seconds=float(
                    os.getenv(
                        "WORKER_BRIDGE_HEALTH_MAX_WAIT_SECONDS",
                        str(DEFAULT_HEALTH_MAX_WAIT_SECONDS),
                    ),
                ),
                poll_interval_seconds=float(
                    os.getenv(
                        "WORKER_BRIDGE_HEALTH_POLL_INTERVAL_SECONDS",
                        str(DEFAULT_HEALTH_POLL_INTERVAL_SECONDS),
                    ),
                ),
                request_timeout_seconds=request_timeout,
                allow_unresolved=_env_bool("WORKER_BRIDGE_HEALTH_ALLOW_UNRESOLVED", default=True),
            ),
            dispatch=DispatchSettings(
                target_url=_env_optional("WORKER_BRIDGE_MODEL_URL"),
                token=_env_optional("WORKER_BRIDGE_MODEL_TOKEN"),
                request_timeout_seconds=request_timeout,
            ),
        )

    def validate(self) -> None:
        """Raise configuration error if any timing or URL setting is invalid."""

        if self.process.timeout_seconds is not None and self.process.timeout_seconds <= 0:
            raise ValueError("WORKER_BRIDGE_PROCESS_TIMEOUT_SECONDS must be > 0.")
        if self.health.wait_budget_seconds <= 0:
            raise ValueError("WORKER_BRIDGE_HEALTH_MAX_WAIT_SECONDS must be > 0.")
        if self.health.poll_interval_seconds <= 0:
            raise ValueError("WORKER_BRIDGE_HEALTH_POLL_INTERVAL_SECONDS must be > 0.")
        if self.health.request_timeout_seconds <= 0 or self.dispatch.request_timeout_seconds <= 0:
            raise ValueError("WORKER_BRIDGE_REQUEST_TIMEOUT_SECONDS must be > 0.")
        for name, value in (
            ("WORKER_BRIDGE_HEALTH_URL", self.health.health_url),
            ("WORKER_BRIDGE_DEFAULT_HEALTH_URL", self.health.default_health_url),
            ("WORKER_BRIDGE_MODEL_URL", self.dispatch.target_url),
        ):
            if value is not None:
                _validate_http_url(name, value)


def _validate_http_url(name: str, value: str) -> None:
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(
            f"Invalid {name}: {value!r}. Expected an absolute URL with http:// or https:// scheme.",
        )


def _env_optional(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


def _env_optional_float(name: str) -> float | None:
    value = _env_optional(name)
    if value is None:
        return None
    return float(value)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
