"""Readiness gate: poll a health endpoint until it reports ok or the budget runs out."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from urllib.parse import urlsplit, urlunsplit

import httpx

from worker_bridge.config import HealthSettings
from worker_bridge.errors import HealthUrlUnresolvedError, ReadinessTimeoutError
from worker_bridge.http.client import client_scope

logger = logging.getLogger(__name__)

HEALTH_PATH_SEGMENT = "health"
HEALTHY_STATUS = "ok"
HTTP_OK = 200


def derive_health_url(target_url: str) -> str:
    """Append ``health`` to the target URL path, keeping query and fragment.

    Only absolute http(s) URLs are derivable; anything else raises ``ValueError``
    so the caller falls back to the configured default health URL.
    """

    parts = urlsplit(target_url)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ValueError(f"Cannot derive health URL from {target_url!r}.")
    path = parts.path if parts.path.endswith("/") else f"{parts.path}/"
    return urlunsplit(parts._replace(path=f"{path}{HEALTH_PATH_SEGMENT}"))


def resolve_health_url(
    target_url: str | None,
    explicit_health_url: str | None = None,
    default_health_url: str | None = None,
) -> str | None:
    """Pick the health URL: explicit, then derived from target, then the default."""

    if explicit_health_url:
        return explicit_health_url
    try:
        return derive_health_url(target_url or "")
    except ValueError:
        return default_health_url or None


def probe_health(
    client: httpx.Client,
    health_url: str,
    *,
    headers: Mapping[str, str],
    timeout_seconds: float,
) -> bool:
    """Return True only for HTTP 200 with a JSON body whose ``status`` is ``ok``."""

    try:
        response = client.get(health_url, headers=dict(headers), timeout=timeout_seconds)
    except (httpx.HTTPError, httpx.InvalidURL) as error:
        logger.debug("Health probe %s not ready: %s", health_url, error)
        return False
    if response.status_code != HTTP_OK:
        logger.debug("Health probe %s not ready: HTTP %s", health_url, response.status_code)
        return False
    try:
        body = response.json()
    except ValueError:
        logger.debug("Health probe %s not ready: non-JSON body", health_url)
        return False
    status = body.get("status") if isinstance(body, dict) else None
    return isinstance(status, str) and status.lower() == HEALTHY_STATUS


class ReadinessGate:
    """Fixed-interval health polling bounded by a total wait budget."""

    def __init__(self, settings: HealthSettings, *, client: httpx.Client | None = None) -> None:
        self.settings = settings
        self._client = client

    def wait(
        self,
        target_url: str | None,
        headers: Mapping[str, str] | None = None,
        health_url: str | None = None,
    ) -> str | None:
        """Block until the service is healthy; return the probed URL.

        Returns ``None`` without polling when no health URL can be resolved and
        ``allow_unresolved`` is set.
        """

        resolved = resolve_health_url(
            target_url,
            health_url or self.settings.health_url,
            self.settings.default_health_url,
        )
        if resolved is None:
            if not self.settings.allow_unresolved:
                raise HealthUrlUnresolvedError(
                    f"No health URL could be resolved for target {target_url!r}.",
                )
            logger.debug("No health URL for %r, skipping readiness check", target_url)
            return None

        poll_timeout = self.settings.poll_timeout_seconds
        with client_scope(self._client, timeout_seconds=poll_timeout) as client:
            self._poll(client, resolved, headers or {})
        return resolved

    def _poll(self, client: httpx.Client, health_url: str, headers: Mapping[str, str]) -> None:
        budget = self.settings.wait_budget_seconds
        interval = self.settings.poll_interval_seconds
        start = time.monotonic()
        attempts = 0

        while time.monotonic() - start < budget:
            attempts += 1
            if probe_health(
                client,
                health_url,
                headers=headers,
                timeout_seconds=self.settings.poll_timeout_seconds,
            ):
                logger.info(
                    "Service healthy at %s after %s attempt(s), %.1fs",
                    health_url,
                    attempts,
                    time.monotonic() - start,
                )
                return
            remaining = budget - (time.monotonic() - start)
            if remaining <= 0:
                break
            time.sleep(min(interval, remaining))

        elapsed = time.monotonic() - start
        logger.warning(
            "Health check at %s timed out after %s attempt(s), %.1fs",
            health_url,
            attempts,
            elapsed,
        )
        raise ReadinessTimeoutError(
            health_url=health_url,
            elapsed_seconds=elapsed,
            wait_budget_seconds=budget,
        )
