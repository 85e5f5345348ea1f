"""Shared httpx client construction for health polling and payload dispatch."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import httpx

from worker_bridge import __version__

DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0
DEFAULT_USER_AGENT = f"worker-bridge/{__version__}"


def build_client(
    *,
    timeout_seconds: float,
    headers: dict[str, str] | None = None,
    user_agent: str = DEFAULT_USER_AGENT,
) -> httpx.Client:
    """Create a client with bounded timeouts; callers own and close it."""

    base_headers = {"User-Agent": user_agent}
    if headers:
        base_headers.update(headers)
    return httpx.Client(
        timeout=httpx.Timeout(
            timeout_seconds,
            connect=min(timeout_seconds, DEFAULT_CONNECT_TIMEOUT_SECONDS),
        ),
        headers=base_headers,
        follow_redirects=True,
    )


@contextmanager
def client_scope(client: httpx.Client | None, *, timeout_seconds: float) -> Iterator[httpx.Client]:
    """Yield ``client`` untouched, or a fresh client closed on exit."""

    if client is not None:
        yield client
        return
    owned = build_client(timeout_seconds=timeout_seconds)
    try:
        yield owned
    finally:
        owned.close()
