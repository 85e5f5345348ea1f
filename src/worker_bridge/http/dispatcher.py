"""Send a base64-encoded file to a remote model once its health gate opens."""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import httpx

from worker_bridge.config import Settings
from worker_bridge.errors import DispatchError, HealthUrlUnresolvedError, ReadinessTimeoutError
from worker_bridge.http.client import client_scope
from worker_bridge.http.readiness import ReadinessGate

logger = logging.getLogger(__name__)

PAYLOAD_FIELD = "file_bytes"


def encode_file_payload(file_path: Path) -> dict[str, str]:
    """Read the whole file and wrap its base64 text in the request payload."""

    content = file_path.read_bytes()
    return {PAYLOAD_FIELD: base64.b64encode(content).decode("ascii")}


class PayloadDispatcher:
    """Readiness-gated single POST of a file payload. Never retries."""

    def __init__(self, settings: Settings, *, client: httpx.Client | None = None) -> None:
        self.settings = settings
        self._client = client

    def dispatch(
        self,
        file_path: str | Path,
        target_url: str | None = None,
        headers: Mapping[str, str] | None = None,
        health_url: str | None = None,
    ) -> Any:
        """Return the decoded response body; raise ``DispatchError`` on any failure."""

        url = target_url or self.settings.dispatch.target_url
        if not url:
            raise DispatchError("Model request failed: no target URL configured.")
        request_headers = (
            dict(headers) if headers is not None else self.settings.dispatch.default_headers()
        )
        try:
            payload = encode_file_payload(Path(file_path))
        except OSError as error:
            raise DispatchError(
                f"Model request failed: cannot read {file_path}: {error}",
            ) from error

        timeout = self.settings.dispatch.request_timeout_seconds
        with client_scope(self._client, timeout_seconds=timeout) as client:
            gate = ReadinessGate(self.settings.health, client=client)
            try:
                gate.wait(url, request_headers, health_url)
            except (ReadinessTimeoutError, HealthUrlUnresolvedError) as error:
                logger.error("Model at %s never became ready: %s", url, error)
                raise DispatchError(f"Model request failed: {error}") from error
            return self._post(client, url, payload, request_headers, timeout)

    def _post(
        self,
        client: httpx.Client,
        url: str,
        payload: dict[str, str],
        headers: dict[str, str],
        timeout: float,
    ) -> Any:
        try:
            response = client.post(url, json=payload, headers=headers, timeout=timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as error:
            detail = str(error) or type(error).__name__
            logger.error("Model request to %s failed: %s", url, detail)
            raise DispatchError(f"Model request failed: {detail}") from error

        body = _response_body(response)
        if not response.is_success:
            logger.error(
                "Model request to %s failed with HTTP %s: %s",
                url,
                response.status_code,
                body,
            )
            raise DispatchError(
                f"Model request failed with HTTP {response.status_code}: {_render_body(body)}",
                status_code=response.status_code,
                body=body,
            )
        logger.info("Model request to %s succeeded with HTTP %s", url, response.status_code)
        return body


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _render_body(body: Any) -> str:
    if isinstance(body, str):
        return body
    return json.dumps(body, ensure_ascii=False)
