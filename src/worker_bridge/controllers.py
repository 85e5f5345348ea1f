"""Controllers for worker-bridge CLI commands."""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path

from worker_bridge.config import Settings
from worker_bridge.errors import WorkerBridgeError
from worker_bridge.http import PayloadDispatcher, ReadinessGate
from worker_bridge.process import ProcessInvoker


@dataclass(slots=True)
class InvokeCommand:
    """CLI input for one JSON-emitting script run."""

    script_path: Path
    args: tuple[str, ...]
    python: str | None = None
    timeout_seconds: float | None = None


@dataclass(slots=True)
class HealthCommand:
    """CLI input for a standalone readiness check."""

    url: str | None
    health_url: str | None = None
    max_wait_seconds: float | None = None
    poll_interval_seconds: float | None = None


@dataclass(slots=True)
class DispatchCommand:
    """CLI input for a readiness-gated file dispatch."""

    file_path: Path
    url: str | None = None
    health_url: str | None = None
    token: str | None = None


@dataclass(slots=True)
class BridgeCommandResult:
    """Report to render in CLI."""

    lines: list[str]
    success: bool


class BridgeCliController:
    """Builds settings from the environment plus CLI overrides and runs one operation."""

    def invoke(self, command: InvokeCommand) -> BridgeCommandResult:
        settings, error = _load_settings()
        if settings is None:
            return _failure("Invoke", error)
        invoker = ProcessInvoker(
            command.python or settings.process.executable,
            timeout_seconds=settings.process.timeout_seconds,
        )
        try:
            result = invoker.invoke(
                command.script_path,
                list(command.args),
                timeout_seconds=command.timeout_seconds,
            )
        except WorkerBridgeError as error:
            return _failure("Invoke", str(error))
        return BridgeCommandResult(lines=[_render_json(result)], success=True)

    def health(self, command: HealthCommand) -> BridgeCommandResult:
        settings, error = _load_settings()
        if settings is None:
            return _failure("Health check", error)
        health = settings.health
        if command.max_wait_seconds is not None:
            health = replace(health, wait_budget_seconds=command.max_wait_seconds)
        if command.poll_interval_seconds is not None:
            health = replace(health, poll_interval_seconds=command.poll_interval_seconds)

        url = command.url or settings.dispatch.target_url
        try:
            healthy_url = ReadinessGate(health).wait(
                url,
                settings.dispatch.default_headers(),
                command.health_url,
            )
        except WorkerBridgeError as error:
            return _failure("Health check", str(error))
        if healthy_url is None:
            return BridgeCommandResult(
                lines=["Health check skipped: no health URL could be resolved."],
                success=True,
            )
        return BridgeCommandResult(lines=[f"Healthy: {healthy_url}"], success=True)

    def dispatch(self, command: DispatchCommand) -> BridgeCommandResult:
        settings, error = _load_settings()
        if settings is None:
            return _failure("Dispatch", error)
        if command.token is not None:
            settings = replace(settings, dispatch=replace(settings.dispatch, token=command.token))
        try:
            body = PayloadDispatcher(settings).dispatch(
                command.file_path,
                command.url,
                health_url=command.health_url,
            )
        except WorkerBridgeError as error:
            return _failure("Dispatch", str(error))
        return BridgeCommandResult(lines=[_render_json(body)], success=True)


def _load_settings() -> tuple[Settings | None, str]:
    try:
        settings = Settings.from_env()
        settings.validate()
    except ValueError as error:
        return None, str(error)
    return settings, ""


def _failure(stage: str, message: str) -> BridgeCommandResult:
    return BridgeCommandResult(lines=[f"{stage} failed:", message], success=False)


def _render_json(value: object) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, indent=2)
