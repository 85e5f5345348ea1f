from __future__ import annotations

import sys

import allure
import pytest

from worker_bridge.config import DispatchSettings, HealthSettings, ProcessSettings, Settings

pytestmark = [
    allure.epic("Configuration"),
    allure.feature("Environment Settings"),
]

_ENV_NAMES = (
    "WORKER_BRIDGE_PYTHON",
    "WORKER_BRIDGE_PROCESS_TIMEOUT_SECONDS",
    "WORKER_BRIDGE_HEALTH_URL",
    "WORKER_BRIDGE_DEFAULT_HEALTH_URL",
    "WORKER_BRIDGE_HEALTH_MAX_WAIT_SECONDS",
    "WORKER_BRIDGE_HEALTH_POLL_INTERVAL_SECONDS",
    "WORKER_BRIDGE_REQUEST_TIMEOUT_SECONDS",
    "WORKER_BRIDGE_HEALTH_ALLOW_UNRESOLVED",
    "WORKER_BRIDGE_MODEL_URL",
    "WORKER_BRIDGE_MODEL_TOKEN",
)


@pytest.fixture()
def clean_env(monkeypatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_from_env_defaults(clean_env) -> None:
    settings = Settings.from_env()

    assert settings.process.executable == sys.executable
    assert settings.process.timeout_seconds is None
    assert settings.health.wait_budget_seconds == 120.0
    assert settings.health.poll_interval_seconds == 3.0
    assert settings.health.request_timeout_seconds == 120.0
    assert settings.health.allow_unresolved is True
    assert settings.health.health_url is None
    assert settings.dispatch.target_url is None
    assert settings.dispatch.default_headers() == {}
    settings.validate()


def test_from_env_reads_overrides(clean_env) -> None:
    clean_env.setenv("WORKER_BRIDGE_PYTHON", ".venv/bin/python3")
    clean_env.setenv("WORKER_BRIDGE_PROCESS_TIMEOUT_SECONDS", "45")
    clean_env.setenv("WORKER_BRIDGE_HEALTH_URL", "https://model.example/health")
    clean_env.setenv("WORKER_BRIDGE_HEALTH_MAX_WAIT_SECONDS", "30")
    clean_env.setenv("WORKER_BRIDGE_HEALTH_POLL_INTERVAL_SECONDS", "0.5")
    clean_env.setenv("WORKER_BRIDGE_REQUEST_TIMEOUT_SECONDS", "60")
    clean_env.setenv("WORKER_BRIDGE_HEALTH_ALLOW_UNRESOLVED", "no")
    clean_env.setenv("WORKER_BRIDGE_MODEL_URL", "https://model.example/predict")
    clean_env.setenv("WORKER_BRIDGE_MODEL_TOKEN", "abc")

    settings = Settings.from_env()

    assert settings.process == ProcessSettings(executable=".venv/bin/python3", timeout_seconds=45.0)
    assert settings.health.health_url == "https://model.example/health"
    assert settings.health.wait_budget_seconds == 30.0
    assert settings.health.poll_interval_seconds == 0.5
    assert settings.health.request_timeout_seconds == 60.0
    assert settings.health.allow_unresolved is False
    assert settings.dispatch.request_timeout_seconds == 60.0
    assert settings.dispatch.default_headers() == {"Authorization": "Bearer abc"}


def test_from_env_rejects_invalid_boolean(clean_env) -> None:
    clean_env.setenv("WORKER_BRIDGE_HEALTH_ALLOW_UNRESOLVED", "maybe")

    with pytest.raises(ValueError, match="Invalid boolean value"):
        Settings.from_env()


def test_poll_timeout_is_capped_by_twice_the_interval() -> None:
    assert HealthSettings(poll_interval_seconds=3).poll_timeout_seconds == 6
    assert (
        HealthSettings(poll_interval_seconds=3, request_timeout_seconds=4).poll_timeout_seconds
        == 4
    )


@pytest.mark.parametrize(
    ("settings", "pattern"),
    [
        (Settings(health=HealthSettings(poll_interval_seconds=0)), "POLL_INTERVAL"),
        (Settings(health=HealthSettings(wait_budget_seconds=-1)), "MAX_WAIT"),
        (Settings(dispatch=DispatchSettings(request_timeout_seconds=0)), "REQUEST_TIMEOUT"),
        (Settings(process=ProcessSettings(timeout_seconds=0)), "PROCESS_TIMEOUT"),
        (Settings(dispatch=DispatchSettings(target_url="ftp://model/x")), "MODEL_URL"),
        (Settings(health=HealthSettings(health_url="/health")), "HEALTH_URL"),
    ],
)
def test_validate_rejects_invalid_settings(settings: Settings, pattern: str) -> None:
    with pytest.raises(ValueError, match=pattern):
        settings.validate()
