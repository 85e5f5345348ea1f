"""Shared test fixtures."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest


class FakeClock:
    """Stands in for the ``time`` module inside the readiness loop."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture()
def fake_clock(monkeypatch) -> FakeClock:
    clock = FakeClock()
    monkeypatch.setattr("worker_bridge.http.readiness.time", clock)
    return clock


@pytest.fixture()
def write_script(tmp_path: Path) -> Callable[[str], Path]:
    """Write a child Python script into tmp_path and return its path."""

    counter = iter(range(1_000))

    def _write(source: str) -> Path:
        path = tmp_path / f"child_{next(counter)}.py"
        path.write_text(source.strip() + "\n", "utf-8")
        return path

    return _write


@pytest.fixture()
def python_executable() -> str:
    return sys.executable
