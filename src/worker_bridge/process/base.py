"""Request and raw-capture models for external process invocation."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

ArgsInput = Iterable[object] | str | int | float | Path | None


def normalize_args(args: ArgsInput) -> list[str]:
    """Return argv entries with ``None`` dropped; a lone scalar becomes one entry.

    Any non-string iterable (list, tuple, set, generator) is expanded in
    iteration order.
    """

    if args is None:
        return []
    if isinstance(args, (str, bytes, os.PathLike)) or not isinstance(args, Iterable):
        return [_as_arg(args)]
    return [_as_arg(arg) for arg in args if arg is not None]


def _as_arg(value: object) -> str:
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


@dataclass(frozen=True, slots=True)
class InvocationRequest:
    """Inputs required to run one JSON-emitting process."""

    executable: str
    script_path: str
    args: tuple[str, ...] = ()
    timeout_seconds: float | None = None
    cwd: Path | None = None
    env: dict[str, str] | None = None

    @property
    def argv(self) -> list[str]:
        return [self.executable, self.script_path, *self.args]


@dataclass(frozen=True, slots=True)
class ProcessRun:
    """Accumulated output of one finished process."""

    argv: tuple[str, ...]
    exit_code: int | None
    stdout: str
    stderr: str
    signal_number: int | None = None
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0
