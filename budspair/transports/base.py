"""Transport interfaces."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from typing import Protocol


class ProcessHandle(Protocol):
    def terminate(self) -> None:
        ...

    def kill(self) -> None:
        ...

    def poll(self) -> int | None:
        ...

    def wait(self, timeout: float | None = None) -> int:
        ...


class CommandRunner(Protocol):
    def run(
        self, args: Sequence[str], *, timeout: float | None
    ) -> subprocess.CompletedProcess[str]:
        """Run a command to completion and capture its text output."""

    def which(self, name: str) -> str | None:
        """Return the resolved path of `name`, or None when not installed."""

    def spawn(self, args: Sequence[str]) -> ProcessHandle:
        """Start a detached background command."""
