"""CommandRunner implementation on top of the subprocess module."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Sequence


class SubprocessCommandRunner:
    def run(
        self, args: Sequence[str], *, timeout: float | None
    ) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            list(args),
            check=False,
            capture_output=True,
            text=True,
            timeout=timeout,
        )

    def which(self, name: str) -> str | None:
        return shutil.which(name)

    def spawn(self, args: Sequence[str]) -> subprocess.Popen[str]:
        return subprocess.Popen(
            list(args),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            text=True,
        )
