"""Bluetooth service restart through systemd or the legacy init script."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from budspair.core.errors import ServiceRestartError
from budspair.transports.base import CommandRunner

LOGGER = logging.getLogger(__name__)


class ServiceController:
    def __init__(self, runner: CommandRunner, command: Sequence[str], *, timeout: float | None = 60) -> None:
        self.runner = runner
        self.command = tuple(command)
        self.timeout = timeout

    @classmethod
    def detect(cls, runner: CommandRunner, service: str = "bluetooth") -> ServiceController:
        if runner.which("systemctl"):
            command = ["systemctl", "restart", service]
        else:
            command = [f"/etc/init.d/{service}", "restart"]
        LOGGER.debug("Service restart command: %s", " ".join(command))
        return cls(runner, command)

    def restart(self) -> None:
        LOGGER.info("Restarting Bluetooth service…")
        label = " ".join(self.command)
        try:
            result = self.runner.run(self.command, timeout=self.timeout)
        except (OSError, subprocess.SubprocessError) as exc:
            raise ServiceRestartError(f"'{label}' could not run: {exc}") from exc
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise ServiceRestartError(f"'{label}' exited with {result.returncode}" + (f": {stderr}" if stderr else ""))
