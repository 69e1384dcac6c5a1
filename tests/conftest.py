from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest


def pytest_sessionstart(session):
    """Ensure the repo root is on sys.path for local test runs."""
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


@dataclass
class FakeProcess:
    returncode: int
    stdout: str = ""
    stderr: str = ""


@dataclass
class FakeHandle:
    running: bool = True
    terminated: int = 0
    killed: int = 0
    ignores_terminate: bool = False

    def terminate(self) -> None:
        self.terminated += 1
        if not self.ignores_terminate:
            self.running = False

    def kill(self) -> None:
        self.killed += 1
        self.running = False

    def poll(self) -> int | None:
        return None if self.running else -15

    def wait(self, timeout: float | None = None) -> int:
        if self.running:
            raise subprocess.TimeoutExpired("bluetoothctl", timeout)
        return -15


@dataclass
class FakeRunner:
    """Scripted CommandRunner.

    Each command maps to a list of responses consumed in order; the last one
    repeats. Unscripted commands get `default`.
    """

    responses: dict[tuple[str, ...], list[FakeProcess]] = field(default_factory=dict)
    default: FakeProcess = field(default_factory=lambda: FakeProcess(0))
    installed: tuple[str, ...] = ("systemctl", "bluetoothctl")
    calls: list[tuple[str, ...]] = field(default_factory=list)
    spawned: list[tuple[str, ...]] = field(default_factory=list)
    handles: list[FakeHandle] = field(default_factory=list)

    def run(self, args, *, timeout):
        key = tuple(args)
        self.calls.append(key)
        queue = self.responses.get(key)
        if not queue:
            return self.default
        if len(queue) > 1:
            return queue.pop(0)
        return queue[0]

    def which(self, name: str) -> str | None:
        return f"/usr/bin/{name}" if name in self.installed else None

    def spawn(self, args) -> FakeHandle:
        self.spawned.append(tuple(args))
        self.calls.append(tuple(args))
        handle = FakeHandle()
        self.handles.append(handle)
        return handle


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def record_sleep(sleeps: list[float]):
    def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep


@pytest.fixture
def main_conf(tmp_path: Path) -> Path:
    conf = tmp_path / "main.conf"
    conf.write_text("[General]\nName = host\n#ControllerMode = dual\n", encoding="utf-8")
    return conf


@pytest.fixture(autouse=True)
def isolated_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("BUDSPAIR_LOG_FILE", raising=False)


@pytest.fixture(autouse=True)
def reset_budspair_logger():
    yield
    logger = logging.getLogger("budspair")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
