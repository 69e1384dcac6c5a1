from __future__ import annotations

import pytest

from budspair.core.errors import DaemonCommandError, RetryExhaustedError
from budspair.core.retry import RetryRunner


def _flaky(failures: int):
    calls = {"count": 0}

    def operation() -> str:
        calls["count"] += 1
        if calls["count"] <= failures:
            raise DaemonCommandError("bluetoothctl pair AA:BB:CC:DD:EE:01", "Failed to pair")
        return "ok"

    return operation, calls


@pytest.mark.parametrize(
    ("failures", "max_attempts", "succeeds"),
    [(0, 3, True), (2, 3, True), (3, 3, False), (5, 1, False)],
)
def test_succeeds_only_within_budget(failures: int, max_attempts: int, succeeds: bool) -> None:
    operation, calls = _flaky(failures)
    sleeps: list[float] = []
    runner = RetryRunner(max_attempts=max_attempts, delay=2, sleep=sleeps.append)

    if succeeds:
        assert runner.run("pair", operation) == "ok"
    else:
        with pytest.raises(RetryExhaustedError) as excinfo:
            runner.run("pair", operation)
        assert excinfo.value.attempts == max_attempts
        assert isinstance(excinfo.value.__cause__, DaemonCommandError)

    assert calls["count"] == min(failures + 1, max_attempts)
    assert sleeps == [2] * (calls["count"] - 1)


def test_other_errors_are_not_retried() -> None:
    calls = []

    def operation() -> None:
        calls.append(1)
        raise ValueError("Invalid Bluetooth address")

    with pytest.raises(ValueError):
        RetryRunner(max_attempts=3, delay=0, sleep=lambda _: None).run("pair", operation)
    assert len(calls) == 1


def test_zero_attempts_rejected() -> None:
    with pytest.raises(ValueError):
        RetryRunner(max_attempts=0)
