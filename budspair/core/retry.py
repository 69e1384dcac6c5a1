"""Fixed-backoff retry for the pair and connect steps."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from budspair.core.errors import DaemonCommandError, RetryExhaustedError

T = TypeVar("T")
LOGGER = logging.getLogger(__name__)


@dataclass
class RetryRunner:
    max_attempts: int = 3
    delay: float = 2.0
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")

    def run(self, name: str, operation: Callable[[], T]) -> T:
        """Call `operation` until it succeeds or the attempt budget is spent.

        Only `DaemonCommandError` is retried; anything else propagates at once.
        """
        attempt = 1
        while True:
            try:
                return operation()
            except DaemonCommandError as exc:
                LOGGER.debug("%s attempt %d failed: %s", name, attempt, exc)
                if attempt >= self.max_attempts:
                    LOGGER.error("'%s' failed after %d attempts", name, self.max_attempts)
                    raise RetryExhaustedError(name, attempt) from exc
                attempt += 1
                LOGGER.info("Retry %d/%d in %s s…", attempt, self.max_attempts, self.delay)
                self.sleep(self.delay)
