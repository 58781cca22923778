from __future__ import annotations

import random
import typing
from collections.abc import Sequence

__all__: Sequence[str] = ("Backoff",)


@typing.final
class Backoff:
    """Capped exponential delay between reconnect attempts, with multiplicative jitter."""

    def __init__(
        self, *, base: float = 1.0, maximum: float = 60.0, factor: float = 2.0, jitter: float = 0.2
    ) -> None:
        if base < 0 or maximum < base:
            raise ValueError("backoff needs 0 <= base <= maximum")
        if factor < 1:
            raise ValueError("backoff factor must be at least 1")
        if not 0 <= jitter < 1:
            raise ValueError("backoff jitter must be in [0, 1)")

        self.base: float = base
        self.maximum: float = maximum
        self.factor: float = factor
        self.jitter: float = jitter
        self.attempts: int = 0

    def next_delay(self) -> float:
        delay = min(self.maximum, self.base * self.factor**self.attempts)
        if delay < self.maximum:
            self.attempts += 1
        if self.jitter:
            delay *= random.uniform(1 - self.jitter, 1 + self.jitter)
        return min(delay, self.maximum)

    def reset(self) -> None:
        self.attempts = 0
