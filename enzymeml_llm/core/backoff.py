"""
Retry backoff for tool execution.

The delay for a retry is ``min(max_delay, base_delay * factor ** attempt)``
scaled by a jitter factor in ``[1, 2)``. The random source is injectable so
tests can make delays deterministic.
"""

import random
from dataclasses import dataclass, field
from typing import Callable


@dataclass(frozen=True)
class BackoffPolicy:
    """Randomized exponential backoff."""
    base_delay: float = 0.5
    factor: float = 2.0
    max_delay: float = 8.0
    rng: Callable[[], float] = field(default=random.random, compare=False)

    def delay(self, attempt: int) -> float:
        """
        Delay in seconds before the retry following ``attempt``.

        Args:
            attempt: Zero-based number of the attempt that just failed
        """
        exponential = min(self.max_delay, self.base_delay * self.factor ** attempt)
        return exponential * (1.0 + self.rng())

    @classmethod
    def no_jitter(cls, base_delay: float = 0.5, factor: float = 2.0, max_delay: float = 8.0) -> "BackoffPolicy":
        """A deterministic policy (jitter factor always 1)."""
        return cls(base_delay=base_delay, factor=factor, max_delay=max_delay, rng=lambda: 0.0)
