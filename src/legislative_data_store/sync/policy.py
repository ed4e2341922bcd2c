from __future__ import annotations

from dataclasses import dataclass

from lds_client.utils import backoff_delay_ms, clamp

INTER_BATCH_DELAY_MS = 500


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for sub-batch writes.

    ``max_attempts`` counts the first try. Delay before retry k (1-based) is
    ``base_delay_ms * 2**(k-1)``: fixed, no jitter, no cap.
    """

    max_attempts: int = 3
    base_delay_ms: int = 1000

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms must be >= 0")

    def next_backoff_ms(self, retry: int) -> int:
        return backoff_delay_ms(retry, self.base_delay_ms)

    @classmethod
    def clamped(cls, attempts: int, delay_ms: int) -> "RetryPolicy":
        """Operator-facing constructor: attempts in [1, 10], delay in [100, 10000] ms."""
        return cls(max_attempts=clamp(attempts, 1, 10), base_delay_ms=clamp(delay_ms, 100, 10000))


def clamp_batch_size(size: int) -> int:
    return clamp(size, 1, 100)
