"""
Concurrency policy for the upload scheduler.
A single value type covering every supported way of dispatching chunks.
"""
from dataclasses import dataclass

SEQUENTIAL = "sequential"
FIXED_BATCH = "fixed_batch"
SLIDING_WINDOW = "sliding_window"


@dataclass(frozen=True)
class ConcurrencyPolicy:
    """
    How many chunks may be in flight, and how they are grouped.

    - sequential: one chunk at a time
    - fixed_batch(n): groups of n, each group settles before the next starts
    - sliding_window(n): at most n in flight, refilled as soon as one finishes
    """
    kind: str = SEQUENTIAL
    size: int = 1

    def __post_init__(self):
        if self.kind not in (SEQUENTIAL, FIXED_BATCH, SLIDING_WINDOW):
            raise ValueError(f"Unknown concurrency policy: {self.kind}")
        if self.size < 1:
            raise ValueError(f"Concurrency must be at least 1, got {self.size}")
        if self.kind == SEQUENTIAL and self.size != 1:
            raise ValueError("Sequential policy has a concurrency of exactly 1")

    @classmethod
    def sequential(cls) -> "ConcurrencyPolicy":
        return cls(SEQUENTIAL, 1)

    @classmethod
    def fixed_batch(cls, size: int) -> "ConcurrencyPolicy":
        return cls(FIXED_BATCH, size)

    @classmethod
    def sliding_window(cls, size: int) -> "ConcurrencyPolicy":
        return cls(SLIDING_WINDOW, size)

    @classmethod
    def parse(cls, value: str, max_concurrency: int) -> "ConcurrencyPolicy":
        """
        Parse a policy from configuration.

        Accepted forms: "sequential", "fixed_batch", "fixed_batch:4",
        "sliding_window", "sliding_window:6". A missing size defaults to
        max_concurrency; a larger size is capped at max_concurrency.

        Raises:
            ValueError: If the value is not a recognized policy
        """
        kind, _, raw_size = value.strip().lower().partition(":")
        if kind == SEQUENTIAL:
            return cls.sequential()

        try:
            size = int(raw_size) if raw_size else max_concurrency
        except ValueError:
            raise ValueError(f"Invalid concurrency size in policy: {value}")

        return cls(kind, min(size, max_concurrency))

    def __str__(self) -> str:
        if self.kind == SEQUENTIAL:
            return SEQUENTIAL
        return f"{self.kind}:{self.size}"
