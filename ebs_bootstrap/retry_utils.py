"""
Retry utilities for the attachment wait loop.

Provides the exponential backoff schedule and the retry budget that bounds
how many attempts the attachment reconciler makes. "Retry forever" is an
explicit Unbounded budget rather than a huge attempt count.
"""
import itertools
import random
from dataclasses import dataclass, field
from typing import Iterator

DEFAULT_MIN_DELAY = 5.0
DEFAULT_MAX_DELAY = 100.0
DEFAULT_FACTOR = 2.0


@dataclass(frozen=True)
class Bounded:
    """At most `attempts` attempts."""
    attempts: int

    def __post_init__(self):
        if self.attempts < 1:
            raise ValueError(f"attempts must be >= 1, got {self.attempts}")

    def __str__(self) -> str:
        return str(self.attempts)


@dataclass(frozen=True)
class Unbounded:
    """Retry until success."""

    def __str__(self) -> str:
        return "unbounded"


class Backoff:
    """
    Exponential backoff schedule.

    Each call to duration() returns min_delay * factor ** n for the n-th call,
    capped at max_delay. With jitter the delay is drawn uniformly between
    min_delay and that value.
    """

    def __init__(
        self,
        min_delay: float = DEFAULT_MIN_DELAY,
        max_delay: float = DEFAULT_MAX_DELAY,
        factor: float = DEFAULT_FACTOR,
        jitter: bool = False,
        rng: random.Random | None = None,
    ):
        if min_delay <= 0:
            raise ValueError("min_delay must be positive")
        if max_delay < min_delay:
            raise ValueError("max_delay must be >= min_delay")
        if factor < 1:
            raise ValueError("factor must be >= 1")

        self.min_delay = min_delay
        self.max_delay = max_delay
        self.factor = factor
        self.jitter = jitter
        self._rng = rng or random.Random()
        self.attempt = 0

    def for_attempt(self, attempt: int) -> float:
        """Un-jittered delay for the given zero-based attempt number."""
        try:
            delay = self.min_delay * self.factor ** attempt
        except OverflowError:
            return self.max_delay
        return min(self.max_delay, delay)

    def duration(self) -> float:
        """Next delay in seconds; advances the schedule."""
        delay = self.for_attempt(self.attempt)
        self.attempt += 1
        if self.jitter:
            delay = self._rng.uniform(self.min_delay, delay)
        return delay


@dataclass(frozen=True)
class RetryBudget:
    """
    Attempt limit plus the backoff schedule used between attempts.

    Use RetryBudget.bounded(n) or RetryBudget.unbounded() rather than
    constructing the limit by hand.
    """
    max_attempts: Bounded | Unbounded = field(default_factory=Unbounded)
    min_delay: float = DEFAULT_MIN_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    factor: float = DEFAULT_FACTOR
    jitter: bool = False

    @classmethod
    def bounded(cls, attempts: int, **kwargs) -> "RetryBudget":
        return cls(max_attempts=Bounded(attempts), **kwargs)

    @classmethod
    def unbounded(cls, **kwargs) -> "RetryBudget":
        return cls(max_attempts=Unbounded(), **kwargs)

    @property
    def is_unbounded(self) -> bool:
        return isinstance(self.max_attempts, Unbounded)

    def attempts(self) -> Iterator[int]:
        """
        Yield zero-based attempt numbers.

        Returns:
            range(n) for a bounded budget, an endless counter otherwise
        """
        if self.is_unbounded:
            return itertools.count()
        return iter(range(self.max_attempts.attempts))

    def new_backoff(self) -> Backoff:
        """Fresh backoff schedule starting at min_delay."""
        return Backoff(
            min_delay=self.min_delay,
            max_delay=self.max_delay,
            factor=self.factor,
            jitter=self.jitter,
        )
