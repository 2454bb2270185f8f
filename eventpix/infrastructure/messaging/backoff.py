"""Reconnect backoff policy for the messaging session."""
from dataclasses import dataclass, field

from ...utils.retry_utils import compute_backoff_delay


@dataclass
class BackoffPolicy:
    """
    Capped exponential backoff with optional jitter.
    
    Attempts are unbounded; the caller decides when to stop (never for
    transport drops, immediately on logout). reset() after a success.
    """
    initial_delay: float = 1.0
    max_delay: float = 60.0
    multiplier: float = 2.0
    jitter: bool = True
    attempt: int = field(default=0, init=False)
    
    def __post_init__(self) -> None:
        if self.initial_delay <= 0 or self.max_delay < self.initial_delay:
            raise ValueError("Backoff delays must satisfy 0 < initial_delay <= max_delay")
        if self.multiplier < 1.0:
            raise ValueError("Backoff multiplier must be >= 1")
    
    def next_delay(self) -> float:
        delay = compute_backoff_delay(
            self.attempt, self.initial_delay, self.max_delay, self.multiplier, self.jitter
        )
        self.attempt += 1
        return delay
    
    def reset(self) -> None:
        self.attempt = 0
