"""Configuration types for the tickwise runtime."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """Configuration for a Runtime instance.

    Attributes:
        poll_interval: Seconds between predicate checks while a cooperative
                       wait is pending (``Runtime.wait``, ``sync_bridge``).
        sync_timeout: Default upper bound in seconds for ``Throttle.sync``.
        min_delay: Smallest timer delay in seconds a throttle will arm.
                   A burst older than its window still waits this long.
    """

    poll_interval: float = 0.01
    sync_timeout: float = 1.0
    min_delay: float = 0.001

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")

        if self.sync_timeout <= 0:
            raise ValueError(f"sync_timeout must be positive, got {self.sync_timeout}")

        if self.min_delay <= 0:
            raise ValueError(f"min_delay must be positive, got {self.min_delay}")

        if self.poll_interval > self.sync_timeout:
            raise ValueError(
                f"poll_interval ({self.poll_interval}) must be <= sync_timeout ({self.sync_timeout})"
            )
