from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import Retrying, stop_after_attempt, wait_exponential

from app.config.settings import Settings
from app.logging.logger import Log

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with exponential backoff. The last error is re-raised."""

    max_attempts: int = 3
    backoff_multiplier_seconds: float = 0.5
    backoff_max_seconds: float = 8.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=max(1, settings.step_max_attempts),
            backoff_multiplier_seconds=settings.step_backoff_multiplier_seconds,
            backoff_max_seconds=settings.step_backoff_max_seconds,
        )

    def call(self, label: str, fn: Callable[[], T]) -> T:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.backoff_multiplier_seconds,
                max=self.backoff_max_seconds,
            ),
            before_sleep=lambda state: Log.warning(
                f"{label} attempt {state.attempt_number}/{self.max_attempts} failed, "
                f"retrying: {state.outcome.exception() if state.outcome else 'unknown'}"
            ),
            reraise=True,
        )
        return retrying(fn)


NO_RETRY = RetryPolicy(max_attempts=1, backoff_multiplier_seconds=0.0, backoff_max_seconds=0.0)
