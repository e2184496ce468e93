"""Bounded retry for read-modify-write operations guarded by record versions."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from courses.domain.errors import ConcurrentModificationError

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Re-run a whole operation when a conditional write loses a race.

    Only ConcurrentModificationError is retried; every other error propagates
    on the first attempt. The last conflict is re-raised once attempts run out.
    """

    attempts: int = 3
    delay: float = 0.05
    backoff_factor: float = 2.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1")
        if self.delay < 0:
            raise ValueError("delay must be >= 0")
        if self.backoff_factor < 1:
            raise ValueError("backoff_factor must be >= 1")

    def run(self, operation: Callable[[], T]) -> T:
        retrying = Retrying(
            retry=retry_if_exception_type(ConcurrentModificationError),
            stop=stop_after_attempt(self.attempts),
            wait=wait_exponential(multiplier=self.delay, exp_base=self.backoff_factor),
            sleep=self.sleep,
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            reraise=True,
        )
        return retrying(operation)
