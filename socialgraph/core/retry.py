"""Retry utilities with exponential backoff for transient store errors."""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from sqlalchemy import exc as sa_exc

from socialgraph.core.exceptions import Unavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    base_delay: float = 0.05
    max_delay: float = 1.0
    exponential_base: float = 2.0
    jitter: float = 0.1  # Fraction of the delay added/removed at random


def is_transient_error(error: BaseException) -> bool:
    """
    Check if an error is a transient connectivity failure.

    Application-level failures (integrity violations, validation errors,
    programming errors) are never considered transient.
    """
    if isinstance(error, sa_exc.IntegrityError):
        return False
    if isinstance(error, (sa_exc.OperationalError, sa_exc.DisconnectionError)):
        return True
    if isinstance(error, sa_exc.TimeoutError):
        return True
    if isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated:
        return True
    if isinstance(error, (TimeoutError, ConnectionError)):
        return True
    return False


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Calculate delay before next retry with exponential backoff and jitter.

    Args:
        attempt: Current attempt number (1-indexed)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay = config.base_delay * (config.exponential_base ** (attempt - 1))
    delay = min(delay, config.max_delay)

    jitter_range = delay * config.jitter
    delay += random.uniform(-jitter_range, jitter_range)

    return max(0.0, delay)


def with_retry(
    func: Callable[[], T],
    config: Optional[RetryConfig] = None,
    operation: str = "store operation",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Execute a store call, retrying transient failures.

    Args:
        func: Callable taking no arguments; re-invoked from scratch on retry
        config: Retry configuration
        operation: Name used in log messages
        sleep: Sleep function (injectable for tests)

    Returns:
        Result from the first successful call

    Raises:
        Unavailable: If every attempt failed with a transient error
        Exception: Any non-transient error, unchanged, on first occurrence
    """
    if config is None:
        config = RetryConfig()

    for attempt in range(1, config.max_attempts + 1):
        try:
            return func()
        except Exception as e:
            if not is_transient_error(e):
                raise

            if attempt >= config.max_attempts:
                logger.error(f"{operation} failed after {attempt} attempts: {e}")
                raise Unavailable(
                    f"{operation} unavailable after {attempt} attempts",
                    attempts=attempt,
                ) from e

            delay = calculate_delay(attempt, config)
            logger.warning(
                f"{operation} attempt {attempt}/{config.max_attempts} failed: {e}. "
                f"Retrying in {delay:.2f}s..."
            )
            sleep(delay)

    raise RuntimeError("Unexpected retry loop exit")
