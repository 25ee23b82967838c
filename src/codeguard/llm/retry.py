"""Retry and backoff policy for model calls.

Kept independent of LiteLLM: failures are classified by the HTTP-like
``status_code`` attribute that provider SDK exceptions carry, so the loop can
be exercised with scripted fakes.

Classification:
- 401 -> AUTHENTICATION (fatal)
- 403 -> PERMISSION (fatal)
- 429 -> RATE_LIMIT (linear backoff)
- >= 500 -> SERVER (linear backoff)
- anything else -> GENERIC (flat delay)
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from codeguard.llm.errors import LLMFatalError, LLMRetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(Enum):
    """Classification of a failed model call."""

    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    GENERIC = "generic"

    @property
    def is_fatal(self) -> bool:
        return self in {ErrorKind.AUTHENTICATION, ErrorKind.PERMISSION}

    @property
    def uses_linear_backoff(self) -> bool:
        return self in {ErrorKind.RATE_LIMIT, ErrorKind.SERVER}


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy.

    Attributes:
        max_attempts: Total attempts per call, including the first
        base_delay: Seconds multiplied by the attempt number for rate-limit
            and server errors
        flat_delay: Seconds waited after any other retryable error
    """

    max_attempts: int = 3
    base_delay: float = 2.0
    flat_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1. Got: {self.max_attempts}")
        if self.base_delay < 0 or self.flat_delay < 0:
            raise ValueError("Retry delays cannot be negative")

    def delay_for(self, kind: ErrorKind, attempt: int) -> float:
        """Seconds to wait after a failed attempt.

        Args:
            kind: Classification of the failure
            attempt: 1-based number of the attempt that just failed

        Returns:
            Delay in seconds
        """
        if kind.uses_linear_backoff:
            return self.base_delay * attempt
        return self.flat_delay


def get_status_code(error: BaseException) -> int | None:
    """Extract an HTTP-like status code from an exception, if it has one."""
    status = getattr(error, "status_code", None)
    if status is None:
        response = getattr(error, "response", None)
        status = getattr(response, "status_code", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def classify_error(error: BaseException) -> ErrorKind:
    """Map a transport error to its retry classification."""
    status = get_status_code(error)
    if status == 401:
        return ErrorKind.AUTHENTICATION
    if status == 403:
        return ErrorKind.PERMISSION
    if status == 429:
        return ErrorKind.RATE_LIMIT
    if status is not None and status >= 500:
        return ErrorKind.SERVER
    return ErrorKind.GENERIC


def call_with_retry(
    operation: Callable[[], T],
    policy: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "LLM call",
) -> T:
    """Run an operation under the retry policy.

    Args:
        operation: Zero-argument callable performing one attempt
        policy: Retry policy to apply
        sleep: Delay function (injectable for tests)
        description: Label used in log messages and errors

    Returns:
        The operation's return value from the first successful attempt

    Raises:
        LLMFatalError: On authentication or permission failures (no retry)
        LLMRetryExhaustedError: When every attempt failed with a retryable error
    """
    last_error: Exception | None = None
    last_kind = ErrorKind.GENERIC

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return operation()
        except Exception as e:
            kind = classify_error(e)

            if kind.is_fatal:
                logger.error("%s failed with %s error: %s", description, kind.value, e)
                raise LLMFatalError(
                    f"{kind.value.capitalize()} failure during {description}: {e}",
                    kind=kind,
                    attempts=attempt,
                ) from e

            last_error = e
            last_kind = kind

            if attempt == policy.max_attempts:
                break

            delay = policy.delay_for(kind, attempt)
            logger.warning(
                "%s attempt %d/%d failed (%s): %s; retrying in %.1fs",
                description,
                attempt,
                policy.max_attempts,
                kind.value,
                e,
                delay,
            )
            sleep(delay)

    raise LLMRetryExhaustedError(
        f"{description} failed after {policy.max_attempts} attempts "
        f"({last_kind.value}): {last_error}",
        kind=last_kind,
        attempts=policy.max_attempts,
    ) from last_error
