"""Exceptions raised by the model client."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codeguard.llm.retry import ErrorKind


class LLMError(Exception):
    """Exception raised for LLM-related errors.

    Attributes:
        kind: Classification of the underlying failure, if known
        attempts: Number of attempts made before giving up
    """

    def __init__(
        self,
        message: str,
        kind: "ErrorKind | None" = None,
        attempts: int = 0,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.attempts = attempts


class LLMFatalError(LLMError):
    """Authentication or permission failure. Never retried."""


class LLMRetryExhaustedError(LLMError):
    """A retryable failure persisted through every allowed attempt."""


class EmptyResponseError(RuntimeError):
    """The backend answered without any completion content."""
