"""LLM integration module for CodeGuard.

Provides the LiteLLM-backed model client with bounded retry, the fixed
analysis prompts, and defensive parsing of model responses.
"""

from codeguard.llm.client import LLMClient, LLMResponse, create_client
from codeguard.llm.errors import (
    EmptyResponseError,
    LLMError,
    LLMFatalError,
    LLMRetryExhaustedError,
)
from codeguard.llm.parser import (
    ParseOutcome,
    ParseStatus,
    parse_issues_response,
    parse_metrics_response,
    parse_narrative_response,
    parse_score_response,
    parse_suggestions_response,
)
from codeguard.llm.retry import ErrorKind, RetryPolicy, call_with_retry, classify_error

__all__ = [
    "EmptyResponseError",
    "ErrorKind",
    "LLMClient",
    "LLMError",
    "LLMFatalError",
    "LLMResponse",
    "LLMRetryExhaustedError",
    "ParseOutcome",
    "ParseStatus",
    "RetryPolicy",
    "call_with_retry",
    "classify_error",
    "create_client",
    "parse_issues_response",
    "parse_metrics_response",
    "parse_narrative_response",
    "parse_score_response",
    "parse_suggestions_response",
]
