"""Unified LLM client wrapper using LiteLLM.

Provides a single "complete(prompt) -> text" operation over multiple
providers. Model, temperature and token budget come from LLMConfig and are
identical for every call; retry and backoff follow RetryPolicy.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import litellm

from codeguard.llm.errors import EmptyResponseError, LLMError
from codeguard.llm.retry import RetryPolicy, call_with_retry
from codeguard.models.llm_config import LLMConfig

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from LLM completion.

    Attributes:
        content: Generated text of the top choice
        model: Model that generated the response
        usage: Token usage statistics
        finish_reason: Reason for completion (stop, length, etc.)
        attempts: Attempts needed to obtain this response
    """

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    finish_reason: str | None = None
    attempts: int = 1


class LLMClient:
    """Unified LLM client using LiteLLM.

    Supports multiple providers through a single interface:
    - OpenAI (default)
    - Claude (Anthropic)
    - Gemini (Google)
    - Ollama (local)
    - Bedrock (AWS)

    The credential is checked at construction time so a missing key fails the
    run before any file is processed.
    """

    def __init__(
        self,
        config: LLMConfig,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize LLM client with configuration.

        Args:
            config: LLM configuration with provider, model, and credentials
            retry_policy: Retry policy (defaults to 3 attempts)
            sleep: Delay function used between retries

        Raises:
            ValueError: If the provider requires a credential that is missing
        """
        config.require_credentials()
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
    ) -> LLMResponse:
        """Generate a completion from the LLM, retrying transient failures.

        Args:
            prompt: User prompt for the LLM
            system_prompt: Optional system prompt

        Returns:
            LLMResponse with generated content

        Raises:
            LLMFatalError: On authentication or permission failures
            LLMRetryExhaustedError: When retries are exhausted
        """
        messages: list[dict[str, str]] = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({"role": "user", "content": prompt})

        attempts = 0

        def attempt() -> LLMResponse:
            nonlocal attempts
            attempts += 1
            return self._complete_once(messages)

        response = call_with_retry(
            attempt,
            self.retry_policy,
            sleep=self._sleep,
            description=f"{self.config.provider} completion",
        )
        response.attempts = attempts
        return response

    def _complete_once(self, messages: list[dict[str, str]]) -> LLMResponse:
        """Issue a single completion request.

        Raises:
            EmptyResponseError: If the backend returned no content
        """
        completion_kwargs: dict = {
            "model": self.config.get_litellm_model_name(),
            "messages": messages,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "timeout": self.config.timeout,
        }
        if self.config.api_key:
            completion_kwargs["api_key"] = self.config.api_key
        if self.config.api_base:
            completion_kwargs["api_base"] = self.config.api_base

        response = litellm.completion(**completion_kwargs)

        if not response.choices:
            raise EmptyResponseError(f"No response received from {self.config.provider}")

        choice = response.choices[0]
        content = choice.message.content or ""
        if not content.strip():
            raise EmptyResponseError(f"Empty completion from {self.config.provider}")

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens or 0,
                "completion_tokens": response.usage.completion_tokens or 0,
                "total_tokens": response.usage.total_tokens or 0,
            }

        return LLMResponse(
            content=content,
            model=response.model or self.config.model,
            usage=usage,
            finish_reason=choice.finish_reason,
        )

    def check_available(self) -> bool:
        """Check if the LLM provider is available.

        Performs a minimal API call to verify connectivity.

        Returns:
            True if provider is reachable and credentials are valid
        """
        try:
            self.complete("Say 'ok'")
            return True
        except LLMError:
            return False


def create_client(
    config: LLMConfig,
    retry_policy: RetryPolicy | None = None,
) -> LLMClient:
    """Create an LLM client from configuration.

    Args:
        config: LLM configuration
        retry_policy: Retry policy for every call made by the client

    Returns:
        Configured LLMClient instance

    Raises:
        ValueError: If LLM is disabled in config or the credential is missing
    """
    if not config.enabled:
        raise ValueError("LLM is disabled in configuration")

    return LLMClient(config, retry_policy=retry_policy)
