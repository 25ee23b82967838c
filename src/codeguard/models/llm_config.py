"""LLM Configuration entity for CodeGuard.

Defines the configuration for the model backend used for every analysis call.
Supports multiple providers through LiteLLM: OpenAI, Claude, Gemini, Ollama
and Bedrock.
"""

from dataclasses import dataclass, field

# Valid LLM providers
VALID_PROVIDERS = frozenset({"openai", "claude", "gemini", "ollama", "bedrock"})

# Environment variables consulted for credentials when the config has no key
PROVIDER_API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
    "gemini": "GOOGLE_API_KEY",
}

DEFAULT_PROVIDER = "openai"
DEFAULT_MODEL = "gpt-4"
DEFAULT_TEMPERATURE = 0.1
MAX_TEMPERATURE = 0.2
DEFAULT_MAX_TOKENS = 2000
DEFAULT_TIMEOUT = 60


@dataclass
class LLMConfig:
    """Configuration for the LLM provider.

    Model, temperature and token budget are fixed per run; individual
    analysis calls cannot override them.

    Attributes:
        provider: LLM provider (openai, claude, gemini, ollama, bedrock)
        model: Model identifier (e.g., "gpt-4", "claude-sonnet-4-20250514")
        api_key: API key (not required for Ollama or Bedrock)
        api_base: API base URL (required for Ollama)
        temperature: Sampling temperature, kept low for near-deterministic scores
        max_tokens: Maximum response tokens
        timeout: Per-call transport timeout in seconds
        enabled: Whether the model backend may be used
    """

    provider: str = DEFAULT_PROVIDER
    model: str = DEFAULT_MODEL
    api_key: str | None = None
    api_base: str | None = None
    temperature: float = field(default=DEFAULT_TEMPERATURE)
    max_tokens: int = field(default=DEFAULT_MAX_TOKENS)
    timeout: int = field(default=DEFAULT_TIMEOUT)
    enabled: bool = field(default=True)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.provider = self.provider.lower().strip()

        if self.provider not in VALID_PROVIDERS:
            raise ValueError(
                f"Invalid provider '{self.provider}'. "
                f"Must be one of: {sorted(VALID_PROVIDERS)}"
            )

        if not self.model or not self.model.strip():
            raise ValueError("Model identifier cannot be empty")
        self.model = self.model.strip()

        if not 0.0 <= self.temperature <= MAX_TEMPERATURE:
            raise ValueError(
                f"Temperature must be between 0 and {MAX_TEMPERATURE} "
                f"for consistent scoring. Got: {self.temperature}"
            )

        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive. Got: {self.max_tokens}")

        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive. Got: {self.timeout}")

        if self.provider == "ollama" and not self.api_base:
            self.api_base = "http://localhost:11434"

    @property
    def requires_api_key(self) -> bool:
        """Cloud providers authenticate with an API key."""
        return self.provider in PROVIDER_API_KEY_ENV

    @property
    def api_key_env_var(self) -> str | None:
        return PROVIDER_API_KEY_ENV.get(self.provider)

    def require_credentials(self) -> None:
        """Ensure a credential is available for the provider.

        Bedrock uses AWS credentials from the environment and Ollama needs
        none, so only key-based providers are checked here.

        Raises:
            ValueError: If the provider needs an API key and none is set
        """
        if self.requires_api_key and not (self.api_key and self.api_key.strip()):
            raise ValueError(
                f"api_key is required for {self.provider} provider "
                f"(set {self.api_key_env_var} or llm.api_key in the config file)"
            )

    def to_dict(self) -> dict[str, str | int | float | bool | None]:
        """Convert to dictionary for serialization.

        The API key is masked so the dictionary is safe to log.
        """
        return {
            "provider": self.provider,
            "model": self.model,
            "api_key": "***" if self.api_key else None,
            "api_base": self.api_base,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "timeout": self.timeout,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, str | int | float | bool | None]) -> "LLMConfig":
        """Create LLMConfig from dictionary.

        Args:
            data: Dictionary with configuration values

        Returns:
            LLMConfig instance
        """
        return cls(
            provider=str(data.get("provider") or DEFAULT_PROVIDER),
            model=str(data.get("model") or DEFAULT_MODEL),
            api_key=data.get("api_key") if data.get("api_key") else None,  # type: ignore[arg-type]
            api_base=data.get("api_base") if data.get("api_base") else None,  # type: ignore[arg-type]
            temperature=float(data.get("temperature", DEFAULT_TEMPERATURE)),  # type: ignore[arg-type]
            max_tokens=int(data.get("max_tokens", DEFAULT_MAX_TOKENS)),  # type: ignore[arg-type]
            timeout=int(data.get("timeout", DEFAULT_TIMEOUT)),  # type: ignore[arg-type]
            enabled=bool(data.get("enabled", True)),
        )

    def get_litellm_model_name(self) -> str:
        """Get the model name in LiteLLM format.

        Returns:
            Model name formatted for LiteLLM
        """
        if self.provider == "ollama":
            return f"ollama/{self.model}"
        elif self.provider == "bedrock":
            return f"bedrock/{self.model}"
        elif self.provider == "gemini":
            return f"gemini/{self.model}"
        elif self.provider == "claude":
            return f"anthropic/{self.model}"
        else:
            return f"openai/{self.model}"
