"""CodeGuard configuration system.

Configuration is YAML-based with per-run CLI overrides (--output, --format,
--mode, --threshold, ...). Supports environment variable substitution (${VAR})
in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.codeguard/config.yaml
3. ./codeguard.yaml

The model credential is resolved exactly once, here: an explicit llm.api_key
wins, otherwise the provider's environment variable is read. Nothing below
the configuration layer consults the environment.
"""

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from codeguard.discovery import DEFAULT_MAX_FILE_SIZE
from codeguard.llm.retry import RetryPolicy
from codeguard.models.analysis import AnalysisMode, ReportType
from codeguard.models.llm_config import LLMConfig

OUTPUT_FORMATS = ("html", "json")
DEFAULT_THRESHOLD = 70.0

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class OutputConfig:
    """Output configuration.

    Attributes:
        path: Output directory for generated reports
        format: Output format (html, json)
        report_type: Which HTML reports to generate
    """

    path: str = "./reports"
    format: str = "html"
    report_type: ReportType = ReportType.BOTH

    def __post_init__(self) -> None:
        self.format = self.format.lower().strip()
        if self.format not in OUTPUT_FORMATS:
            raise ValueError(f"Invalid output format: {self.format}. Valid: {OUTPUT_FORMATS}")
        self.report_type = ReportType.parse(self.report_type)


@dataclass
class AnalysisConfig:
    """Analysis run configuration.

    Attributes:
        mode: Analysis mode (frames suggestions, decides quality gate enforcement)
        threshold: Quality gate threshold for the overall score
        kt: Generate knowledge-transfer documentation
        max_workers: Files analyzed concurrently (1 = sequential)
        max_file_size: Files larger than this many bytes are skipped
    """

    mode: AnalysisMode = AnalysisMode.STANDARD
    threshold: float = DEFAULT_THRESHOLD
    kt: bool = False
    max_workers: int = 1
    max_file_size: int = DEFAULT_MAX_FILE_SIZE

    def __post_init__(self) -> None:
        self.mode = AnalysisMode.parse(self.mode)
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.max_file_size <= 0:
            raise ValueError(f"max_file_size must be positive, got {self.max_file_size}")


@dataclass
class CodeGuardConfig:
    """Top-level CodeGuard configuration.

    Attributes:
        output: Output directory, format and report selection
        analysis: Mode, quality gate and concurrency settings
        llm: Model backend settings
        retry: Retry policy applied to every model call
    """

    output: OutputConfig = field(default_factory=OutputConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    # Runtime overrides (set by CLI)
    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(value: Any, environ: Mapping[str, str] | None = None) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax. Example: ${OPENAI_API_KEY} -> value of OPENAI_API_KEY

    Args:
        value: Config value (string, dict, list, or other)
        environ: Variables to substitute from (defaults to os.environ)

    Returns:
        Value with environment variables substituted

    Raises:
        ValueError: If a referenced variable is not set
    """
    env = os.environ if environ is None else environ

    if isinstance(value, str):

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = env.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return _ENV_VAR_PATTERN.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v, env) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v, env) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.codeguard/config.yaml
    2. ./codeguard.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    start_path = (start_path or Path.cwd()).resolve()

    for candidate in (
        start_path / ".codeguard" / "config.yaml",
        start_path / "codeguard.yaml",
    ):
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return section


def resolve_api_key(llm: LLMConfig, environ: Mapping[str, str]) -> LLMConfig:
    """Fill in the API key from the provider's environment variable.

    An explicit key in the config file takes precedence.
    """
    if llm.api_key or not llm.api_key_env_var:
        return llm
    env_key = environ.get(llm.api_key_env_var)
    if env_key:
        llm.api_key = env_key
    return llm


def load_config_from_dict(
    data: dict[str, Any],
    environ: Mapping[str, str] | None = None,
) -> CodeGuardConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary
        environ: Environment used for ${VAR} substitution and credential
            lookup (defaults to os.environ)

    Returns:
        CodeGuardConfig instance

    Raises:
        ValueError: If a value is invalid
    """
    env = os.environ if environ is None else environ
    data = substitute_env_vars(data or {}, env)

    config = CodeGuardConfig()

    if "output" in data:
        output_data = _section(data, "output")
        config.output = OutputConfig(
            path=str(output_data.get("path", config.output.path)),
            format=str(output_data.get("format", config.output.format)),
            report_type=output_data.get("report_type", config.output.report_type),
        )

    if "analysis" in data:
        analysis_data = _section(data, "analysis")
        config.analysis = AnalysisConfig(
            mode=analysis_data.get("mode", config.analysis.mode),
            threshold=float(analysis_data.get("threshold", config.analysis.threshold)),
            kt=bool(analysis_data.get("kt", config.analysis.kt)),
            max_workers=int(analysis_data.get("max_workers", config.analysis.max_workers)),
            max_file_size=int(
                analysis_data.get("max_file_size", config.analysis.max_file_size)
            ),
        )

    if "llm" in data:
        config.llm = LLMConfig.from_dict(_section(data, "llm"))

    if "retry" in data:
        retry_data = _section(data, "retry")
        defaults = config.retry
        config.retry = RetryPolicy(
            max_attempts=int(retry_data.get("max_attempts", defaults.max_attempts)),
            base_delay=float(retry_data.get("base_delay", defaults.base_delay)),
            flat_delay=float(retry_data.get("flat_delay", defaults.flat_delay)),
        )

    config.llm = resolve_api_key(config.llm, env)
    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
    environ: Mapping[str, str] | None = None,
) -> CodeGuardConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified
        environ: Environment for substitution and credential lookup

    Returns:
        CodeGuardConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
        ValueError: If the file contains invalid values
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {found_path}")
        config = load_config_from_dict(data, environ)
        config._config_path = found_path
    else:
        config = load_config_from_dict({}, environ)

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# CodeGuard Configuration

# Output settings
output:
  path: "./reports"
  format: "html"          # html, json
  report_type: "both"     # technical, non_technical, both

# Analysis settings
analysis:
  mode: "standard"        # standard, qa_automation, devops_testing, developer_review
  threshold: 70           # Quality gate; enforced in qa_automation and devops_testing
  kt: false               # Generate knowledge-transfer documentation
  max_workers: 1          # Files analyzed concurrently
  max_file_size: 1048576  # Skip files larger than this (bytes)

# LLM settings (every analysis is performed by the model)
llm:
  provider: "openai"      # openai, claude, gemini, ollama, bedrock
  model: "gpt-4"
  # api_key: "${OPENAI_API_KEY}"  # Defaults to the provider's environment variable
  # api_base: "http://localhost:11434"  # Ollama server URL
  temperature: 0.1        # 0 - 0.2 for consistent scoring
  max_tokens: 2000
  timeout: 60

# Retry policy for model calls
retry:
  max_attempts: 3
  base_delay: 2.0         # Rate-limit/server errors wait base_delay * attempt
  flat_delay: 1.0         # Other transient errors wait a flat delay
'''
