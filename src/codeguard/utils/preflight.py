"""Preflight validation.

Everything the analysis depends on is validated before the first file is
read: the LiteLLM package, the model credential, the output directory, and
(optionally) a live round-trip to the provider. A failed required check
aborts the run immediately with a clear message.
"""

import importlib.util
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from codeguard.config import CodeGuardConfig
from codeguard.llm.client import LLMClient, create_client
from codeguard.llm.errors import LLMError
from codeguard.models.llm_config import LLMConfig


@dataclass
class ToolCheck:
    """Result of checking a single dependency.

    Attributes:
        name: Dependency name
        available: Whether the dependency is usable
        version: Version if known
        required: Whether the run cannot proceed without it
        path: Location (module path, URL, directory) if relevant
        message: Status message (human-readable context)
    """

    name: str
    available: bool
    version: str | None = None
    required: bool = True
    path: str | None = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "available": self.available,
            "version": self.version,
            "required": self.required,
            "path": self.path,
            "message": self.message,
        }


@dataclass
class PreflightResult:
    """Result of preflight validation.

    Attributes:
        success: Whether all required checks passed
        checks: Individual check results
        errors: Messages for failed required checks
        warnings: Messages for failed optional checks
    """

    success: bool = True
    checks: list[ToolCheck] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_check(self, check: ToolCheck) -> None:
        """Add a check result."""
        self.checks.append(check)

        if not check.available:
            if check.required:
                self.success = False
                self.errors.append(f"{check.name}: {check.message}")
            else:
                self.warnings.append(f"{check.name}: {check.message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "success": self.success,
            "checks": [c.to_dict() for c in self.checks],
            "errors": self.errors,
            "warnings": self.warnings,
        }


class PreflightChecker:
    """Validates dependencies before analysis.

    Usage:
        checker = PreflightChecker()
        result = checker.check_all(config)
        if not result.success:
            raise typer.Exit(1)
    """

    def __init__(
        self,
        client_factory: Callable[[CodeGuardConfig], LLMClient] | None = None,
    ) -> None:
        """Initialize preflight checker.

        Args:
            client_factory: Builds the client used for the connectivity probe
        """
        self._client_factory = client_factory or (
            lambda config: create_client(config.llm, retry_policy=config.retry)
        )

    def check_litellm(self, required: bool = True) -> ToolCheck:
        """Check that the LiteLLM package is importable."""
        spec = importlib.util.find_spec("litellm")
        if spec is None:
            return ToolCheck(
                name="litellm",
                available=False,
                required=required,
                message="Install with: pip install litellm",
            )

        import litellm

        return ToolCheck(
            name="litellm",
            available=True,
            version=getattr(litellm, "__version__", None),
            required=required,
            path=spec.origin,
            message="Unified LLM interface (Python package)",
        )

    def check_credentials(self, llm: LLMConfig) -> ToolCheck:
        """Check that the configured provider has a usable credential."""
        name = f"{llm.provider} credentials"

        if llm.provider == "ollama":
            return ToolCheck(
                name=name,
                available=True,
                path=llm.api_base,
                message="Local provider; no API key needed",
            )

        if llm.provider == "bedrock":
            has_env = bool(os.environ.get("AWS_ACCESS_KEY_ID")) and bool(
                os.environ.get("AWS_SECRET_ACCESS_KEY")
            )
            has_file = (Path.home() / ".aws" / "credentials").exists()
            return ToolCheck(
                name=name,
                available=has_env or has_file,
                message=(
                    "AWS credentials found"
                    if has_env or has_file
                    else "AWS credentials required (AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY "
                    "or ~/.aws/credentials)"
                ),
            )

        try:
            llm.require_credentials()
        except ValueError as e:
            return ToolCheck(name=name, available=False, message=str(e))

        return ToolCheck(
            name=name,
            available=True,
            message=f"API key configured for model {llm.model}",
        )

    def check_output_directory(self, output_path: str, required: bool = True) -> ToolCheck:
        """Check that reports can be written to the output directory."""
        path = Path(output_path)
        existing = path
        while not existing.exists() and existing != existing.parent:
            existing = existing.parent

        writable = existing.is_dir() and os.access(existing, os.W_OK)
        return ToolCheck(
            name="output directory",
            available=writable,
            required=required,
            path=str(path),
            message="Writable" if writable else f"Cannot write to {existing}",
        )

    def check_connectivity(self, client: LLMClient) -> ToolCheck:
        """Probe the provider with a minimal completion."""
        name = f"{client.config.provider} connectivity"
        try:
            response = client.complete("Say 'ok'")
        except LLMError as e:
            return ToolCheck(name=name, available=False, message=str(e))

        return ToolCheck(
            name=name,
            available=True,
            path=client.config.api_base,
            message=f"Provider responded (model: {response.model})",
        )

    def check_all(self, config: CodeGuardConfig, ping: bool = False) -> PreflightResult:
        """Run all preflight checks.

        Args:
            config: Loaded configuration
            ping: Also make a live call to the provider

        Returns:
            PreflightResult with all check results
        """
        result = PreflightResult()

        litellm_check = self.check_litellm(required=True)
        result.add_check(litellm_check)

        credentials_check = self.check_credentials(config.llm)
        result.add_check(credentials_check)

        result.add_check(self.check_output_directory(config.output.path, required=False))

        if ping and litellm_check.available and credentials_check.available:
            try:
                client = self._client_factory(config)
            except ValueError as e:
                result.add_check(
                    ToolCheck(
                        name=f"{config.llm.provider} connectivity",
                        available=False,
                        message=str(e),
                    )
                )
            else:
                result.add_check(self.check_connectivity(client))

        return result
