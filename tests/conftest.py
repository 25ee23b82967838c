"""Shared pytest fixtures for CodeGuard tests.

Fixtures are organized by category:
- Configuration fixtures: config dictionaries for various scenarios
- Client fixtures: scripted model clients
- Result fixtures: pre-built analysis results for testing renderers
"""

import logging
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from codeguard.models.analysis import (
    AnalysisMode,
    AnalysisResult,
    CodeIssue,
    FileAnalysisResult,
)
from codeguard.pipeline import build_summary, compute_overall_score
from codeguard.utils.logging import ROOT_LOGGER
from tests.fixtures import ScriptedClient, make_file_result


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Undo CLI logging setup so handlers never outlive a test."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def minimal_config() -> dict[str, Any]:
    """Return a minimal valid CodeGuard configuration."""
    return {
        "output": {
            "path": "./reports",
            "format": "html",
        }
    }


@pytest.fixture
def full_config() -> dict[str, Any]:
    """Return a complete CodeGuard configuration with all options."""
    return {
        "output": {
            "path": "out/reports",
            "format": "json",
            "report_type": "technical",
        },
        "analysis": {
            "mode": "qa_automation",
            "threshold": 75,
            "kt": True,
            "max_workers": 4,
            "max_file_size": 2048,
        },
        "llm": {
            "provider": "claude",
            "model": "claude-sonnet-4-20250514",
            "api_key": "sk-test",
            "temperature": 0.0,
            "max_tokens": 1500,
            "timeout": 30,
        },
        "retry": {
            "max_attempts": 5,
            "base_delay": 0.5,
            "flat_delay": 0.25,
        },
    }


# =============================================================================
# Client Fixtures
# =============================================================================


@pytest.fixture
def scripted_client() -> ScriptedClient:
    """Return a scripted client with well-formed replies (all scores 80)."""
    return ScriptedClient()


# =============================================================================
# Result Fixtures
# =============================================================================


@pytest.fixture
def sample_file_results() -> list[FileAnalysisResult]:
    """Return three file results, one per quality tier."""
    return [
        make_file_result(
            "Good.java",
            90.0,
            issues=[CodeIssue("LOW", "Style", "Long line", "Wrap it", 3)],
        ),
        make_file_result("Okay.java", 75.0),
        make_file_result(
            "Bad.java",
            40.0,
            issues=[
                CodeIssue("CRITICAL", "Security", "SQL built from <input>", "Use parameters", 12),
                CodeIssue("critical", "Bug", "Null dereference", "Check for null"),
            ],
        ),
    ]


@pytest.fixture
def sample_result(sample_file_results: list[FileAnalysisResult]) -> AnalysisResult:
    """Return a run-level result built from sample_file_results."""
    overall = compute_overall_score(sample_file_results)
    return AnalysisResult(
        overall_score=overall,
        file_results=sample_file_results,
        summary=build_summary(sample_file_results, overall),
        timestamp=datetime(2026, 1, 31, 19, 45, 23),
        mode=AnalysisMode.STANDARD,
    )


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Return an empty directory for sample projects."""
    root = tmp_path / "project"
    root.mkdir()
    return root
