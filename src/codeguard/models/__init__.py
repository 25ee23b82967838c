"""CodeGuard data models.

This module exports the entities shared by analysis and reporting:
- ScoreWithReason: One evaluated dimension
- CodeIssue: A flagged problem
- FileAnalysisResult: Per-file aggregate
- AnalysisSummary / AnalysisResult: Run-level aggregate
- LLMConfig: Model backend configuration
"""

from codeguard.models.analysis import (
    DIMENSION_WEIGHTS,
    AnalysisMode,
    AnalysisResult,
    AnalysisSummary,
    CodeIssue,
    Dimension,
    FileAnalysisResult,
    FileMetrics,
    QualityIndicator,
    ReportType,
    ScoreWithReason,
)
from codeguard.models.llm_config import VALID_PROVIDERS, LLMConfig

__all__ = [
    "DIMENSION_WEIGHTS",
    "AnalysisMode",
    "AnalysisResult",
    "AnalysisSummary",
    "CodeIssue",
    "Dimension",
    "FileAnalysisResult",
    "FileMetrics",
    "LLMConfig",
    "QualityIndicator",
    "ReportType",
    "ScoreWithReason",
    "VALID_PROVIDERS",
]
