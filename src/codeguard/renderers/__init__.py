"""Presentation helpers for report templates."""

from codeguard.renderers.filters import (
    format_score,
    metric_label,
    paragraphs,
    quality_level,
    sanitize_filename,
    score_class,
    severity_class,
)

__all__ = [
    "format_score",
    "metric_label",
    "paragraphs",
    "quality_level",
    "sanitize_filename",
    "score_class",
    "severity_class",
]
