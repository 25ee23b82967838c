"""Jinja2 filters used by the HTML report templates.

Report display bands (90/80/70) are finer-grained than the GREEN/YELLOW/RED
quality tiers and only affect presentation.
"""

import re

EXCELLENT_SCORE = 90.0
GOOD_SCORE = 80.0
FAIR_SCORE = 70.0

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_SOURCE_SUFFIX = re.compile(r"\.(java|js|py|ts|cpp|cc|c|h|cs|php|rb|go|kt|scala)$")
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def quality_level(score: float) -> str:
    """Display label for a score.

    Examples:
        >>> quality_level(92)
        'Excellent'
        >>> quality_level(69.9)
        'Needs Improvement'
    """
    if score >= EXCELLENT_SCORE:
        return "Excellent"
    if score >= GOOD_SCORE:
        return "Good"
    if score >= FAIR_SCORE:
        return "Fair"
    return "Needs Improvement"


def score_class(score: float) -> str:
    """CSS class for a score badge."""
    if score >= EXCELLENT_SCORE:
        return "score-excellent"
    if score >= GOOD_SCORE:
        return "score-good"
    if score >= FAIR_SCORE:
        return "score-fair"
    return "score-poor"


def format_score(score: float | None, digits: int = 1) -> str:
    """Format a score for display ("N/A" when missing)."""
    if score is None:
        return "N/A"
    return f"{score:.{digits}f}"


def sanitize_filename(filename: str) -> str:
    """Make a file name safe for a report file name.

    Characters other than letters, digits, '.' and '-' become '_' and a
    trailing source extension is dropped.

    Examples:
        >>> sanitize_filename("User Service.java")
        'User_Service'
    """
    return _SOURCE_SUFFIX.sub("", _UNSAFE_FILENAME_CHARS.sub("_", filename))


def metric_label(key: str) -> str:
    """Turn a camelCase metric key into a readable label.

    Examples:
        >>> metric_label("linesOfCode")
        'Lines of code'
    """
    words = _CAMEL_BOUNDARY.sub(" ", key).lower()
    return words[:1].upper() + words[1:]


def severity_class(severity: str) -> str:
    """CSS class for an issue severity."""
    return f"severity-{severity.strip().lower() or 'unknown'}"


def paragraphs(text: str | None) -> list[str]:
    """Split narrative text into non-empty paragraphs."""
    if not text:
        return []
    return [p.strip() for p in re.split(r"\n\s*\n", text) if p.strip()]
