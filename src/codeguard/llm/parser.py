"""Defensive parsing of model responses.

Model output is supposed to be JSON but frequently is not. Every parser here
returns a ParseOutcome that records which tier produced the value:

- PARSED: the response matched the requested JSON shape
- SALVAGED: a usable value was recovered heuristically
- DEFAULTED: nothing usable was found; a documented default is returned

No function in this module raises on malformed model output.
"""

import json
import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from codeguard.models.analysis import CodeIssue, FileMetrics, ScoreWithReason

logger = logging.getLogger(__name__)

T = TypeVar("T")

NEUTRAL_SCORE = 50.0
SALVAGED_REASON = "Unable to parse detailed reasoning from response"
DEFAULT_SCORE_REASON = "Unable to analyze - using default score"
NO_REASON_GIVEN = "No reasoning provided by the model"

UNKNOWN_COMPLEXITY = "UNKNOWN"
COMPLEXITY_LEVELS = frozenset({"LOW", "MEDIUM", "HIGH", UNKNOWN_COMPLEXITY})

INT_METRICS = ("linesOfCode", "cyclomaticComplexity", "numberOfMethods", "numberOfClasses")
RATIO_METRIC = "commentRatio"
COMPLEXITY_METRIC = "codeComplexity"

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)\s*```", re.DOTALL)
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


class ParseStatus(Enum):
    """Which tier of the fallback chain produced a value."""

    PARSED = "parsed"
    SALVAGED = "salvaged"
    DEFAULTED = "defaulted"


@dataclass(frozen=True)
class ParseOutcome(Generic[T]):
    """Result of parsing one model response.

    Attributes:
        value: Parsed or fallback value (always usable)
        status: Tier that produced the value
        detail: Why the structured parse did not succeed, if it did not
    """

    value: T
    status: ParseStatus = ParseStatus.PARSED
    detail: str | None = None

    @property
    def degraded(self) -> bool:
        return self.status is not ParseStatus.PARSED


# =============================================================================
# JSON Extraction
# =============================================================================


def extract_json_text(text: str) -> str:
    """Isolate the JSON payload in a model response.

    Handles Markdown code fences and leading/trailing prose around a single
    JSON object or array.

    Args:
        text: Raw model response

    Returns:
        Best candidate for the JSON payload (may still be invalid JSON)
    """
    stripped = text.strip()
    fence = _FENCE_RE.search(stripped)
    if fence:
        stripped = fence.group(1).strip()

    if stripped.startswith(("{", "[")):
        return stripped

    starts = [i for i in (stripped.find("{"), stripped.find("[")) if i != -1]
    if not starts:
        return stripped
    start = min(starts)
    closing = "}" if stripped[start] == "{" else "]"
    end = stripped.rfind(closing)
    if end <= start:
        return stripped
    return stripped[start : end + 1]


def _load_json(text: str | None) -> tuple[Any, str | None]:
    """Parse JSON from a model response.

    Returns:
        Tuple of (parsed value or None, error description or None)
    """
    if text is None or not text.strip():
        return None, "empty response"
    try:
        return json.loads(extract_json_text(text)), None
    except json.JSONDecodeError as e:
        return None, f"invalid JSON: {e.msg}"
    except (ValueError, RecursionError) as e:
        # Integer literals past the digit limit, or nesting too deep
        return None, f"invalid JSON: {e}"


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value) if isinstance(value, (dict, list)) else str(value)


def _to_float(value: int | float | str) -> float | None:
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _to_float(value)
    if isinstance(value, str):
        match = _NUMBER_RE.search(value)
        return _to_float(match.group(0)) if match else None
    return None


# =============================================================================
# Score + Reason + Recommendations
# =============================================================================


def parse_score_response(text: str | None) -> ParseOutcome[ScoreWithReason]:
    """Parse a scoring response.

    Tiers:
    1. JSON object with a numeric 'score', optional 'reason' and
       'recommendations'
    2. First number found anywhere in the raw text, with a placeholder reason
    3. Neutral score of 50.0 with a placeholder reason

    Args:
        text: Raw model response

    Returns:
        ParseOutcome wrapping a ScoreWithReason
    """
    data, error = _load_json(text)

    if isinstance(data, dict):
        score = _as_float(data.get("score"))
        if score is not None:
            reason = _as_text(data.get("reason")).strip() or NO_REASON_GIVEN
            recommendations = _string_list(data.get("recommendations"))
            return ParseOutcome(ScoreWithReason(score, reason, recommendations))
        error = "missing numeric 'score' field"
    elif data is not None:
        error = f"expected JSON object, got {type(data).__name__}"

    logger.warning("Could not parse score and reason from response (%s)", error)

    match = _NUMBER_RE.search(text or "")
    salvaged = _to_float(match.group(0)) if match else None
    if salvaged is not None:
        return ParseOutcome(
            ScoreWithReason(salvaged, SALVAGED_REASON),
            status=ParseStatus.SALVAGED,
            detail=error,
        )

    logger.warning("Could not parse any score from response")
    return ParseOutcome(
        ScoreWithReason(NEUTRAL_SCORE, DEFAULT_SCORE_REASON),
        status=ParseStatus.DEFAULTED,
        detail=error,
    )


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [_as_text(item).strip() for item in value if _as_text(item).strip()]


# =============================================================================
# Issues and Suggestions
# =============================================================================

_REQUIRED_ISSUE_FIELDS = ("severity", "type", "description", "suggestion")


def parse_issues_response(text: str | None) -> ParseOutcome[list[CodeIssue]]:
    """Parse an issue list response.

    The response must be a JSON array of objects, each supplying severity,
    type, description and suggestion; lineNumber is optional. Any violation
    yields an empty list.
    """
    data, error = _load_json(text)

    if isinstance(data, dict) and isinstance(data.get("issues"), list):
        data = data["issues"]

    if not isinstance(data, list):
        detail = error or f"expected JSON array, got {type(data).__name__}"
        logger.warning("Could not parse issues from response (%s)", detail)
        return ParseOutcome([], status=ParseStatus.DEFAULTED, detail=detail)

    issues: list[CodeIssue] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict) or any(
            item.get(key) is None for key in _REQUIRED_ISSUE_FIELDS
        ):
            detail = f"issue {index} is missing required fields"
            logger.warning("Could not parse issues from response (%s)", detail)
            return ParseOutcome([], status=ParseStatus.DEFAULTED, detail=detail)

        issues.append(
            CodeIssue(
                severity=_as_text(item["severity"]).strip(),
                type=_as_text(item["type"]).strip(),
                description=_as_text(item["description"]).strip(),
                suggestion=_as_text(item["suggestion"]).strip(),
                line_number=_line_number(item.get("lineNumber")),
            )
        )

    return ParseOutcome(issues)


def _line_number(value: Any) -> int | None:
    number = _as_float(value)
    if number is None or number < 1:
        return None
    return int(number)


def parse_suggestions_response(text: str | None) -> ParseOutcome[list[str]]:
    """Parse a JSON array of suggestion strings; empty list on failure."""
    data, error = _load_json(text)

    if isinstance(data, dict) and isinstance(data.get("suggestions"), list):
        data = data["suggestions"]

    if not isinstance(data, list):
        detail = error or f"expected JSON array, got {type(data).__name__}"
        logger.warning("Could not parse suggestions from response (%s)", detail)
        return ParseOutcome([], status=ParseStatus.DEFAULTED, detail=detail)

    return ParseOutcome(_string_list(data))


# =============================================================================
# Metrics
# =============================================================================


def count_lines(source: str) -> int:
    """Count newline-delimited lines in source text."""
    return len(source.splitlines())


def basic_metrics(source: str) -> FileMetrics:
    """All-defaults metrics map with a locally computed line count."""
    return {
        "linesOfCode": count_lines(source),
        "cyclomaticComplexity": 0,
        "numberOfMethods": 0,
        "numberOfClasses": 0,
        RATIO_METRIC: 0.0,
        COMPLEXITY_METRIC: UNKNOWN_COMPLEXITY,
    }


def coerce_metric_value(value: Any) -> int | float | str:
    """Best-effort coercion of an extra metric value.

    Integral numbers become int, fractional numbers float, everything else
    its string form.
    """
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)) or (
        isinstance(value, str) and _is_number(value.strip())
    ):
        if isinstance(value, int):
            return value
        number = _to_float(value)
        if number is None:
            return _as_text(value)
        if number.is_integer():
            return int(number)
        return number
    return _as_text(value)


def _is_number(text: str) -> bool:
    return bool(_NUMBER_RE.fullmatch(text))


def _metric_int(value: Any) -> int:
    number = _as_float(value)
    return int(round(number)) if number is not None else 0


def _metric_ratio(value: Any) -> float:
    number = _as_float(value)
    return number if number is not None else 0.0


def _metric_complexity(value: Any) -> str:
    level = _as_text(value).strip().upper()
    return level if level in COMPLEXITY_LEVELS else UNKNOWN_COMPLEXITY


def parse_metrics_response(text: str | None, source: str) -> ParseOutcome[FileMetrics]:
    """Parse a metrics response.

    The six documented keys are always present and typed; missing fields
    default to 0 / 0.0 / "UNKNOWN". Extra keys are preserved with best-effort
    coercion. When the response is not a JSON object the all-defaults map is
    returned with linesOfCode counted from the source.

    Args:
        text: Raw model response
        source: Original file content (for the local line count)
    """
    data, error = _load_json(text)

    if not isinstance(data, dict):
        detail = error or f"expected JSON object, got {type(data).__name__}"
        logger.warning("Could not parse metrics from response (%s)", detail)
        return ParseOutcome(basic_metrics(source), status=ParseStatus.DEFAULTED, detail=detail)

    metrics: FileMetrics = {key: _metric_int(data.get(key)) for key in INT_METRICS}
    metrics[RATIO_METRIC] = _metric_ratio(data.get(RATIO_METRIC))
    metrics[COMPLEXITY_METRIC] = _metric_complexity(data.get(COMPLEXITY_METRIC))

    for key, value in data.items():
        if key not in metrics:
            metrics[key] = coerce_metric_value(value)

    return ParseOutcome(metrics)


# =============================================================================
# Knowledge Transfer Narratives
# =============================================================================


def parse_narrative_response(text: str | None, placeholder: str) -> ParseOutcome[str]:
    """Return the stripped narrative text, or the placeholder when blank."""
    if text is None or not text.strip():
        return ParseOutcome(placeholder, status=ParseStatus.DEFAULTED, detail="empty response")
    return ParseOutcome(text.strip())
