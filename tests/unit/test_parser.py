"""Unit tests for model response parsing."""

import json

import pytest

from codeguard.llm.parser import (
    DEFAULT_SCORE_REASON,
    NEUTRAL_SCORE,
    NO_REASON_GIVEN,
    SALVAGED_REASON,
    ParseStatus,
    basic_metrics,
    coerce_metric_value,
    extract_json_text,
    parse_issues_response,
    parse_metrics_response,
    parse_narrative_response,
    parse_score_response,
    parse_suggestions_response,
)


class TestExtractJsonText:
    """Tests for isolating JSON payloads."""

    def test_plain_object(self) -> None:
        """Test that bare JSON is returned unchanged."""
        assert extract_json_text('{"a": 1}') == '{"a": 1}'

    def test_code_fence(self) -> None:
        """Test that Markdown code fences are stripped."""
        text = 'Here you go:\n```json\n{"score": 90}\n```\nThanks'

        assert extract_json_text(text) == '{"score": 90}'

    def test_surrounding_prose(self) -> None:
        """Test that prose around an object is dropped."""
        text = 'Sure! {"score": 75, "reason": "fine"} Hope that helps.'

        assert json.loads(extract_json_text(text)) == {"score": 75, "reason": "fine"}

    def test_array_in_prose(self) -> None:
        """Test that arrays are located inside prose."""
        assert json.loads(extract_json_text('List: ["a", "b"] done')) == ["a", "b"]


class TestParseScoreResponse:
    """Tests for the three-tier score parser."""

    def test_structured_response(self) -> None:
        """Test the PARSED tier with all fields present."""
        outcome = parse_score_response(
            '{"score": 73, "reason": "ok", "recommendations": ["a", "b"]}'
        )

        assert outcome.status is ParseStatus.PARSED
        assert outcome.value.score == 73.0
        assert outcome.value.reason == "ok"
        assert outcome.value.recommendations == ["a", "b"]
        assert not outcome.degraded

    def test_structured_response_without_reason(self) -> None:
        """Test that a missing reason gets a placeholder."""
        outcome = parse_score_response('{"score": 88.5}')

        assert outcome.status is ParseStatus.PARSED
        assert outcome.value.score == 88.5
        assert outcome.value.reason == NO_REASON_GIVEN
        assert outcome.value.recommendations == []

    def test_score_as_string(self) -> None:
        """Test that a numeric string score is accepted."""
        outcome = parse_score_response('{"score": "64", "reason": "meh"}')

        assert outcome.status is ParseStatus.PARSED
        assert outcome.value.score == 64.0

    def test_fenced_response(self) -> None:
        """Test that fenced JSON parses as structured."""
        outcome = parse_score_response('```json\n{"score": 91, "reason": "clean"}\n```')

        assert outcome.status is ParseStatus.PARSED
        assert outcome.value.score == 91.0

    def test_salvages_first_number(self) -> None:
        """Test the SALVAGED tier takes the first number in the text."""
        outcome = parse_score_response("The score is 82 out of 100")

        assert outcome.status is ParseStatus.SALVAGED
        assert outcome.value.score == 82.0
        assert outcome.value.reason == SALVAGED_REASON
        assert outcome.degraded

    def test_salvages_from_object_without_score(self) -> None:
        """Test that an object lacking 'score' falls through to salvage."""
        outcome = parse_score_response('{"rating": 67}')

        assert outcome.status is ParseStatus.SALVAGED
        assert outcome.value.score == 67.0
        assert "score" in (outcome.detail or "")

    def test_defaults_without_digits(self) -> None:
        """Test the DEFAULTED tier when no number is present."""
        outcome = parse_score_response("I cannot evaluate this code.")

        assert outcome.status is ParseStatus.DEFAULTED
        assert outcome.value.score == NEUTRAL_SCORE == 50.0
        assert outcome.value.reason == DEFAULT_SCORE_REASON

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_defaults_on_empty(self, text: str | None) -> None:
        """Test that empty responses use the neutral score."""
        outcome = parse_score_response(text)

        assert outcome.status is ParseStatus.DEFAULTED
        assert outcome.value.score == 50.0

    def test_out_of_range_scores_pass_through(self) -> None:
        """Test that scores are not clamped."""
        assert parse_score_response('{"score": 140}').value.score == 140.0

    def test_oversized_integer_score_defaults(self) -> None:
        """Test that an integer too large for a float does not raise."""
        outcome = parse_score_response('{"score": 1' + "0" * 400 + ', "reason": "x"}')

        assert outcome.status is ParseStatus.DEFAULTED
        assert outcome.value.score == NEUTRAL_SCORE

    def test_integer_past_digit_limit_defaults(self) -> None:
        """Test that JSON rejected for its digit count does not raise."""
        outcome = parse_score_response('{"score": ' + "9" * 5000 + "}")

        assert outcome.status is ParseStatus.DEFAULTED
        assert outcome.value.score == NEUTRAL_SCORE
        assert (outcome.detail or "").startswith("invalid JSON")


class TestParseIssuesResponse:
    """Tests for issue list parsing."""

    def test_valid_issues(self) -> None:
        """Test that a well-formed array becomes CodeIssues."""
        text = json.dumps(
            [
                {
                    "severity": "HIGH",
                    "type": "Security",
                    "description": "SQL injection",
                    "lineNumber": 14,
                    "suggestion": "Use prepared statements",
                },
                {
                    "severity": "LOW",
                    "type": "Style",
                    "description": "Long method",
                    "suggestion": "Split it",
                },
            ]
        )

        outcome = parse_issues_response(text)

        assert outcome.status is ParseStatus.PARSED
        assert len(outcome.value) == 2
        assert outcome.value[0].line_number == 14
        assert outcome.value[1].line_number is None

    def test_missing_required_field_yields_empty(self) -> None:
        """Test that one malformed issue empties the whole list."""
        text = json.dumps(
            [
                {"severity": "HIGH", "type": "Bug", "description": "x", "suggestion": "y"},
                {"severity": "HIGH", "type": "Bug", "description": "no suggestion"},
            ]
        )

        outcome = parse_issues_response(text)

        assert outcome.value == []
        assert outcome.status is ParseStatus.DEFAULTED

    def test_not_an_array_yields_empty(self) -> None:
        """Test that prose yields an empty list."""
        outcome = parse_issues_response("No issues found.")

        assert outcome.value == []
        assert outcome.degraded

    def test_empty_array(self) -> None:
        """Test that an empty array is a successful parse."""
        outcome = parse_issues_response("[]")

        assert outcome.value == []
        assert outcome.status is ParseStatus.PARSED

    def test_wrapped_in_object(self) -> None:
        """Test that {"issues": [...]} is unwrapped."""
        text = json.dumps(
            {"issues": [{"severity": "LOW", "type": "t", "description": "d", "suggestion": "s"}]}
        )

        assert len(parse_issues_response(text).value) == 1

    def test_invalid_line_number_is_dropped(self) -> None:
        """Test that a non-numeric line number becomes None."""
        text = json.dumps(
            [
                {
                    "severity": "LOW",
                    "type": "t",
                    "description": "d",
                    "suggestion": "s",
                    "lineNumber": "n/a",
                }
            ]
        )

        assert parse_issues_response(text).value[0].line_number is None


class TestParseSuggestionsResponse:
    """Tests for suggestion list parsing."""

    def test_valid_suggestions(self) -> None:
        """Test that string arrays are returned in order."""
        outcome = parse_suggestions_response('["Add tests", "Extract method"]')

        assert outcome.value == ["Add tests", "Extract method"]

    def test_blank_entries_dropped(self) -> None:
        """Test that blank suggestions are removed."""
        assert parse_suggestions_response('["a", "  ", "b"]').value == ["a", "b"]

    def test_invalid_yields_empty(self) -> None:
        """Test that malformed output yields an empty list."""
        outcome = parse_suggestions_response("Write more tests.")

        assert outcome.value == []
        assert outcome.status is ParseStatus.DEFAULTED


class TestParseMetricsResponse:
    """Tests for metrics parsing."""

    SOURCE = "line one\nline two\nline three\n"

    def test_documented_fields(self) -> None:
        """Test that the documented fields are typed."""
        text = json.dumps(
            {
                "linesOfCode": "120",
                "cyclomaticComplexity": 7.0,
                "numberOfMethods": 5,
                "numberOfClasses": 1,
                "commentRatio": "0.15",
                "codeComplexity": "medium",
            }
        )

        metrics = parse_metrics_response(text, self.SOURCE).value

        assert metrics["linesOfCode"] == 120
        assert metrics["cyclomaticComplexity"] == 7
        assert metrics["commentRatio"] == pytest.approx(0.15)
        assert metrics["codeComplexity"] == "MEDIUM"

    def test_missing_fields_default(self) -> None:
        """Test defaults for absent documented fields."""
        metrics = parse_metrics_response('{"linesOfCode": 3}', self.SOURCE).value

        assert metrics["numberOfMethods"] == 0
        assert metrics["commentRatio"] == 0.0
        assert metrics["codeComplexity"] == "UNKNOWN"

    def test_extra_fields_are_coerced(self) -> None:
        """Test best-effort coercion of extra fields."""
        text = json.dumps({"depth": "4", "density": 0.5, "owner": "team-a", "flag": True})

        metrics = parse_metrics_response(text, self.SOURCE).value

        assert metrics["depth"] == 4
        assert metrics["density"] == 0.5
        assert metrics["owner"] == "team-a"
        assert metrics["flag"] == "true"

    def test_oversized_integers(self) -> None:
        """Test that huge integers neither raise nor corrupt documented fields."""
        huge = 10**400
        text = '{"linesOfCode": ' + str(huge) + ', "tokens": ' + str(huge) + "}"

        outcome = parse_metrics_response(text, self.SOURCE)

        assert outcome.status is ParseStatus.PARSED
        assert outcome.value["linesOfCode"] == 0
        assert outcome.value["tokens"] == huge

    def test_fallback_counts_lines(self) -> None:
        """Test that unparseable output falls back to a local line count."""
        outcome = parse_metrics_response("Complexity is moderate.", self.SOURCE)

        assert outcome.status is ParseStatus.DEFAULTED
        assert outcome.value == basic_metrics(self.SOURCE)
        assert outcome.value["linesOfCode"] == 3


class TestCoerceMetricValue:
    """Tests for metric value coercion."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (3, 3),
            (3.0, 3),
            ("12", 12),
            ("1.5", 1.5),
            ("high", "high"),
            ([1], "[1]"),
            ("1" + "0" * 400, "1" + "0" * 400),
        ],
    )
    def test_coercion(self, value: object, expected: object) -> None:
        """Test coercion of representative values."""
        assert coerce_metric_value(value) == expected


class TestParseNarrativeResponse:
    """Tests for knowledge-transfer narrative parsing."""

    def test_text_is_stripped(self) -> None:
        """Test that narrative text is returned stripped."""
        outcome = parse_narrative_response("  Handles billing.\n", "placeholder")

        assert outcome.value == "Handles billing."
        assert outcome.status is ParseStatus.PARSED

    def test_blank_uses_placeholder(self) -> None:
        """Test that blank responses use the placeholder."""
        outcome = parse_narrative_response("\n", "placeholder")

        assert outcome.value == "placeholder"
        assert outcome.status is ParseStatus.DEFAULTED
