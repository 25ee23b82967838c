"""Unit tests for per-file analysis."""

import pytest

from codeguard.analyzer import CallResponse, FileAnalyzer, build_fallback_result
from codeguard.llm.errors import LLMFatalError
from codeguard.llm.retry import ErrorKind
from codeguard.models.analysis import (
    AnalysisMode,
    Dimension,
    QualityIndicator,
)
from tests.fixtures import (
    DIMENSION_CALLS,
    SAMPLE_JAVA,
    ScriptedClient,
    exhausted,
    score_json,
)


class TestBuildFallbackResult:
    """Tests for the degraded per-file result."""

    def test_all_scores_zero(self) -> None:
        """Test that every dimension is zero with an error reason."""
        result = build_fallback_result("src/A.java", SAMPLE_JAVA, "Java", "boom")

        for dimension in Dimension:
            score = result.get_score(dimension)
            assert score.score == 0.0
            assert score.reason == f"{dimension.title} analysis failed: boom"
        assert result.final_score == 0.0
        assert result.quality_indicator is QualityIndicator.RED
        assert result.error == "boom"
        assert result.issues == []
        assert result.suggestions == []

    def test_metrics_computed_locally(self) -> None:
        """Test that the fallback counts lines from the content."""
        result = build_fallback_result("A.java", "a\nb\n", "Java", "boom")

        assert result.metrics["linesOfCode"] == 2
        assert result.metrics["codeComplexity"] == "UNKNOWN"
        assert result.filename == "A.java"


class TestCallResponse:
    """Tests for CallResponse."""

    def test_succeeded(self) -> None:
        """Test the success flag follows the error field."""
        assert CallResponse(name="metrics").succeeded
        assert not CallResponse(name="metrics", error="failed").succeeded


class TestFileAnalyzer:
    """Tests for FileAnalyzer.analyze_file."""

    def test_call_order_without_kt(self) -> None:
        """Test the documented call sequence."""
        client = ScriptedClient()

        FileAnalyzer(client).analyze_file("src/Calculator.java", SAMPLE_JAVA, "Java")

        assert client.calls == ["metrics", *DIMENSION_CALLS, "issues", "suggestions"]

    def test_call_order_with_kt(self) -> None:
        """Test that KT calls follow the suggestion call."""
        client = ScriptedClient()

        FileAnalyzer(client).analyze_file(
            "src/Calculator.java", SAMPLE_JAVA, "Java", kt_enabled=True
        )

        assert client.calls[-3:] == ["kt_purpose", "kt_design", "kt_modules"]
        assert len(client.calls) == 11

    def test_well_formed_result(self) -> None:
        """Test a complete result from well-formed replies."""
        result = FileAnalyzer(ScriptedClient()).analyze_file(
            "src/Calculator.java", SAMPLE_JAVA, "Java"
        )

        assert result.filename == "Calculator.java"
        assert result.filepath == "src/Calculator.java"
        assert result.language == "Java"
        assert result.final_score == pytest.approx(80.0)
        assert result.quality_indicator is QualityIndicator.YELLOW
        assert result.metrics["linesOfCode"] == 8
        assert len(result.issues) == 1
        assert result.suggestions == ["Add unit tests"]
        assert result.kt_purpose is None
        assert result.error is None

    def test_weighted_scores(self) -> None:
        """Test that per-dimension replies feed the weighted score."""
        client = ScriptedClient(
            {
                "codeQuality": score_json(100),
                "solid": score_json(50),
                "designPatterns": score_json(60),
                "security": score_json(90),
                "bugDetection": score_json(70),
            }
        )

        result = FileAnalyzer(client).analyze_file("A.java", SAMPLE_JAVA, "Java")

        assert result.final_score == pytest.approx(25 + 10 + 9 + 18 + 14)

    def test_failed_dimension_gets_neutral_score(self) -> None:
        """Test that one failed call degrades only that dimension."""
        client = ScriptedClient({"security": exhausted()})

        result = FileAnalyzer(client).analyze_file("A.java", SAMPLE_JAVA, "Java")

        assert result.security.score == 50.0
        assert result.security.reason.startswith("Security analysis unavailable:")
        assert result.code_quality.score == 80.0
        assert result.final_score == pytest.approx(80 * 0.8 + 50 * 0.2)
        assert result.error is None

    def test_unparseable_dimension_is_defaulted(self) -> None:
        """Test that prose without digits yields the neutral score."""
        client = ScriptedClient({"solid": "Looks reasonable."})

        result = FileAnalyzer(client).analyze_file("A.java", SAMPLE_JAVA, "Java")

        assert result.solid.score == 50.0

    def test_oversized_score_stays_in_its_dimension(self) -> None:
        """Test that a huge integer score degrades only that dimension."""
        client = ScriptedClient({"security": '{"score": 1' + "0" * 400 + ', "reason": "x"}'})

        result = FileAnalyzer(client).analyze_file("A.java", SAMPLE_JAVA, "Java")

        assert result.error is None
        assert result.security.score == 50.0
        assert result.code_quality.score == 80.0
        assert result.final_score == pytest.approx(80 * 0.8 + 50 * 0.2)

    def test_all_dimensions_failed(self) -> None:
        """Test that five failed dimensions produce the fallback result."""
        client = ScriptedClient({name: exhausted() for name in DIMENSION_CALLS})

        result = FileAnalyzer(client).analyze_file("A.java", SAMPLE_JAVA, "Java")

        assert result.final_score == 0.0
        assert result.quality_indicator is QualityIndicator.RED
        assert result.error is not None
        assert result.error.startswith("All dimension evaluations failed")
        assert "issues" not in client.calls

    def test_fatal_error_on_dimension(self) -> None:
        """Test that auth failures are also isolated per call."""
        fatal = LLMFatalError("denied", kind=ErrorKind.AUTHENTICATION, attempts=1)
        client = ScriptedClient({"bugDetection": fatal})

        result = FileAnalyzer(client).analyze_file("A.java", SAMPLE_JAVA, "Java")

        assert result.bug_detection.score == 50.0
        assert "denied" in result.bug_detection.reason

    def test_metrics_failure_uses_local_count(self) -> None:
        """Test the metrics fallback after a failed call."""
        client = ScriptedClient({"metrics": exhausted()})

        result = FileAnalyzer(client).analyze_file("A.java", SAMPLE_JAVA, "Java")

        assert result.metrics["linesOfCode"] == len(SAMPLE_JAVA.splitlines())
        assert result.final_score == pytest.approx(80.0)

    def test_issue_and_suggestion_failures(self) -> None:
        """Test that failed issue and suggestion calls yield empty lists."""
        client = ScriptedClient({"issues": exhausted(), "suggestions": exhausted()})

        result = FileAnalyzer(client).analyze_file("A.java", SAMPLE_JAVA, "Java")

        assert result.issues == []
        assert result.suggestions == []

    def test_unexpected_exception_yields_fallback(self) -> None:
        """Test that non-LLM errors never escape analyze_file."""
        client = ScriptedClient({"metrics": RuntimeError("socket closed")})

        result = FileAnalyzer(client).analyze_file("A.java", SAMPLE_JAVA, "Java")

        assert result.final_score == 0.0
        assert result.error == "Unexpected error: socket closed"

    def test_kt_narratives(self) -> None:
        """Test that KT narratives are stored on the result."""
        result = FileAnalyzer(ScriptedClient()).analyze_file(
            "A.java", SAMPLE_JAVA, "Java", kt_enabled=True
        )

        assert result.kt_purpose == "Adds numbers."
        assert result.kt_design == "A single stateful class."
        assert result.kt_modules == "Calculator holds the running total."

    def test_kt_placeholders(self) -> None:
        """Test the placeholders for failed or blank KT calls."""
        client = ScriptedClient({"kt_purpose": exhausted(), "kt_design": "   "})

        result = FileAnalyzer(client).analyze_file(
            "A.java", SAMPLE_JAVA, "Java", kt_enabled=True
        )

        assert result.kt_purpose == "Unable to extract purpose & goals for this file."
        assert result.kt_design == "Unable to extract system design for this file."
        assert result.kt_modules == "Calculator holds the running total."

    def test_mode_reaches_suggestion_prompt(self) -> None:
        """Test that the analysis mode frames the suggestion prompt."""
        prompts: list[str] = []

        class RecordingClient(ScriptedClient):
            def complete(self, prompt, system_prompt=None):  # type: ignore[no-untyped-def]
                prompts.append(prompt)
                return super().complete(prompt, system_prompt)

        FileAnalyzer(RecordingClient()).analyze_file(
            "A.java", SAMPLE_JAVA, "Java", mode=AnalysisMode.QA_AUTOMATION
        )

        suggestion_prompt = next(p for p in prompts if p.startswith("Provide specific"))
        assert "testability" in suggestion_prompt
