"""Per-file analysis orchestration.

Runs the battery of model calls for one file and assembles a
FileAnalysisResult. Each call is isolated: a failed call degrades to a
documented fallback value instead of aborting the file, and an unexpected
error anywhere in the sequence yields a fallback result. analyze_file()
therefore always returns exactly one result per file.

Call sequence:
1. Metrics extraction
2. Code quality, SOLID, design patterns, security, bug detection scores
3. Weighted final score and quality tier
4. Issue identification and suggestions
5. Knowledge-transfer narratives (KT mode only)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from codeguard.llm.client import LLMClient
from codeguard.llm.errors import LLMError
from codeguard.llm.parser import (
    NEUTRAL_SCORE,
    basic_metrics,
    parse_issues_response,
    parse_metrics_response,
    parse_narrative_response,
    parse_score_response,
    parse_suggestions_response,
)
from codeguard.llm.prompts import (
    JSON_SYSTEM_PROMPT,
    KT_SECTIONS,
    KT_SYSTEM_PROMPT,
    build_dimension_prompt,
    build_issues_prompt,
    build_kt_prompt,
    build_metrics_prompt,
    build_suggestions_prompt,
    kt_placeholder,
)
from codeguard.models.analysis import (
    AnalysisMode,
    CodeIssue,
    Dimension,
    FileAnalysisResult,
    FileMetrics,
    ScoreWithReason,
)

logger = logging.getLogger(__name__)


@dataclass
class CallResponse:
    """Outcome of one model call made while analyzing a file.

    Attributes:
        name: Call identifier (e.g., "metrics", "security", "kt_purpose")
        prompt_sent: The full prompt text sent to the model
        response_text: The model's response text (empty on failure)
        tokens_used: Token usage statistics
        attempts: Attempts the client needed
        error: Error message if the call failed
    """

    name: str
    prompt_sent: str = ""
    response_text: str = ""
    tokens_used: dict[str, int] = field(default_factory=dict)
    attempts: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def build_fallback_result(
    path: Path | str,
    content: str,
    language: str,
    error: str,
) -> FileAnalysisResult:
    """Build the degraded result used when a file cannot be analyzed.

    All five scores are 0.0 with reasons citing the error, metrics are
    computed locally, and issues and suggestions are empty.
    """
    path = Path(path)
    result = FileAnalysisResult(
        filename=path.name,
        filepath=str(path),
        language=language,
        metrics=basic_metrics(content),
        error=error,
    )
    for dimension in Dimension:
        result.set_score(
            dimension,
            ScoreWithReason(
                score=0.0,
                reason=f"{dimension.title} analysis failed: {error}",
            ),
        )
    result.calculate_final_score()
    return result


class FileAnalyzer:
    """Produces one FileAnalysisResult per file using the model backend."""

    def __init__(self, client: LLMClient, verbose: bool = False) -> None:
        """Initialize the analyzer.

        Args:
            client: Model client (anything with a compatible complete())
            verbose: Log full prompts and responses at debug level
        """
        self.client = client
        self.verbose = verbose

    def analyze_file(
        self,
        path: Path | str,
        content: str,
        language: str,
        mode: AnalysisMode = AnalysisMode.STANDARD,
        kt_enabled: bool = False,
    ) -> FileAnalysisResult:
        """Analyze a single file.

        Args:
            path: File path (used for naming only; content is already read)
            content: Full file content
            language: Detected language label
            mode: Analysis mode, framing the suggestion prompt
            kt_enabled: Also extract knowledge-transfer narratives

        Returns:
            FileAnalysisResult, possibly a fallback result; never raises
        """
        try:
            return self._analyze(Path(path), content, language, mode, kt_enabled)
        except Exception as e:
            logger.error("Unexpected error analyzing %s: %s", path, e)
            return build_fallback_result(path, content, language, f"Unexpected error: {e}")

    def _analyze(
        self,
        path: Path,
        content: str,
        language: str,
        mode: AnalysisMode,
        kt_enabled: bool,
    ) -> FileAnalysisResult:
        logger.debug("Analyzing %s (%s, %d chars)", path, language, len(content))

        result = FileAnalysisResult(
            filename=path.name,
            filepath=str(path),
            language=language,
        )

        result.metrics = self._extract_metrics(content, language)

        failures: list[str] = []
        for dimension in Dimension:
            score, error = self._evaluate_dimension(dimension, content, language)
            result.set_score(dimension, score)
            if error:
                failures.append(error)

        if len(failures) == len(Dimension):
            logger.error("All dimension evaluations failed for %s", path)
            return build_fallback_result(
                path,
                content,
                language,
                f"All dimension evaluations failed: {failures[-1]}",
            )

        if failures:
            logger.warning(
                "%s has partial scores: %d/%d dimensions used the neutral fallback",
                path,
                len(failures),
                len(Dimension),
            )

        result.calculate_final_score()

        result.issues = self._identify_issues(content, language)
        result.suggestions = self._generate_suggestions(content, language, mode)

        if kt_enabled:
            result.kt_purpose = self._extract_narrative("purpose", content, language)
            result.kt_design = self._extract_narrative("design", content, language)
            result.kt_modules = self._extract_narrative("modules", content, language)

        logger.info(
            "Analyzed %s: %.1f (%s), %d issues",
            path.name,
            result.final_score,
            result.quality_indicator.name,
            len(result.issues),
        )
        return result

    def _request(
        self,
        name: str,
        prompt: str,
        system_prompt: str = JSON_SYSTEM_PROMPT,
    ) -> CallResponse:
        """Make one model call, capturing a terminal failure as an error.

        Args:
            name: Call identifier for logging
            prompt: Prompt text
            system_prompt: System prompt for the call

        Returns:
            CallResponse with either response_text or error set
        """
        response = CallResponse(name=name, prompt_sent=prompt)

        if self.verbose:
            logger.debug("Call '%s' prompt:\n%s", name, prompt)

        try:
            llm_response = self.client.complete(prompt, system_prompt=system_prompt)
            response.response_text = llm_response.content
            response.tokens_used = llm_response.usage
            response.attempts = llm_response.attempts

            if self.verbose:
                logger.debug("Call '%s' response:\n%s", name, llm_response.content)
            else:
                logger.debug(
                    "Call '%s': %d tokens, %d chars",
                    name,
                    llm_response.usage.get("total_tokens", 0),
                    len(llm_response.content),
                )

        except LLMError as e:
            response.error = str(e)
            response.attempts = e.attempts
            logger.warning("Call '%s' failed: %s", name, e)

        return response

    def _extract_metrics(self, content: str, language: str) -> FileMetrics:
        response = self._request("metrics", build_metrics_prompt(content, language))
        if not response.succeeded:
            return basic_metrics(content)
        return parse_metrics_response(response.response_text, content).value

    def _evaluate_dimension(
        self,
        dimension: Dimension,
        content: str,
        language: str,
    ) -> tuple[ScoreWithReason, str | None]:
        """Score one dimension.

        Returns:
            Tuple of (score, error message if the call failed)
        """
        response = self._request(
            dimension.value,
            build_dimension_prompt(dimension, content, language),
        )
        if not response.succeeded:
            return (
                ScoreWithReason(
                    score=NEUTRAL_SCORE,
                    reason=f"{dimension.title} analysis unavailable: {response.error}",
                ),
                response.error,
            )

        outcome = parse_score_response(response.response_text)
        if outcome.degraded:
            logger.debug(
                "%s score %s (%s)", dimension.title, outcome.status.value, outcome.detail
            )
        return outcome.value, None

    def _identify_issues(self, content: str, language: str) -> list[CodeIssue]:
        response = self._request("issues", build_issues_prompt(content, language))
        if not response.succeeded:
            return []
        return parse_issues_response(response.response_text).value

    def _generate_suggestions(
        self,
        content: str,
        language: str,
        mode: AnalysisMode,
    ) -> list[str]:
        response = self._request(
            "suggestions",
            build_suggestions_prompt(content, language, mode),
        )
        if not response.succeeded:
            return []
        return parse_suggestions_response(response.response_text).value

    def _extract_narrative(self, section: str, content: str, language: str) -> str:
        placeholder = kt_placeholder(section)
        response = self._request(
            f"kt_{section}",
            build_kt_prompt(section, content, language),
            system_prompt=KT_SYSTEM_PROMPT,
        )
        if not response.succeeded:
            return placeholder
        return parse_narrative_response(response.response_text, placeholder).value


__all__ = ["CallResponse", "FileAnalyzer", "KT_SECTIONS", "build_fallback_result"]
