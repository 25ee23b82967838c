"""Test fixtures for CodeGuard.

Provides a scripted stand-in for the model client and helpers that build
small sample projects on disk.

The scripted client recognizes which analysis a prompt asks for from the
instruction text that precedes the embedded code, so tests can script
replies per call type without a real provider.
"""

import json
from pathlib import Path

from codeguard.llm.client import LLMResponse
from codeguard.llm.errors import LLMRetryExhaustedError
from codeguard.llm.retry import ErrorKind
from codeguard.models.analysis import CodeIssue, FileAnalysisResult, ScoreWithReason
from codeguard.models.llm_config import LLMConfig

# Path to fixtures directory
FIXTURES_DIR = Path(__file__).parent

# Checked in order; the first marker found in the instruction wins
PROMPT_MARKERS: list[tuple[str, str]] = [
    ("kt_summary", "Summarize the "),
    ("issues", "Identify specific issues"),
    ("suggestions", "Provide specific suggestions"),
    ("metrics", "Extract code metrics"),
    ("kt_purpose", "Explain the purpose"),
    ("kt_design", "Describe the design"),
    ("kt_modules", "Describe the modules"),
    ("codeQuality", "overall quality"),
    ("solid", "SOLID principles"),
    ("designPatterns", "design patterns"),
    ("security", "security vulnerabilities"),
    ("bugDetection", "potential bugs"),
]

DIMENSION_CALLS = ("codeQuality", "solid", "designPatterns", "security", "bugDetection")

SAMPLE_JAVA = """public class Calculator {
    private int total;

    public int add(int value) {
        total += value;
        return total;
    }
}
"""

SAMPLE_PYTHON = '''"""Order pricing."""


def price(quantity, unit_cost):
    return quantity * unit_cost
'''


def classify_prompt(prompt: str) -> str:
    """Return the call type a prompt was built for."""
    instruction = prompt.split("Code:\n", 1)[0]
    for name, marker in PROMPT_MARKERS:
        if marker in instruction:
            return name
    raise AssertionError(f"Unrecognized prompt: {instruction[:80]!r}")


def score_json(score: float, reason: str = "ok", recommendations: list[str] | None = None) -> str:
    return json.dumps(
        {"score": score, "reason": reason, "recommendations": recommendations or []}
    )


def default_replies(score: float = 80.0) -> dict[str, str]:
    """Well-formed replies for every call type, all dimensions at one score."""
    replies = {name: score_json(score, f"{name} looks fine") for name in DIMENSION_CALLS}
    replies.update(
        {
            "metrics": json.dumps(
                {
                    "linesOfCode": 8,
                    "cyclomaticComplexity": 2,
                    "numberOfMethods": 1,
                    "numberOfClasses": 1,
                    "commentRatio": 0.0,
                    "codeComplexity": "LOW",
                }
            ),
            "issues": json.dumps(
                [
                    {
                        "severity": "MEDIUM",
                        "type": "Maintainability",
                        "description": "Mutable shared state",
                        "lineNumber": 2,
                        "suggestion": "Make total final",
                    }
                ]
            ),
            "suggestions": json.dumps(["Add unit tests"]),
            "kt_purpose": "Adds numbers.",
            "kt_design": "A single stateful class.",
            "kt_modules": "Calculator holds the running total.",
            "kt_summary": "Condensed summary.",
        }
    )
    return replies


def exhausted(kind: ErrorKind = ErrorKind.RATE_LIMIT) -> LLMRetryExhaustedError:
    return LLMRetryExhaustedError("model call failed after 3 attempts", kind=kind, attempts=3)


class ScriptedClient:
    """Fake model client with per-call-type replies.

    Replies may be strings (returned as content) or exceptions (raised).
    Replies keyed by file marker override the defaults for prompts whose
    embedded code contains that marker.
    """

    def __init__(
        self,
        replies: dict[str, str | Exception] | None = None,
        per_file: dict[str, dict[str, str | Exception]] | None = None,
    ) -> None:
        self.replies: dict[str, str | Exception] = dict(default_replies())
        self.replies.update(replies or {})
        self.per_file = per_file or {}
        self.calls: list[str] = []
        self.config = LLMConfig(provider="ollama", model="scripted")

    def complete(self, prompt: str, system_prompt: str | None = None) -> LLMResponse:
        name = classify_prompt(prompt)
        self.calls.append(name)

        reply = self.replies.get(name, "")
        for marker, overrides in self.per_file.items():
            if marker in prompt and name in overrides:
                reply = overrides[name]
                break

        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model="scripted", usage={"total_tokens": 10})


def write_project(root: Path, files: dict[str, str]) -> Path:
    """Create files under root from a {relative path: content} mapping."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def make_file_result(
    filename: str,
    score: float,
    issues: list[CodeIssue] | None = None,
) -> FileAnalysisResult:
    """Build a scored FileAnalysisResult with every dimension at one score."""
    result = FileAnalysisResult(
        filename=filename,
        filepath=f"src/{filename}",
        language="Java",
        code_quality=ScoreWithReason(score, "Readable", ["Add docs"]),
        solid=ScoreWithReason(score, "Single purpose"),
        design_patterns=ScoreWithReason(score, "Simple"),
        security=ScoreWithReason(score, "No input handling"),
        bug_detection=ScoreWithReason(score, "No obvious bugs"),
        issues=issues or [],
        suggestions=["Add tests"],
        metrics={"linesOfCode": 10, "codeComplexity": "LOW"},
    )
    result.calculate_final_score()
    return result
