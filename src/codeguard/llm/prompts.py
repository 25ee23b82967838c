"""LLM prompt templates for file analysis.

Every prompt embeds the full file content verbatim and names the exact JSON
shape the response must follow. Builders are pure functions: the same inputs
always produce the same prompt text.
"""

from codeguard.models.analysis import AnalysisMode, Dimension

# =============================================================================
# System Prompts
# =============================================================================

JSON_SYSTEM_PROMPT = (
    "You are a senior software engineer performing a code review. "
    "Respond ONLY with valid JSON in exactly the requested shape. "
    "Do not wrap the JSON in Markdown and do not add commentary."
)

KT_SYSTEM_PROMPT = (
    "You are a senior engineer writing knowledge-transfer documentation for "
    "developers joining the team. Write clear, factual prose based only on the "
    "code provided. Do not invent components that are not in the code."
)

# =============================================================================
# Scoring Dimensions
# =============================================================================

_SCORE_SHAPE = (
    "Return as JSON with keys:\n"
    "- 'score' (number 0-100)\n"
    "- 'reason' (detailed explanation for the score)\n"
    "- 'recommendations' (array of 4-5 concise actionable recommendations to {goal})"
)

# (instruction, recommendation goal) per dimension
DIMENSION_PROMPTS: dict[Dimension, tuple[str, str]] = {
    Dimension.CODE_QUALITY: (
        "Analyze the following {language} code for overall quality including "
        "readability, maintainability, and documentation. Provide a score from "
        "0-100 where 100 is excellent quality.",
        "improve code quality",
    ),
    Dimension.SOLID: (
        "Evaluate how well the following {language} code follows SOLID principles "
        "(Single Responsibility, Open/Closed, Liskov Substitution, Interface "
        "Segregation, Dependency Inversion). Return a score from 0-100.",
        "improve SOLID compliance",
    ),
    Dimension.DESIGN_PATTERNS: (
        "Analyze the following {language} code for proper use of design patterns "
        "and architectural decisions. Consider if appropriate patterns are used and "
        "if they're implemented correctly. Return a score from 0-100.",
        "improve design patterns usage",
    ),
    Dimension.SECURITY: (
        "Analyze the following {language} code for security vulnerabilities and "
        "best practices. Look for common security issues like injection flaws, "
        "insecure data handling, hard-coded secrets, etc. Return a score from "
        "0-100 where 100 is very secure.",
        "improve security",
    ),
    Dimension.BUG_DETECTION: (
        "Analyze the following {language} code for potential bugs such as null "
        "dereferences, off-by-one errors, resource leaks, unhandled exceptions and "
        "race conditions. Return a score from 0-100 where 100 means no likely bugs.",
        "eliminate potential bugs",
    ),
}

# =============================================================================
# Suggestion Framing per Analysis Mode
# =============================================================================

MODE_FRAMING: dict[AnalysisMode, str] = {
    AnalysisMode.STANDARD: "Provide general improvement suggestions.",
    AnalysisMode.QA_AUTOMATION: "Focus on testability and quality assurance aspects.",
    AnalysisMode.DEVOPS_TESTING: "Focus on deployment readiness and operational concerns.",
    AnalysisMode.DEVELOPER_REVIEW: "Focus on code review and improvement suggestions.",
}

# =============================================================================
# Knowledge Transfer Sections
# =============================================================================

KT_SECTIONS = ("purpose", "design", "modules")

KT_SECTION_TITLES = {
    "purpose": "Purpose & Goals",
    "design": "System Design",
    "modules": "Modules & Business Logic",
}


def kt_placeholder(section: str) -> str:
    """Text recorded for a file whose KT narrative could not be obtained."""
    return f"Unable to extract {KT_SECTION_TITLES[section].lower()} for this file."

_KT_QUESTIONS = {
    "purpose": (
        "Explain the purpose of the following {language} code: what problem it "
        "solves, who uses it and which business goals it serves."
    ),
    "design": (
        "Describe the design of the following {language} code: its main "
        "abstractions, the design decisions taken and the rationale behind them."
    ),
    "modules": (
        "Describe the modules, classes and functions in the following {language} "
        "code, the business logic each one implements and how they depend on "
        "each other and on external libraries."
    ),
}

_KT_SUMMARY_QUESTIONS = {
    "purpose": (
        "Summarize the overall purpose and goals of the system described by the "
        "following per-file notes."
    ),
    "design": (
        "Summarize the overall system design described by the following per-file "
        "notes."
    ),
    "modules": (
        "Summarize the modules, their business logic and their relationships "
        "described by the following per-file notes."
    ),
}

KT_SUMMARY_MAX_WORDS = 400


def build_dimension_prompt(dimension: Dimension, code: str, language: str) -> str:
    """Build the scoring prompt for one dimension.

    Args:
        dimension: Dimension to evaluate
        code: Full file content
        language: Detected language label

    Returns:
        Prompt requesting {"score", "reason", "recommendations"}
    """
    instruction, goal = DIMENSION_PROMPTS[dimension]
    return (
        f"{instruction.format(language=language)}\n\n"
        f"Code:\n{code}\n\n"
        f"{_SCORE_SHAPE.format(goal=goal)}"
    )


def build_issues_prompt(code: str, language: str) -> str:
    """Build the issue identification prompt (JSON array of issue objects)."""
    return (
        f"Identify specific issues in the following {language} code. "
        "For each issue, provide:\n"
        "- Severity (CRITICAL, HIGH, MEDIUM, LOW)\n"
        "- Type (e.g., Security, Performance, Maintainability)\n"
        "- Description\n"
        "- Line number (if applicable)\n"
        "- Suggestion for fix\n\n"
        f"Code:\n{code}\n\n"
        "Return as JSON array with objects containing: "
        "severity, type, description, lineNumber, suggestion"
    )


def build_suggestions_prompt(code: str, language: str, mode: AnalysisMode) -> str:
    """Build the suggestion prompt framed for the analysis mode."""
    return (
        f"Provide specific suggestions to improve the following {language} code. "
        f"{MODE_FRAMING[mode]}\n\n"
        f"Code:\n{code}\n\n"
        "Return suggestions as a JSON array of strings."
    )


def build_metrics_prompt(code: str, language: str) -> str:
    """Build the metrics extraction prompt (JSON object with fixed keys)."""
    return (
        f"Extract code metrics from the following {language} code including:\n"
        "- Lines of code\n"
        "- Cyclomatic complexity estimate\n"
        "- Number of methods/functions\n"
        "- Number of classes\n"
        "- Comment ratio (percentage 0-100)\n"
        "- Overall complexity level (LOW, MEDIUM or HIGH)\n\n"
        f"Code:\n{code}\n\n"
        "Return as JSON object with keys: linesOfCode (integer), "
        "cyclomaticComplexity (integer), numberOfMethods (integer), "
        "numberOfClasses (integer), commentRatio (number), "
        "codeComplexity (LOW, MEDIUM or HIGH)."
    )


def build_kt_prompt(section: str, code: str, language: str) -> str:
    """Build a knowledge-transfer narrative prompt.

    Args:
        section: One of KT_SECTIONS
        code: Full file content
        language: Detected language label

    Raises:
        KeyError: If section is unknown
    """
    question = _KT_QUESTIONS[section].format(language=language)
    return (
        f"{question} Answer in plain prose for a new team member, "
        "in 200 words or less.\n\n"
        f"Code:\n{code}"
    )


def build_kt_summary_prompt(section: str, merged_text: str) -> str:
    """Build the run-level prompt condensing per-file KT narratives."""
    return (
        f"{_KT_SUMMARY_QUESTIONS[section]} Remove repetition, group related "
        f"points and answer in {KT_SUMMARY_MAX_WORDS} words or less.\n\n"
        f"Notes:\n{merged_text}"
    )
