"""CodeGuard - LLM-driven code quality analysis.

CodeGuard sends each source file to a large language model with a fixed
battery of prompts, parses the loosely structured answers defensively, and
aggregates them into weighted scores, quality tiers and reports. There is no
local static analysis: the model performs every evaluation.

Core guarantees:
- One result per readable file: failures degrade to fallback values
- Fixed scoring weights and quality tiers for comparable reports
- Bounded retry with backoff for transient model errors
- CI/CD compatibility: no interactive prompts, meaningful exit codes
"""

__version__ = "0.1.0"
