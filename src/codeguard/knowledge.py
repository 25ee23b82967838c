"""Run-level knowledge-transfer summaries.

Merges the per-file KT narratives of an analysis run and asks the model to
condense each section into onboarding documentation.
"""

import logging
from dataclasses import dataclass

from codeguard.llm.client import LLMClient
from codeguard.llm.errors import LLMError
from codeguard.llm.prompts import (
    KT_SECTION_TITLES,
    KT_SECTIONS,
    KT_SYSTEM_PROMPT,
    build_kt_summary_prompt,
    kt_placeholder,
)
from codeguard.models.analysis import AnalysisResult, FileAnalysisResult

logger = logging.getLogger(__name__)

NO_KT_DATA = "No knowledge-transfer data was collected."


@dataclass
class KnowledgeTransferSummary:
    """Condensed KT documentation for a whole run.

    Attributes:
        purpose: Purpose & goals summary
        design: System design summary
        modules: Modules & business logic summary
        files_included: Files that contributed narratives
    """

    purpose: str
    design: str
    modules: str
    files_included: int = 0

    def get_section(self, section: str) -> str:
        return getattr(self, section)

    def to_dict(self) -> dict:
        return {
            "purpose": self.purpose,
            "design": self.design,
            "modules": self.modules,
            "filesIncluded": self.files_included,
        }


def _narrative(result: FileAnalysisResult, section: str) -> str | None:
    """Return a file's narrative, or None when it is blank or a placeholder."""
    text = (getattr(result, f"kt_{section}") or "").strip()
    if not text or text == kt_placeholder(section):
        return None
    return text


def merge_section(results: list[FileAnalysisResult], section: str) -> str:
    """Concatenate one section's extracted narratives, headed by filename."""
    parts = []
    for result in results:
        text = _narrative(result, section)
        if result.is_fallback or text is None:
            continue
        parts.append(f"### {result.filepath}\n{text}")
    return "\n\n".join(parts)


def summarize_section(client: LLMClient, section: str, merged_text: str) -> str:
    """Condense one merged section, degrading to a placeholder on failure."""
    if not merged_text.strip():
        return NO_KT_DATA

    try:
        response = client.complete(
            build_kt_summary_prompt(section, merged_text),
            system_prompt=KT_SYSTEM_PROMPT,
        )
    except LLMError as e:
        logger.warning("Failed to summarize %s data: %s", section, e)
        return f"Unable to generate {section} summary due to API error."

    return response.content.strip() or NO_KT_DATA


def summarize_knowledge_transfer(
    client: LLMClient,
    result: AnalysisResult,
) -> KnowledgeTransferSummary:
    """Build run-level KT documentation from per-file narratives.

    Args:
        client: Model client
        result: Analysis result produced with KT enabled

    Returns:
        KnowledgeTransferSummary with one text per section
    """
    contributing = [
        r
        for r in result.file_results
        if not r.is_fallback and any(_narrative(r, s) for s in KT_SECTIONS)
    ]
    logger.info("Summarizing knowledge transfer from %d files", len(contributing))

    summaries = {}
    for section in KT_SECTIONS:
        logger.debug("Summarizing KT section: %s", KT_SECTION_TITLES[section])
        summaries[section] = summarize_section(
            client, section, merge_section(result.file_results, section)
        )

    return KnowledgeTransferSummary(
        purpose=summaries["purpose"],
        design=summaries["design"],
        modules=summaries["modules"],
        files_included=len(contributing),
    )
