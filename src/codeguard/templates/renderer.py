"""Report renderer.

Renders an AnalysisResult to JSON or to HTML reports using Jinja2 templates
shipped with the package. Output depends only on the result passed in.

Files written:
- json: analysis-report.json
- html, technical: technical-report.html and analysis/<file>-analysis.html
- html, non-technical: executive-report.html
- KT documentation: kt/index.html plus one page per section
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, PackageLoader, TemplateError, select_autoescape

from codeguard.knowledge import KnowledgeTransferSummary
from codeguard.llm.prompts import KT_SECTION_TITLES, KT_SECTIONS
from codeguard.models.analysis import (
    AnalysisResult,
    Dimension,
    FileAnalysisResult,
    ReportType,
)
from codeguard.renderers.filters import (
    format_score,
    metric_label,
    paragraphs,
    quality_level,
    sanitize_filename,
    score_class,
    severity_class,
)

logger = logging.getLogger(__name__)

JSON_REPORT = "analysis-report.json"
TECHNICAL_REPORT = "technical-report.html"
EXECUTIVE_REPORT = "executive-report.html"
DETAIL_DIR = "analysis"
KT_DIR = "kt"


class RenderError(Exception):
    """Raised when a report cannot be rendered or written."""


def format_datetime(dt: datetime | str | None) -> str:
    """Format a timestamp for display in reports.

    Args:
        dt: Datetime object or ISO string

    Returns:
        Formatted date string
    """
    if dt is None:
        return "N/A"

    if isinstance(dt, str):
        try:
            dt = datetime.fromisoformat(dt)
        except ValueError:
            return dt

    return dt.strftime("%Y-%m-%d %H:%M:%S")


def detail_page_names(file_results: list[FileAnalysisResult]) -> list[str]:
    """Assign a unique detail page file name to each file result.

    Names come from the sanitized file name; repeats get a numeric suffix so
    two files with the same base name never overwrite each other's page.
    """
    names: list[str] = []
    taken: set[str] = set()
    for result in file_results:
        base = sanitize_filename(result.filename) or "file"
        name = f"{base}-analysis.html"
        counter = 2
        while name in taken:
            name = f"{base}-{counter}-analysis.html"
            counter += 1
        taken.add(name)
        names.append(name)
    return names


class ReportRenderer:
    """Renders analysis results to report files.

    Usage:
        renderer = ReportRenderer()
        paths = renderer.render_reports(result, Path("reports"), ReportType.BOTH, "html")
    """

    def __init__(self) -> None:
        self._env = Environment(
            loader=PackageLoader("codeguard", "templates"),
            autoescape=select_autoescape(["html", "xml", "html.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        self._env.filters["format_datetime"] = format_datetime
        self._env.filters["format_score"] = format_score
        self._env.filters["quality_level"] = quality_level
        self._env.filters["score_class"] = score_class
        self._env.filters["metric_label"] = metric_label
        self._env.filters["severity_class"] = severity_class
        self._env.filters["paragraphs"] = paragraphs

    def render_template(self, template_name: str, **context: Any) -> str:
        """Render one template to a string.

        Raises:
            RenderError: If the template is missing or fails to render
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except TemplateError as e:
            logger.error("Template rendering failed for %s: %s", template_name, e)
            raise RenderError(f"Template rendering failed for {template_name}: {e}") from e

    def render_reports(
        self,
        result: AnalysisResult,
        output_dir: Path,
        report_type: ReportType = ReportType.BOTH,
        fmt: str = "html",
    ) -> list[Path]:
        """Write reports for an analysis result.

        Args:
            result: Run-level analysis result
            output_dir: Directory to write into (created if missing)
            report_type: Which HTML reports to generate
            fmt: "html" or "json"

        Returns:
            Paths of the files written

        Raises:
            RenderError: If a report cannot be rendered or written
        """
        logger.info(
            "Generating %s reports in %s format to: %s", report_type.value, fmt, output_dir
        )

        if fmt.lower() == "json":
            return [self._write(output_dir / JSON_REPORT, self.render_json(result))]

        written: list[Path] = []
        if report_type.includes_technical:
            written.append(
                self._write(output_dir / TECHNICAL_REPORT, self.render_technical(result))
            )
            written.extend(self._write_detail_pages(result, output_dir / DETAIL_DIR))

        if report_type.includes_executive:
            written.append(
                self._write(output_dir / EXECUTIVE_REPORT, self.render_executive(result))
            )

        return written

    def render_json(self, result: AnalysisResult) -> str:
        """Serialize the result using the report JSON schema."""
        return json.dumps(result.to_dict(), indent=2) + "\n"

    def render_technical(self, result: AnalysisResult) -> str:
        files = [
            {"result": file_result, "detail_page": f"{DETAIL_DIR}/{page}"}
            for file_result, page in zip(
                result.file_results, detail_page_names(result.file_results)
            )
        ]
        return self.render_template(
            "technical-report.html.j2",
            result=result,
            summary=result.summary,
            files=files,
            dimensions=list(Dimension),
        )

    def render_executive(self, result: AnalysisResult) -> str:
        return self.render_template(
            "executive-report.html.j2",
            result=result,
            summary=result.summary,
        )

    def render_file_detail(self, file_result: FileAnalysisResult) -> str:
        return self.render_template(
            "file-analysis.html.j2",
            file=file_result,
            dimensions=list(Dimension),
        )

    def render_kt_documentation(
        self,
        summary: KnowledgeTransferSummary,
        output_dir: Path,
    ) -> list[Path]:
        """Write KT documentation pages under output_dir/kt.

        Args:
            summary: Run-level KT summary
            output_dir: Report output directory

        Returns:
            Paths of the files written
        """
        kt_dir = output_dir / KT_DIR
        sections = [
            {"key": key, "title": KT_SECTION_TITLES[key], "page": f"{key}.html"}
            for key in KT_SECTIONS
        ]

        written = [
            self._write(
                kt_dir / "index.html",
                self.render_template("kt/index.html.j2", sections=sections, summary=summary),
            )
        ]
        for section in sections:
            written.append(
                self._write(
                    kt_dir / section["page"],
                    self.render_template(
                        "kt/section.html.j2",
                        section=section,
                        text=summary.get_section(section["key"]),
                    ),
                )
            )

        logger.info("KT documentation generated in: %s", kt_dir)
        return written

    def _write_detail_pages(self, result: AnalysisResult, detail_dir: Path) -> list[Path]:
        return [
            self._write(detail_dir / page, self.render_file_detail(file_result))
            for file_result, page in zip(
                result.file_results, detail_page_names(result.file_results)
            )
        ]

    def _write(self, path: Path, content: str) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise RenderError(f"Cannot write {path}: {e}") from e
        logger.debug("Wrote %s (%d characters)", path, len(content))
        return path
