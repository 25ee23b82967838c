"""CodeGuard CLI interface.

Commands:
- analyze: Score code files with the model and generate reports
- check: Validate dependencies and credentials before a run
- init: Initialize CodeGuard configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log output for CI/CD
- --version: Show version and exit
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from codeguard import __version__
from codeguard.config import CodeGuardConfig, create_default_config, load_config
from codeguard.llm.client import create_client
from codeguard.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="codeguard",
    help="LLM-driven code quality analysis with HTML and JSON reports",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: CodeGuardConfig | None = None
_logger = get_logger()


def _get_config() -> CodeGuardConfig:
    return _config if _config is not None else CodeGuardConfig()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"codeguard {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON log output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """CodeGuard - LLM-driven code quality analysis.

    Scores files on code quality, SOLID principles, design patterns, security
    and bug risk, and renders technical and executive reports.
    """
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except Exception as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


# =============================================================================
# analyze command
# =============================================================================


@app.command()
def analyze(
    paths: Annotated[
        list[Path] | None,
        typer.Argument(
            help="Code files or directories to analyze",
            show_default=False,
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory for generated reports (overrides config)",
        ),
    ] = None,
    threshold: Annotated[
        float | None,
        typer.Option(
            "--threshold",
            "-t",
            help="Minimum overall quality score (default: 70)",
        ),
    ] = None,
    mode: Annotated[
        str | None,
        typer.Option(
            "--mode",
            "-m",
            help="Analysis mode: standard, qa_automation, devops_testing, developer_review",
        ),
    ] = None,
    report_type: Annotated[
        str | None,
        typer.Option(
            "--report-type",
            "-r",
            help="Report type: technical, non_technical, both",
        ),
    ] = None,
    format: Annotated[
        str | None,
        typer.Option(
            "--format",
            "-f",
            help="Output format: html, json",
        ),
    ] = None,
    scan: Annotated[
        Path | None,
        typer.Option(
            "--scan",
            help="Scan directory recursively for code files (replaces PATHS)",
            exists=True,
            file_okay=False,
        ),
    ] = None,
    kt: Annotated[
        bool,
        typer.Option(
            "--kt",
            help="Generate knowledge-transfer (KT) documentation",
        ),
    ] = False,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            min=1,
            help="Number of files analyzed concurrently (default: 1)",
        ),
    ] = None,
) -> None:
    """Analyze code files and generate reports.

    Reports are always written before the quality gate is evaluated.

    Exit codes:
        0: Analysis complete (and quality gate passed or not enforced)
        1: No files, startup/rendering error, or quality gate failed in
           qa_automation/devops_testing mode
    """
    from codeguard.analyzer import FileAnalyzer
    from codeguard.discovery import discover_files
    from codeguard.knowledge import summarize_knowledge_transfer
    from codeguard.models.analysis import AnalysisMode, ReportType
    from codeguard.pipeline import AnalysisAggregator, PipelineOptions
    from codeguard.templates import RenderError, ReportRenderer

    config = _get_config()

    # Apply CLI overrides to config
    try:
        analysis_mode = AnalysisMode.parse(mode) if mode else config.analysis.mode
        selected_reports = (
            ReportType.parse(report_type) if report_type else config.output.report_type
        )
    except ValueError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    output_format = (format or config.output.format).lower()
    if output_format not in {"html", "json"}:
        _logger.error(f"Invalid format: {output_format}. Use 'html' or 'json'")
        raise typer.Exit(1)

    output_dir = output or Path(config.output.path)
    gate = threshold if threshold is not None else config.analysis.threshold
    kt_enabled = kt or config.analysis.kt
    max_workers = workers or config.analysis.max_workers

    typer.echo("Starting CodeGuard analysis...")

    files = discover_files(
        paths or [],
        scan_directory=scan,
        max_file_size=config.analysis.max_file_size,
    )
    if not files:
        _logger.error("No code files found to analyze")
        raise typer.Exit(1)

    try:
        client = create_client(config.llm, retry_policy=config.retry)
    except ValueError as e:
        _logger.error(f"Cannot start analysis: {e}")
        raise typer.Exit(1)

    typer.echo(f"Analyzing {len(files)} files...")
    _logger.info(f"Model: {config.llm.provider}/{config.llm.model} (mode: {analysis_mode.value})")

    aggregator = AnalysisAggregator(
        FileAnalyzer(client, verbose=_logger.isEnabledFor(logging.DEBUG)),
        PipelineOptions(mode=analysis_mode, kt_enabled=kt_enabled, max_workers=max_workers),
    )
    result = aggregator.run(files)

    renderer = ReportRenderer()
    try:
        renderer.render_reports(result, output_dir, selected_reports, output_format)
        if kt_enabled:
            kt_summary = summarize_knowledge_transfer(client, result)
            renderer.render_kt_documentation(kt_summary, output_dir)
            typer.echo(f"KT documentation generated in: {output_dir / 'kt'}")
    except RenderError as e:
        _logger.error(f"Report generation failed: {e}")
        raise typer.Exit(1)

    typer.echo(f"Analysis complete. Reports generated in: {output_dir}")
    typer.echo(f"Overall Score: {result.overall_score:.2f} ({result.quality_indicator.label})")

    if not result.passes_threshold(gate):
        _logger.warning(
            f"Quality gate failed. Score: {result.overall_score:.2f} < threshold: {gate:g}"
        )
        if analysis_mode.enforces_quality_gate:
            raise typer.Exit(1)


# =============================================================================
# check command
# =============================================================================


@app.command()
def check(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results as JSON",
        ),
    ] = False,
    ping: Annotated[
        bool,
        typer.Option(
            "--ping",
            help="Also make a live call to the model provider",
        ),
    ] = False,
) -> None:
    """Validate dependencies and credentials.

    Exit codes:
        0: All checks passed
        1: One or more required checks failed
        2: Only optional checks failed (warnings)
    """
    from codeguard.utils.preflight import PreflightChecker

    checker = PreflightChecker(
        client_factory=lambda config: create_client(config.llm, retry_policy=config.retry)
    )
    result = checker.check_all(_get_config(), ping=ping)

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        typer.echo("\nPreflight Check Results\n")

        for check_result in result.checks:
            status = "OK  " if check_result.available else "FAIL"
            version_str = f" ({check_result.version})" if check_result.version else ""
            required_str = " [required]" if check_result.required else " [optional]"

            typer.echo(f"  {status} {check_result.name}{version_str}{required_str}")
            typer.echo(f"       {check_result.message}")

        typer.echo()

    if result.errors:
        if not json_output:
            typer.echo("Preflight check FAILED")
            for error in result.errors:
                typer.echo(f"   - {error}")
        raise typer.Exit(1)
    elif result.warnings:
        if not json_output:
            typer.echo("Preflight check passed with WARNINGS")
            for warning in result.warnings:
                typer.echo(f"   - {warning}")
        raise typer.Exit(2)

    if not json_output:
        typer.echo("All preflight checks passed")


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
) -> None:
    """Initialize CodeGuard configuration.

    Creates .codeguard/config.yaml with documented defaults.
    """
    config_dir = Path(".codeguard")
    config_file = config_dir / "config.yaml"

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_dir.mkdir(exist_ok=True)
    config_file.write_text(create_default_config(), encoding="utf-8")

    typer.echo(f"Created config: {config_file}")
    typer.echo("Set OPENAI_API_KEY (or edit the llm section) and run: codeguard check")
