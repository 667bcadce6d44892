#!/usr/bin/env python3
"""
PageAudit CLI Interface
Command-line interface for the PageAudit analysis pipeline
"""

import asyncio
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pageaudit.ai.enhancer import ScoreCalibrator
from pageaudit.core.config import AnalyzerConfig, ConfigurationError, load_config
from pageaudit.core.document import Document, DocumentError
from pageaudit.core.engine import AnalysisEngine
from pageaudit.core.model import AnalysisReport
from pageaudit.core.plugin_loader import PluginLoader
from pageaudit.core.profiles import PROFILES
from pageaudit.core.result_manager import ResultManager
from pageaudit.utils.http_client import HTTPClient
from pageaudit.utils.logger import setup_logger
from pageaudit.utils.report import ReportGenerator

app = typer.Typer(
    name="pageaudit",
    help="PageAudit - multi-phase page quality analysis",
    no_args_is_help=True
)

console = Console()

OUTPUT_FORMATS = ["json", "html", "csv", "all"]


def build_overrides(profile: Optional[str],
                    timeout: Optional[float],
                    no_enhancement: bool) -> Dict[str, Any]:
    """Translate CLI flags into a configuration override mapping."""
    overrides: Dict[str, Any] = {}
    if profile:
        overrides["profile"] = profile
    phases: Dict[str, Any] = {}
    if timeout is not None:
        phases["detector_timeout"] = timeout
        phases["heuristic_timeout"] = timeout
    if no_enhancement:
        phases["enable_enhancement"] = False
    if phases:
        overrides["phases"] = phases
    return overrides


def render_report(report: AnalysisReport) -> None:
    """Print one report as a rich table."""
    if not report.success:
        console.print(Panel(f"{report.error}\nContent detected: {report.fallback.get('content_detected')}",
                            title=f"Aborted: {report.target}", border_style="red"))
        return

    overall = report.combined["overall"]
    table = Table(title=f"{report.target}  -  {overall['score']} ({overall['grade']})")
    table.add_column("Category")
    table.add_column("Score", justify="right")
    table.add_column("Grade", justify="center")
    for category in report.combined["per_category"].values():
        score = category["score"]
        table.add_row(category["title"], "-" if score is None else str(score), category["grade"] or "-")
    console.print(table)

    failed = report.detection.failed + report.heuristics.failed
    if failed:
        console.print(f"[yellow]Failed units: {', '.join(failed)}[/yellow]")
    if overall["source"] == "enhancement":
        console.print(f"[cyan]Score calibrated (rules score {overall['rules_score']})[/cyan]")
    for rec in report.recommendations[:5]:
        console.print(f"  • [{rec.get('priority', 'medium')}] {rec.get('title') or rec.get('rule')}")


async def write_outputs(reports: List[AnalysisReport], output_dir: str, formats: List[str]) -> List[str]:
    written: List[str] = []
    manager = ResultManager(output_dir)
    for report in reports:
        paths = await manager.generate_reports(report, formats)
        written.extend(paths.values())

    if "csv" in formats:
        generator = ReportGenerator(output_dir)
        report_dicts = [r.to_dict() for r in reports]
        written.append(generator.generate_csv_report(report_dicts))
        written.append(generator.generate_summary_report(report_dicts))
    return written


@app.command()
def audit(
    url: Optional[List[str]] = typer.Option(
        None, "--url", "-u",
        help="Page URL to audit (repeatable)"
    ),
    file: Optional[str] = typer.Option(
        None, "--file", "-f",
        help="Local HTML file to audit"
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p",
        help=f"Analyzer profile: {', '.join(PROFILES)}"
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c",
        help="YAML configuration file"
    ),
    output_dir: str = typer.Option(
        "./reports", "--output-dir", "-o",
        help="Output directory for reports"
    ),
    output_format: str = typer.Option(
        "json", "--format",
        help="Report format: json, html, csv or all"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout",
        help="Per-detector and per-heuristic timeout in seconds"
    ),
    no_enhancement: bool = typer.Option(
        False, "--no-enhancement",
        help="Skip the score calibration step"
    ),
    verbose: int = typer.Option(
        1, "--verbose", "-v",
        help="Verbosity level: 0=minimal, 1=standard, 2=debug"
    )
):
    """Audit one or more pages and write reports."""

    if output_format not in OUTPUT_FORMATS:
        console.print(f"[red]ERROR: Format must be one of {', '.join(OUTPUT_FORMATS)}[/red]")
        raise typer.Exit(1)
    if not url and not file:
        console.print("[red]ERROR: Provide at least one --url or a --file[/red]")
        raise typer.Exit(1)

    logger = setup_logger(verbose)

    try:
        analyzer_config = load_config(config) if config else AnalyzerConfig()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    overrides = build_overrides(profile, timeout, no_enhancement)
    formats = ["json", "html", "csv"] if output_format == "all" else [output_format]

    async def run_audit():
        engine = AnalysisEngine(config=analyzer_config, logger=logger, enhancer=ScoreCalibrator())
        reports: List[AnalysisReport] = []
        failures = 0

        if file:
            try:
                document = Document.from_file(file)
            except DocumentError as e:
                console.print(f"[red]{e}[/red]")
                failures += 1
            else:
                reports.append(await engine.analyze(document.url, document, overrides=overrides))

        if url:
            async with HTTPClient(timeout=timeout or 30.0) as client:
                for page_url in url:
                    try:
                        document = await Document.fetch(page_url, client)
                    except DocumentError as e:
                        console.print(f"[red]{e}[/red]")
                        failures += 1
                        continue
                    reports.append(await engine.analyze(page_url, document, overrides=overrides))

        return reports, failures

    try:
        reports, failures = asyncio.run(run_audit())
        for report in reports:
            render_report(report)
        if len(reports) > 1:
            console.print(ReportGenerator(output_dir).generate_console_summary(
                [r.to_dict() for r in reports], analyzer_config.rules.grade_bands))
        written = asyncio.run(write_outputs(reports, output_dir, formats)) if reports else []
        for path in written:
            console.print(f"[green]Report saved: {path}[/green]")
    except KeyboardInterrupt:
        console.print("[yellow]Audit interrupted by user[/yellow]")
        raise typer.Exit(1)

    if failures or any(not r.success for r in reports):
        raise typer.Exit(1)


@app.command("list-plugins")
def list_plugins():
    """List available detectors and heuristics by family."""
    loader = PluginLoader()
    loader.load_all_plugins()

    for kind in ("detector", "heuristic"):
        table = Table(title=f"{kind.capitalize()}s")
        table.add_column("ID", style="cyan")
        table.add_column("Family")
        table.add_column("Order", justify="right")
        table.add_column("Description")
        for plugin_id in loader.filter_plugins(kind):
            metadata = loader.get_plugin_metadata(kind, plugin_id)
            table.add_row(plugin_id, metadata["family"], str(metadata.get("order", "-")), metadata["description"])
        console.print(table)

    stats = loader.get_plugin_stats()
    console.print(f"Total plugins: {stats['total_plugins']}")


@app.command()
def version():
    """Show version information."""
    from pageaudit import __version__, __author__
    console.print(f"PageAudit v{__version__}")
    console.print(f"By {__author__}")


if __name__ == "__main__":
    app()
