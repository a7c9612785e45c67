"""CLI for protocol-assist: analyze / generate commands."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from protocol_assist.core.config import AppSettings, LLMConfig
from protocol_assist.exceptions import ProtocolAssistError
from protocol_assist.models import AnalysisResult, FinalDocuments, StudyDetails
from protocol_assist.providers.client import LLMClient
from protocol_assist.services.protocol_service import ProtocolAnalysisService

app = typer.Typer(name="protocol-assist", help="Clinical-trial protocol analysis and document generation")
console = Console()
err_console = Console(stderr=True)


def _build_settings(
    base_url: Optional[str],
    api_key: Optional[str],
    model: Optional[str],
) -> AppSettings:
    """Build settings, overriding env defaults with CLI flags."""
    overrides: dict = {}
    if base_url:
        overrides["base_url"] = base_url
    if api_key:
        overrides["api_key"] = api_key
    if model:
        overrides["model"] = model
    return AppSettings(llm=LLMConfig(**overrides))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


def _load_study_details(path: Optional[Path]) -> StudyDetails:
    if path is None:
        return StudyDetails()
    return StudyDetails.model_validate_json(path.read_text(encoding="utf-8"))


def _fail(exc: Exception) -> NoReturn:
    err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    raise typer.Exit(code=1)


@app.command()
def analyze(
    protocol_file: Path = typer.Argument(..., help="Protocol text file"),
    study_file: Optional[Path] = typer.Option(None, "--study", help="JSON file with study details"),
    output: Optional[Path] = typer.Option(None, help="Output path for analysis JSON"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="LLM base URL"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="LLM API key"),
    model: Optional[str] = typer.Option(None, "--model", help="LLM model name"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Analyze a protocol: metrics, suggestions and study schedule."""
    _configure_logging(verbose)

    settings = _build_settings(base_url, api_key, model)
    service = ProtocolAnalysisService(LLMClient(settings.llm), settings)

    content = protocol_file.read_text(encoding="utf-8")
    console.print(f"[bold]Analyzing {protocol_file}[/bold] ({len(content)} chars)")

    try:
        result = asyncio.run(service.analyze_protocol(content, _load_study_details(study_file)))
    except ProtocolAssistError as e:
        _fail(e)

    if output:
        output.write_text(result.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        console.print(f"[green]Analysis saved to {output}[/green]")

    _print_analysis(result)


@app.command()
def generate(
    protocol_file: Path = typer.Argument(..., help="Protocol text file"),
    analysis: Path = typer.Option(..., "--analysis", help="Analysis JSON produced by 'analyze'"),
    suggestion: list[str] = typer.Option([], "--suggestion", "-s", help="Suggestion id to apply (repeatable)"),
    all_suggestions: bool = typer.Option(False, "--all", help="Apply every suggestion in the analysis"),
    include_schedule: bool = typer.Option(True, "--schedule/--no-schedule", help="Optimize the study schedule"),
    output: Optional[Path] = typer.Option(None, help="Output path for the documents JSON"),
    base_url: Optional[str] = typer.Option(None, "--base-url"),
    api_key: Optional[str] = typer.Option(None, "--api-key"),
    model: Optional[str] = typer.Option(None, "--model"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Generate the revised protocol and optimized schedule."""
    _configure_logging(verbose)

    settings = _build_settings(base_url, api_key, model)
    service = ProtocolAnalysisService(LLMClient(settings.llm), settings)

    content = protocol_file.read_text(encoding="utf-8")
    analysis_result = AnalysisResult.model_validate_json(analysis.read_text(encoding="utf-8"))
    selected = [s.id for s in analysis_result.suggestions] if all_suggestions else list(suggestion)
    console.print(f"[bold]Generating documents[/bold] with {len(selected)} suggestion(s)")

    try:
        documents = asyncio.run(
            service.generate_final_documents(content, selected, include_schedule, analysis_result)
        )
    except ProtocolAssistError as e:
        _fail(e)

    if output:
        output.write_text(documents.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        console.print(f"[green]Documents saved to {output}[/green]")
    else:
        console.print(documents.protocol, markup=False)

    _print_validation(documents)


def _print_analysis(result: AnalysisResult) -> None:
    m = result.metrics
    console.print(
        f"\n[bold]Metrics[/bold] over {result.chunk_count} section(s): "
        f"complexity={m.complexity:.2f} completeness={m.completeness:.2f} efficiency={m.efficiency:.2f}"
    )

    table = Table(title="Suggestions")
    table.add_column("ID", style="cyan")
    table.add_column("Impact")
    table.add_column("Category", style="green")
    table.add_column("Section")
    table.add_column("Message", max_width=60)
    for s in result.suggestions:
        table.add_row(s.id, s.impact, s.category, s.section, escape(s.message))
    console.print(table)

    schedule = Table(title="Study Schedule")
    schedule.add_column("Visit", style="cyan")
    schedule.add_column("Window")
    schedule.add_column("Procedures", max_width=60)
    for v in result.study_schedule.visits:
        schedule.add_row(escape(v.name), escape(v.window), escape(", ".join(p.name for p in v.procedures)))
    console.print(schedule)


def _print_validation(documents: FinalDocuments) -> None:
    report = documents.validation
    if report is None:
        return
    if report.is_valid:
        console.print("[green]Cross-validation passed[/green]")
        return
    console.print(f"[yellow]Cross-validation found {len(report.issues)} issue(s):[/yellow]")
    for issue in report.issues:
        console.print(f"  - {escape(issue.severity or 'n/a')}: {escape(issue.description)}")


if __name__ == "__main__":
    app()
