"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ats_optimizer.clients.llm_client import LLMClient
from ats_optimizer.config import AppConfig, load_config
from ats_optimizer.errors import ATSOptimizerError
from ats_optimizer.export import EXPORT_FORMATS
from ats_optimizer.models.analysis import AnalysisResult
from ats_optimizer.models.session import SessionState
from ats_optimizer.pipeline.orchestrator import ResumeWorkflow
from ats_optimizer.pipeline.section_rewriter import REWRITE_MODES
from ats_optimizer.storage.session_store import SessionStore

app = typer.Typer(
    name="ats-optimizer",
    help="ATS resume analysis, rewriting and export",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _workflow(config: AppConfig) -> ResumeWorkflow:
    llm = LLMClient.from_config(config.llm)
    return ResumeWorkflow(
        llm,
        model=config.llm.model,
        analysis_temperature=config.llm.analysis_temperature,
        rewrite_temperature=config.llm.rewrite_temperature,
        match_temperature=config.llm.match_temperature,
    )


def _store(config: AppConfig) -> SessionStore:
    return SessionStore(db_path=config.session.resolved_db_path)


def _run(coro, description: str):
    """Run a coroutine behind a spinner; domain errors end the command."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(description, total=None)
        try:
            return asyncio.run(coro)
        except ATSOptimizerError as exc:
            console.print(f"[red]{exc.message}[/red]")
            raise typer.Exit(1)


def _require_sections(state: SessionState) -> None:
    if not state.sections:
        console.print("[red]No analyzed resume in the session. Run `ats-optimizer analyze` first.[/red]")
        raise typer.Exit(1)


def _export_formats(fmt: str) -> tuple[str, ...]:
    formats = EXPORT_FORMATS if fmt == "all" else (fmt,)
    if any(f not in EXPORT_FORMATS for f in formats):
        console.print(f"[red]Unknown format {fmt!r}[/red]")
        raise typer.Exit(1)
    return formats


def _print_analysis(analysis: AnalysisResult) -> None:
    score = analysis.overall_score
    color = "red" if score < 35 else "green" if score >= 75 else "yellow"
    ratio = analysis.metrics.metric_ratio * 100
    console.print(
        Panel(
            f"Role: {escape(analysis.detected_role)}\n"
            f"[bold {color}]ATS score: {score}/100[/bold {color}]\n"
            f"Quantified bullets: {ratio:.0f}% "
            f"({analysis.metrics.bullets_with_metrics}/{analysis.metrics.total_bullet_points})",
            title="ATS Compliance",
        )
    )

    table = Table(title="Score breakdown")
    table.add_column("Term")
    table.add_column("Points", justify="right")
    for name, value in analysis.score_breakdown.as_dict().items():
        sign = "-" if name.endswith("_penalty") and value else ""
        table.add_row(name.replace("_", " "), f"{sign}{value:.1f}")
    console.print(table)

    for label, items, style in (
        ("Hard skills found", analysis.hard_skills_found, "green"),
        ("Missing hard skills", analysis.missing_hard_skills, "yellow"),
        ("Formatting issues", analysis.formatting_issues, "yellow"),
        ("Critical errors", analysis.critical_errors, "red"),
    ):
        if items:
            console.print(f"\n[{style}]{label}:[/{style}]")
            for item in items:
                console.print(f"  - {escape(item)}")
    if analysis.summary_feedback:
        console.print(f"\n{escape(analysis.summary_feedback)}")


@app.command()
def analyze(
    resume: Path = typer.Argument(help="Resume file (PDF/DOCX/TXT)"),
) -> None:
    """Analyze a resume and start a new session."""
    if not resume.exists():
        console.print(f"[red]Resume file not found: {resume}[/red]")
        raise typer.Exit(1)

    config = load_config()
    store = _store(config)
    workflow = _workflow(config)
    state = _run(workflow.analyze_file(SessionState(), resume), "Analyzing resume...")
    store.save(state)
    _print_analysis(state.analysis)


@app.command()
def score(
    analysis_json: Path = typer.Argument(help="Saved analysis JSON payload"),
) -> None:
    """Score a saved analysis payload offline."""
    try:
        analysis = AnalysisResult.model_validate_json(analysis_json.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        console.print(f"[red]Cannot read analysis: {exc}[/red]")
        raise typer.Exit(1)
    _print_analysis(analysis)


@app.command()
def rewrite(
    mode: str = typer.Option("ats_optimized", "--mode", "-m", help="professional | ats_optimized"),
    section: str = typer.Option(None, "--section", "-s", help="Rewrite only this section id"),
) -> None:
    """Rewrite all sections (or one) with the AI rewrite engine."""
    if mode not in REWRITE_MODES:
        console.print(f"[red]Unknown mode {mode!r}; choose {', '.join(REWRITE_MODES)}[/red]")
        raise typer.Exit(1)

    config = load_config()
    store = _store(config)
    state = store.load()
    _require_sections(state)
    workflow = _workflow(config)

    if section:
        new_state = _run(workflow.rewrite_section(state, section, mode), f"Rewriting {section}...")
    else:
        new_state = _run(workflow.rewrite_all(state, mode), "Rewriting all sections...")
    store.save(new_state)

    changed = sum(
        1 for old, new in zip(state.sections, new_state.sections) if old.content != new.content
    )
    console.print(f"[green]Rewrote {changed}/{len(new_state.sections)} sections ({mode})[/green]")


@app.command()
def match(
    jd: Path = typer.Option(..., "--jd", help="Job description file (TXT/PDF/DOCX)"),
    apply: bool = typer.Option(False, "--apply", help="Replace sections with the tailored rewrite"),
    export_fmt: str = typer.Option(
        None, "--export", help="Also save the tailored sections: txt | pdf | docx | all"
    ),
    output_dir: Path = typer.Option(None, "--output-dir", "-o", help="Output directory for --export"),
) -> None:
    """Match the resume against a job description."""
    if not jd.exists():
        console.print(f"[red]Job description file not found: {jd}[/red]")
        raise typer.Exit(1)
    formats = _export_formats(export_fmt) if export_fmt else ()

    config = load_config()
    store = _store(config)
    state = store.load()
    _require_sections(state)
    workflow = _workflow(config)

    jd_text = _run(workflow.read_job_description(jd), "Reading job description...")
    result = _run(workflow.match_job(state, jd_text), "Matching job description...")
    console.print(
        Panel(
            f"[bold]Job match: {result.match_percentage}%[/bold]\n{escape(result.match_feedback)}",
            title="Job Match",
        )
    )
    console.print(f"[green]Matching:[/green] {escape(', '.join(result.matching_keywords)) or '-'}")
    console.print(f"[yellow]Missing:[/yellow] {escape(', '.join(result.missing_keywords)) or '-'}")

    target = output_dir or Path(config.export.output_dir)
    for f in formats:
        try:
            path = ResumeWorkflow.export_tailored(result, f, target, config.export.basename)
        except ATSOptimizerError as exc:
            console.print(f"[red]{exc.message}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]Saved tailored resume: {path}[/green]")

    if apply:
        store.save(workflow.apply_tailoring(state, result))
        console.print("[green]Tailored sections applied.[/green]")


@app.command()
def export(
    fmt: str = typer.Option("all", "--format", "-f", help="txt | pdf | docx | all"),
    output_dir: Path = typer.Option(None, "--output-dir", "-o", help="Output directory"),
) -> None:
    """Export the current sections."""
    formats = _export_formats(fmt)

    config = load_config()
    state = _store(config).load()
    _require_sections(state)
    target = output_dir or Path(config.export.output_dir)
    for f in formats:
        path = ResumeWorkflow.export(state, f, target, config.export.basename)
        console.print(f"[green]Saved: {path}[/green]")


@app.command()
def status() -> None:
    """Show the saved session."""
    state = _store(load_config()).load()
    console.print(f"Step: {state.step.value}")
    if state.analysis is not None:
        console.print(f"Score: {state.analysis.overall_score}/100")
    for section in state.sections:
        marker = " (rewritten)" if section.has_original else ""
        console.print(f"  {section.id}  {section.title}{marker}", markup=False, highlight=False)


@app.command("dump-analysis")
def dump_analysis(
    output: Path = typer.Argument(help="Where to write the analysis JSON"),
) -> None:
    """Write the session's analysis as JSON (input for `score`)."""
    state = _store(load_config()).load()
    if state.analysis is None:
        console.print("[red]No analysis in the session.[/red]")
        raise typer.Exit(1)
    output.write_text(
        json.dumps(state.analysis.model_dump(), ensure_ascii=False, indent=2), encoding="utf-8"
    )
    console.print(f"[green]Saved: {output}[/green]")


@app.command()
def reset() -> None:
    """Discard the saved session."""
    removed = _store(load_config()).clear()
    console.print(f"[green]Session cleared ({removed} keys).[/green]")


if __name__ == "__main__":
    app()
