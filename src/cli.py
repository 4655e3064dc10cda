"""
ATS Assist Command Line Interface

Provides CLI commands for talking to the recruitment AI assistant,
parsing its replies and rendering comparison reports.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

app = typer.Typer(
    name="ats-assist",
    help="Recruitment AI assistant toolkit",
    add_completion=False,
)
sessions_app = typer.Typer(help="Manage stored assistant conversations")
app.add_typer(sessions_app, name="sessions")

console = Console()

CHAT_MODES = ("job-editor", "candidate", "comparison")


def _read_text(path: Optional[Path]) -> str:
    """Read a file, or stdin when no path is given."""
    if path is None:
        return sys.stdin.read()
    if not path.exists():
        console.print(f"[red]Error: File not found: {path}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _report_validation_error(error: ValidationError, what: str) -> None:
    console.print(f"[red]Invalid {what}:[/red]")
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "(root)"
        console.print(f"  [cyan]{location}[/cyan]: {item['msg']}")


def _load_model(path: Path, model, what: str):
    try:
        return model.model_validate_json(_read_text(path))
    except ValidationError as e:
        _report_validation_error(e, what)
        raise typer.Exit(1)


def _print_blocks(result) -> None:
    if not result.blocks:
        return
    table = Table(title="Insertable Suggestions", show_lines=True)
    table.add_column("Field", style="cyan")
    table.add_column("Content")
    table.add_column("Recovered", justify="center")
    for block in result.blocks:
        if block.items is not None:
            body = "\n".join(f"• {escape(item)}" for item in block.items)
        elif isinstance(block.structured_data, list):
            body = "\n".join(
                f"{i}. {escape(getattr(q, 'title', None) or getattr(q, 'text', ''))}"
                for i, q in enumerate(block.structured_data, 1)
            ) or "[dim](no valid entries)[/dim]"
        else:
            body = escape(block.content)
        table.add_row(block.field.value, body, "[yellow]yes[/yellow]" if block.recovered else "")
    console.print(table)


def _print_progress(context) -> None:
    from src.assistant.suggestions import workflow_progress

    steps = workflow_progress(context)
    done = len([s for s in steps if s.done])
    table = Table(title=f"Job Creation Progress ({done}/{len(steps)})")
    table.add_column("", width=2)
    table.add_column("Step", style="cyan")
    table.add_column("Value")
    for step in steps:
        table.add_row(
            "[green]✓[/green]" if step.done else "[dim]○[/dim]",
            step.label,
            escape(step.value or ""),
        )
    console.print(table)


@app.command()
def version():
    """Show application version."""
    from src.utils.constants import APP_DISPLAY_NAME, VERSION

    console.print(f"[bold blue]{APP_DISPLAY_NAME}[/bold blue] version [green]{VERSION}[/green]")


@app.command()
def info():
    """Show configuration."""
    from src.utils.config import get_settings

    settings = get_settings()

    table = Table(title="ATS Assist Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Assistant Endpoint", settings.backend.assistant_endpoint)
    table.add_row("Authenticated", "yes" if settings.backend.bearer_token else "no")
    table.add_row("Request Timeout", f"{settings.backend.timeout:g}s")
    table.add_row("History Limit", str(settings.assistant.history_limit))
    table.add_row("Session Directory", str(settings.assistant.session_directory))
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def parse(
    path: Optional[Path] = typer.Argument(None, help="File with an assistant reply (stdin if omitted)"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """Extract insertable blocks from an assistant reply."""
    from src.assistant.parsing import parse_insertable_blocks

    result = parse_insertable_blocks(_read_text(path))

    if as_json:
        console.print_json(
            json.dumps(
                {
                    "cleanText": result.clean_text,
                    "blocks": [b.to_dict() for b in result.blocks],
                    "warnings": result.warnings,
                }
            )
        )
        return

    if result.clean_text:
        console.print(Panel(Text(result.clean_text), title="Reply", expand=False))
    _print_blocks(result)
    if not result.blocks:
        console.print("[dim]No insertable blocks found.[/dim]")
    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")


@app.command()
def progress(
    context_file: Path = typer.Argument(..., help="Job editor form state as JSON"),
):
    """Show job creation progress and suggested questions."""
    from src.assistant.suggestions import job_editor_suggestions
    from src.data.models import JobEditorContext

    context = _load_model(context_file, JobEditorContext, "job editor context")
    _print_progress(context)

    console.print("\n[bold]Suggested questions:[/bold]")
    for question in job_editor_suggestions(context):
        console.print(f"  • {escape(question)}")


@app.command()
def chat(
    mode: str = typer.Option("job-editor", "--mode", "-m", help=f"One of: {', '.join(CHAT_MODES)}"),
    context_file: Optional[Path] = typer.Option(
        None, "--context", "-c", help="Context JSON for the selected mode"
    ),
    session: Optional[str] = typer.Option(None, "--session", "-s", help="Override the session key"),
):
    """
    Chat with the AI assistant.

    Type /retry to resend a failed question, /clear to start over and
    /quit to leave.
    """
    from src.assistant import AssistantConversation
    from src.assistant.suggestions import (
        candidate_suggestions,
        job_editor_suggestions,
        merge_pinned,
    )
    from src.data.models import CandidateContext, ComparisonContext, JobEditorContext

    if mode not in CHAT_MODES:
        console.print(f"[red]Error: Unknown mode '{mode}'. Use one of: {', '.join(CHAT_MODES)}[/red]")
        raise typer.Exit(1)

    context = None
    if mode == "job-editor":
        context = (
            _load_model(context_file, JobEditorContext, "job editor context")
            if context_file
            else JobEditorContext()
        )
    elif context_file is None:
        console.print(f"[red]Error: --context is required in {mode} mode[/red]")
        raise typer.Exit(1)
    elif mode == "candidate":
        context = _load_model(context_file, CandidateContext, "candidate context")
    else:
        context = _load_model(context_file, ComparisonContext, "comparison context")

    conversation = AssistantConversation(context=context, session_key=session)
    console.print(f"[dim]Session: {conversation.session_key}[/dim]")

    for message in conversation.messages:
        style = "cyan" if not message.is_assistant else "green"
        console.print(f"[{style}]{message.role}>[/{style}] ", end="")
        console.print(message.content, markup=False)

    if not conversation.messages:
        if isinstance(context, JobEditorContext):
            _print_progress(context)
            suggested = job_editor_suggestions(context)
            pinned, suggested = merge_pinned(conversation.pinned_questions, suggested)
        elif isinstance(context, CandidateContext):
            suggested = candidate_suggestions(context.name, context.disc_profile)
            pinned, suggested = merge_pinned(
                conversation.pinned_questions, suggested, candidate_name=context.name
            )
        else:
            pinned, suggested = conversation.pinned_questions, []
        for question in pinned:
            console.print(f"  [magenta]📌 {escape(question)}[/magenta]")
        for question in suggested:
            console.print(f"  [dim]• {escape(question)}[/dim]")

    def stream(chunk: str) -> None:
        console.print(chunk, end="", markup=False, highlight=False)

    while True:
        try:
            question = console.input("\n[bold cyan]you>[/bold cyan] ").strip()
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        if not question:
            continue
        if question == "/quit":
            break
        if question == "/clear":
            conversation.clear()
            console.print("[dim]Conversation cleared.[/dim]")
            continue

        console.print("[bold green]assistant>[/bold green] ", end="")
        if question == "/retry":
            reply = conversation.retry_last(on_chunk=stream)
            if reply is None:
                console.print("[dim]Nothing to retry.[/dim]")
                continue
        else:
            reply = conversation.send(question, on_chunk=stream)
        console.print()

        if reply is None:
            continue
        if conversation.has_error:
            console.print(
                Panel(Text(conversation.error or ""), title=conversation.error_title, border_style="red", expand=False)
            )
            console.print("[dim]Type /retry to send it again.[/dim]")
            continue

        if isinstance(context, JobEditorContext):
            _print_blocks(conversation.insertable_blocks(reply))
        for suggestion in conversation.follow_up_suggestions:
            console.print(f"  [dim]→ {escape(suggestion)}[/dim]")


@app.command("compare-report")
def compare_report(
    path: Path = typer.Argument(..., help="Comparison result JSON"),
):
    """Render a candidate comparison as a report."""
    from src.data.models import ComparisonResult
    from src.utils.constants import ScoreLevel

    result = _load_model(path, ComparisonResult, "comparison result")

    if result.executive_summary:
        console.print(Panel(Text(result.executive_summary), title="Executive Summary", expand=False))

    rankings = Table(title="Rankings")
    rankings.add_column("#", justify="right")
    rankings.add_column("Candidate", style="cyan")
    rankings.add_column("Score", justify="right")
    rankings.add_column("Key Differentiator")
    for ranking in result.ordered_rankings:
        level = ScoreLevel.from_score(ranking.score)
        rankings.add_row(
            str(ranking.rank),
            escape(ranking.candidate_name),
            f"[{level.color}]{ranking.score:.0f}[/{level.color}]",
            escape(ranking.key_differentiator),
        )
    console.print(rankings)

    recommendation = result.recommendation
    body = f"[bold]{escape(recommendation.top_choice)}[/bold] (confidence: {recommendation.confidence})"
    if recommendation.justification:
        body += f"\n{escape(recommendation.justification)}"
    if recommendation.has_alternative:
        body += f"\n\n[dim]Alternative:[/dim] {escape(recommendation.alternative)}"
        if recommendation.alternative_justification:
            body += f"\n{escape(recommendation.alternative_justification)}"
    console.print(Panel(body, title="Recommendation", border_style="green", expand=False))

    if result.risks:
        console.print("\n[bold]Risks:[/bold]")
        for entry in result.risks:
            for risk in entry.risks:
                console.print(f"  [yellow]![/yellow] {escape(entry.candidate_name)}: {escape(risk)}")

    if result.interview_performance:
        interviews = Table(title="Interview Performance")
        interviews.add_column("Candidate", style="cyan")
        interviews.add_column("Interview Score", justify="right")
        interviews.add_column("Trajectory")
        for performance in result.interview_performance:
            if performance.has_interview:
                level = ScoreLevel.from_score(performance.interview_score)
                score = f"[{level.color}]{performance.interview_score:.0f}[/{level.color}]"
            else:
                score = "[dim]not interviewed[/dim]"
            trajectory = ""
            if performance.score_trajectory is not None:
                t = performance.score_trajectory
                trajectory = f"{t.initial_score:.0f} → {t.final_score:.0f} ({t.change:+.0f})"
            interviews.add_row(escape(performance.candidate_name), score, trajectory)
        console.print(interviews)


@sessions_app.command("list")
def sessions_list():
    """List stored conversations."""
    from src.assistant import SessionStore

    store = SessionStore()
    keys = store.keys()
    if not keys:
        console.print("[dim]No stored conversations.[/dim]")
        return

    table = Table(title="Stored Conversations")
    table.add_column("Session", style="cyan")
    table.add_column("Messages", justify="right")
    table.add_column("Pinned", justify="right")
    for key in keys:
        table.add_row(key, str(len(store.load(key))), str(len(store.load_pinned(key))))
    console.print(table)


@sessions_app.command("show")
def sessions_show(key: str = typer.Argument(..., help="Session key")):
    """Print a stored conversation as JSON."""
    from src.assistant import SessionStore

    console.print_json(SessionStore().export(key))


@sessions_app.command("clear")
def sessions_clear(
    key: Optional[str] = typer.Argument(None, help="Session key (all sessions if omitted)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete stored conversations."""
    from src.assistant import SessionStore

    store = SessionStore()
    target = f"session '{key}'" if key else "ALL stored sessions"
    if not yes and not typer.confirm(f"Delete {target}?"):
        console.print("[dim]Cancelled.[/dim]")
        raise typer.Exit(0)

    if key:
        store.clear(key)
        store.save_pinned(key, [])
        console.print(f"[green]✓[/green] Cleared {target}")
    else:
        removed = store.clear_all()
        console.print(f"[green]✓[/green] Removed {removed} file(s)")


if __name__ == "__main__":
    app()
