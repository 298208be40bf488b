"""
Insight CLI - inspect engine decisions from JSON snapshots.

The engine itself does no I/O; this command reads the snapshots a
collaborator exported (badge contexts, recommendation lists) and prints
what the engine decides about them.

Usage:
    insight badges contexts.json                  # Badge suggestions
    insight badges contexts.json --now 2025-03-01 # Against a fixed clock
    insight attention recs.json -s students.json  # Who needs attention
    insight dashboard recs.json -a assignments.json
    insight explain recs.json rec-42              # One recommendation
    insight clear recs.json rec-42                # Students to clear after acting
"""

from __future__ import annotations

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from insight_engine.attention import (
    format_signals,
    get_attention_reason,
    get_dashboard_attention_state,
    get_students_needing_attention,
    get_students_to_remove_from_attention,
    is_attention_now_recommendation,
)
from insight_engine.badges import (
    evaluate_class_badges,
    format_evidence,
    get_badge_display_name,
)
from insight_engine.config import get_settings
from insight_engine.core.models import (
    AssignmentInfo,
    Recommendation,
    StudentBadgeContext,
    SuggestionPriority,
    as_utc,
)

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="insight",
    help="Insight CLI - explainable badge and attention decisions",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

PRIORITY_COLORS = {
    SuggestionPriority.HIGH: "green",
    SuggestionPriority.MEDIUM: "yellow",
    SuggestionPriority.LOW: "dim",
}


class InputError(Exception):
    """Snapshot file could not be read or validated."""


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format="{level: <8} | {message}")
    logger.enable("insight_engine")


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log rule decisions to stderr")
    ] = False,
) -> None:
    """Insight CLI - explainable badge and attention decisions."""
    try:
        settings = get_settings()
    except ValidationError as e:
        console.print(f"[red]Error:[/] Invalid INSIGHT_* settings:\n{escape(str(e))}")
        raise typer.Exit(1) from e
    _configure_logging("DEBUG" if verbose else settings.log_level)


# =============================================================================
# Input Loading
# =============================================================================


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise InputError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InputError(f"{path} is not valid JSON: {e}") from e


def _as_list(data: Any, key: str) -> list[Any]:
    """Accept a bare list, a single object, or {key: [...]}."""
    if isinstance(data, dict) and key in data:
        data = data[key]
    return data if isinstance(data, list) else [data]


def _load_contexts(path: Path) -> list[StudentBadgeContext]:
    items = _as_list(_read_json(path), "contexts")
    try:
        return [StudentBadgeContext.model_validate(item) for item in items]
    except ValidationError as e:
        raise InputError(f"Invalid badge context in {path}:\n{e}") from e


def _load_recommendations(path: Path) -> list[Recommendation]:
    items = _as_list(_read_json(path), "recommendations")
    try:
        return [Recommendation.model_validate(item) for item in items]
    except ValidationError as e:
        raise InputError(f"Invalid recommendation in {path}:\n{e}") from e


def _load_students(path: Path | None) -> dict[str, str]:
    """Student lookup from {id: name} or [{id, name}, ...]."""
    if path is None:
        return {}
    data = _read_json(path)
    if isinstance(data, dict):
        return {str(k): str(v) for k, v in data.items()}
    try:
        return {str(item["id"]): str(item.get("name", "")) for item in data}
    except (KeyError, TypeError, AttributeError) as e:
        raise InputError(f"{path} must map student ids to names") from e


def _load_assignments(path: Path) -> list[AssignmentInfo]:
    items = _as_list(_read_json(path), "assignments")
    try:
        return [AssignmentInfo.model_validate(item) for item in items]
    except ValidationError as e:
        raise InputError(f"Invalid assignment in {path}:\n{e}") from e


def _parse_now(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return as_utc(datetime.fromisoformat(value))
    except ValueError as e:
        raise InputError(f"--now must be an ISO timestamp, got {value!r}") from e


def _fail(error: InputError) -> typer.Exit:
    console.print(f"[red]Error:[/] {escape(str(error))}")
    return typer.Exit(1)


def _emit_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


# =============================================================================
# Badge Commands
# =============================================================================


@app.command()
def badges(
    context_file: Annotated[Path, typer.Argument(help="JSON badge context(s)")],
    now: Annotated[
        str | None, typer.Option("--now", help="Evaluate as of this ISO timestamp")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON instead of a table")] = False,
) -> None:
    """
    Suggest badges for one or more students.

    Examples:
        insight badges context.json
        insight badges class.json --now 2025-03-01T12:00:00 --json
    """
    try:
        contexts = _load_contexts(context_file)
        suggestions = evaluate_class_badges(
            contexts, now=_parse_now(now), criteria=get_settings().badges
        )
    except InputError as e:
        raise _fail(e) from e

    if as_json:
        _emit_json([s.to_dict() for s in suggestions])
        return

    if not suggestions:
        console.print("[dim]No badge suggestions.[/]")
        return

    table = Table(title=f"Badge Suggestions ({len(suggestions)})")
    table.add_column("Student", style="cyan")
    table.add_column("Badge")
    table.add_column("Reason")
    table.add_column("Evidence", style="dim")
    table.add_column("Priority")

    for s in suggestions:
        color = PRIORITY_COLORS[s.priority]
        table.add_row(
            s.student_name or s.student_id,
            get_badge_display_name(s.badge_type),
            s.reason,
            "\n".join(format_evidence(s.evidence)),
            f"[{color}]{s.priority.value}[/]",
        )
    console.print(table)


# =============================================================================
# Attention Commands
# =============================================================================


@app.command()
def attention(
    recommendations_file: Annotated[Path, typer.Argument(help="JSON recommendation list")],
    students: Annotated[
        Path | None, typer.Option("--students", "-s", help="JSON student id -> name map")
    ] = None,
    assignment: Annotated[
        str | None, typer.Option("--assignment", help="Only this assignment")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON instead of a table")] = False,
) -> None:
    """List students who need a teacher's attention now."""
    try:
        recs = _load_recommendations(recommendations_file)
        student_map = _load_students(students)
    except InputError as e:
        raise _fail(e) from e

    statuses = get_students_needing_attention(
        recs, student_map, assignment_id=assignment, thresholds=get_settings().attention
    )

    if as_json:
        _emit_json([s.to_dict() for s in statuses])
        return

    if not statuses:
        console.print("[green]No students need attention.[/]")
        return

    table = Table(title=f"Needs Attention ({len(statuses)})")
    table.add_column("Student", style="cyan")
    table.add_column("Reason")
    table.add_column("Assignment", style="dim")
    table.add_column("Active", justify="right")

    for status in statuses:
        table.add_row(
            status.student_name,
            status.attention_reason or "",
            status.assignment_title or status.assignment_id,
            str(len(status.active_recommendation_ids)),
        )
    console.print(table)


@app.command()
def dashboard(
    recommendations_file: Annotated[Path, typer.Argument(help="JSON recommendation list")],
    assignments: Annotated[
        Path, typer.Option("--assignments", "-a", help="JSON assignment list")
    ],
    students: Annotated[
        Path | None, typer.Option("--students", "-s", help="JSON student id -> name map")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON instead of tables")] = False,
) -> None:
    """Dashboard-wide attention state with per-assignment summaries."""
    try:
        recs = _load_recommendations(recommendations_file)
        assignment_info = _load_assignments(assignments)
        student_map = _load_students(students)
    except InputError as e:
        raise _fail(e) from e

    state = get_dashboard_attention_state(
        recs, student_map, assignment_info, get_settings().attention
    )

    if as_json:
        _emit_json(state.to_dict())
        return

    console.print(
        Panel(
            f"[bold]{state.total_needing_attention}[/] student(s) need attention\n"
            f"[bold]{state.pending_count}[/] recommendation(s) awaiting students",
            title="Attention",
            border_style="cyan",
        )
    )

    table = Table(title="Assignments")
    table.add_column("Assignment", style="cyan")
    table.add_column("Students", justify="right")
    table.add_column("Needs attention", justify="right", style="red")
    table.add_column("Pending", justify="right", style="yellow")
    table.add_column("Resolved", justify="right", style="green")

    for summary in state.assignment_summaries:
        table.add_row(
            summary.assignment_title or summary.assignment_id,
            str(summary.total_students),
            str(summary.needing_attention_count),
            str(summary.pending_count),
            str(summary.resolved_count),
        )
    console.print(table)


@app.command()
def explain(
    recommendations_file: Annotated[Path, typer.Argument(help="JSON recommendation list")],
    recommendation_id: Annotated[str, typer.Argument(help="Recommendation to explain")],
) -> None:
    """Show how one recommendation is classified and why."""
    try:
        recs = _load_recommendations(recommendations_file)
    except InputError as e:
        raise _fail(e) from e

    rec = next((r for r in recs if r.id == recommendation_id), None)
    if rec is None:
        raise _fail(InputError(f"No recommendation with id {recommendation_id!r}"))

    thresholds = get_settings().attention
    if is_attention_now_recommendation(rec, thresholds):
        verdict = "[red]attention now[/]"
    else:
        verdict = "[green]no action now[/]"
    lines = [
        f"Status: {rec.status.value}",
        f"Insight: {rec.insight_type.value if rec.insight_type else '-'}",
        f"Rule: {rec.rule_name or '-'}",
        f"Classification: {verdict}",
        f"Reason: {get_attention_reason(rec, thresholds)}",
    ]
    lines.extend(f"  {line}" for line in format_signals(rec.signals))
    console.print(Panel("\n".join(lines), title=rec.id, border_style="cyan"))


@app.command()
def clear(
    recommendations_file: Annotated[Path, typer.Argument(help="JSON recommendation list")],
    recommendation_id: Annotated[str, typer.Argument(help="Recommendation just acted on")],
) -> None:
    """Print students to clear from "needs attention" after acting on a recommendation."""
    try:
        recs = _load_recommendations(recommendations_file)
    except InputError as e:
        raise _fail(e) from e

    acted = next((r for r in recs if r.id == recommendation_id), None)
    if acted is None:
        raise _fail(InputError(f"No recommendation with id {recommendation_id!r}"))

    for student_id in get_students_to_remove_from_attention(recs, acted):
        typer.echo(student_id)


def run() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()
