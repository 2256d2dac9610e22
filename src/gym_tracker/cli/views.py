"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of exercises, sets, sessions and plans.
"""

from datetime import datetime
from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.integrity import IntegrityReport
from ..core.metrics import (
    LogChange,
    OverloadTrend,
    average_intensity,
    estimated_one_rep_max,
    exercise_total_volume,
    log_changes,
)
from ..core.models import Exercise, TrainingPlan, TrainingSession, WorkoutLog

console = Console()

_ID_WIDTH = 8


def _sid(entity_id) -> str:
    return str(entity_id)[:_ID_WIDTH]


def format_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M")


def _kg(value: float | None, digits: int = 1) -> str:
    return "-" if value is None else f"{value:.{digits}f} kg"


def _delta(value: float | None, unit: str = "", digits: int = 1) -> str:
    """Signed, coloured change; blank when unchanged or unknown."""
    if value is None or value == 0:
        return ""
    colour = "green" if value > 0 else "red"
    arrow = "↑" if value > 0 else "↓"
    number = f"{abs(value):.{digits}f}" if digits else f"{abs(value):.0f}"
    return f"[{colour}]{arrow}{number}{unit}[/{colour}]"


# =============================================================================
# EXERCISES
# =============================================================================


def format_exercise_table(exercises: Sequence[Exercise], divisor: float) -> Table:
    """
    Build the exercise overview table.

    Args:
        exercises: Exercises to list
        divisor: Epley rep divisor used for the 1RM column
    """
    table = Table(title="Exercises", show_header=True, header_style="bold")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Sets", justify="right")
    table.add_column("Est. 1RM", justify="right", style="bold")
    table.add_column("Volume", justify="right")

    for exercise in exercises:
        table.add_row(
            _sid(exercise.id),
            escape(exercise.name),
            str(len(exercise.logs)),
            _kg(estimated_one_rep_max(exercise, divisor)),
            f"{exercise_total_volume(exercise):.0f} kg",
        )
    return table


def print_exercises(exercises: Sequence[Exercise], divisor: float) -> None:
    if not exercises:
        console.print("[yellow]No exercises yet.[/yellow]")
        return
    console.print(format_exercise_table(exercises, divisor))


def print_overload_trend(trend: OverloadTrend | None) -> None:
    """Print the progressive-overload card."""
    if trend is None:
        console.print("[dim]Progressive overload: not enough data[/dim]")
        return
    colour = "green" if trend.direction == "gain" else "red"
    arrow = "↗" if trend.direction == "gain" else "↘"
    console.print(
        f"Progressive overload: [{colour}]{arrow} {trend.label} "
        f"({abs(trend.score):.1f}% since start)[/{colour}]"
    )


def print_exercise_detail(
    exercise: Exercise,
    trend: OverloadTrend | None,
    divisor: float,
) -> None:
    """
    Print statistics and set history for one exercise.

    History is newest first with the change against the previous set.
    """
    console.print()
    console.print(f"[bold cyan]{escape(exercise.name)}[/bold cyan]  [dim]{exercise.id}[/dim]")
    console.print()
    if exercise.logs:
        print_overload_trend(trend)

    avg = average_intensity(exercise)
    console.print(f"Total volume:   {exercise_total_volume(exercise):.0f} kg")
    console.print(f"Sets logged:    {len(exercise.logs)}")
    console.print(f"Estimated 1RM:  {_kg(estimated_one_rep_max(exercise, divisor))}")
    console.print(f"Avg intensity:  {'-' if avg is None else f'{avg:.0f} kg'}")
    console.print()

    if not exercise.logs:
        console.print("[yellow]No sets logged yet.[/yellow]")
        return
    console.print(format_log_history(log_changes(exercise.logs)))


def format_log_history(changes: Sequence[LogChange]) -> Table:
    table = Table(title="History", show_header=True, header_style="bold")
    table.add_column("ID", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Set", justify="right")
    table.add_column("Volume", justify="right", style="blue")
    table.add_column("Change", justify="right")

    for change in changes:
        log = change.log
        deltas = " ".join(
            part
            for part in (
                _delta(change.weight_delta, " kg"),
                _delta(change.reps_delta, " reps", digits=0),
                _delta(change.volume_delta, " kg vol", digits=0),
            )
            if part
        )
        table.add_row(
            _sid(log.id),
            format_date(log.date),
            f"{log.weight:.1f} kg × {log.reps}",
            f"{log.volume:.0f} kg",
            deltas,
        )
    return table


# =============================================================================
# SESSIONS
# =============================================================================


def format_session_table(
    sessions: Sequence[TrainingSession],
    volumes: dict,
) -> Table:
    """
    Build the session overview table, newest first.

    Args:
        sessions: Sessions to list
        volumes: session id -> total volume
    """
    table = Table(title="Sessions", show_header=True, header_style="bold")
    table.add_column("ID", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Name")
    table.add_column("Exercises", justify="right")
    table.add_column("Volume", justify="right", style="blue")

    for session in sorted(sessions, key=lambda s: s.date, reverse=True):
        table.add_row(
            _sid(session.id),
            format_date(session.date),
            escape(session.name),
            str(len(session.exercise_ids)),
            f"{volumes.get(session.id, 0.0):.0f} kg",
        )
    return table


def print_sessions(sessions: Sequence[TrainingSession], volumes: dict) -> None:
    if not sessions:
        console.print("[yellow]No sessions recorded yet.[/yellow]")
        return
    console.print(format_session_table(sessions, volumes))


def print_session_detail(
    session: TrainingSession,
    exercises: Sequence[Exercise],
    logged: Sequence[tuple[Exercise, WorkoutLog]],
    total_volume: float,
) -> None:
    """
    Print one session with the sets logged against it per exercise.

    Listed exercises come first, then any other exercise with sets in the
    session, so every set counted in the total is shown.

    Args:
        session: Session to show
        exercises: Listed exercises that still exist
        logged: (exercise, log) pairs belonging to the session
        total_volume: Session total volume
    """
    console.print()
    console.print(f"[bold cyan]{escape(session.name)}[/bold cyan]  [dim]{session.id}[/dim]")
    console.print(f"[dim]{format_date(session.date)}[/dim]")
    if session.notes:
        console.print(escape(session.notes))
    console.print(f"Total volume: [bold]{total_volume:.0f} kg[/bold]")
    console.print()

    groups: dict = {exercise.id: (exercise, []) for exercise in exercises}
    for exercise, log in logged:
        groups.setdefault(exercise.id, (exercise, []))[1].append(log)

    for exercise, logs in groups.values():
        name = escape(exercise.name)
        if logs:
            console.print(f"[bold]{name}[/bold]  [dim]{len(logs)} sets[/dim]")
        else:
            console.print(f"[bold]{name}[/bold]  [yellow]no sets yet[/yellow]")
        for log in logs:
            console.print(
                f"    {log.weight:.1f} kg × {log.reps}    [blue]{log.volume:.0f} kg[/blue]"
                f"  [dim]{_sid(log.id)}[/dim]"
            )

    missing = len(session.exercise_ids) - len(exercises)
    if missing > 0:
        print_warning(f"{missing} listed exercise(s) no longer exist.")


# =============================================================================
# PLANS
# =============================================================================


def format_plan_table(plans: Sequence[TrainingPlan]) -> Table:
    table = Table(title="Plans", show_header=True, header_style="bold")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Exercises", justify="right")
    table.add_column("Notes")

    for plan in plans:
        table.add_row(_sid(plan.id), escape(plan.name), str(len(plan.exercise_ids)), escape(plan.notes))
    return table


def print_plans(plans: Sequence[TrainingPlan]) -> None:
    if not plans:
        console.print("[yellow]No plans yet.[/yellow]")
        return
    console.print(format_plan_table(plans))


def print_plan_detail(
    plan: TrainingPlan,
    exercises: Sequence[Exercise],
    divisor: float,
) -> None:
    console.print()
    console.print(f"[bold cyan]{escape(plan.name)}[/bold cyan]  [dim]{plan.id}[/dim]")
    if plan.notes:
        console.print(escape(plan.notes))
    console.print()
    console.print(f"[bold]Exercises ({len(exercises)})[/bold]")
    for exercise in exercises:
        one_rm = estimated_one_rep_max(exercise, divisor)
        suffix = f"  [dim]1RM: {one_rm:.1f} kg[/dim]" if one_rm is not None else ""
        console.print(f"  {escape(exercise.name)}{suffix}")


# =============================================================================
# INTEGRITY
# =============================================================================


def print_integrity_report(report: IntegrityReport) -> None:
    if report.ok:
        print_success("No dangling references.")
        return

    table = Table(title="Dangling references", show_header=True, header_style="bold")
    table.add_column("Owner", style="cyan")
    table.add_column("Owner ID", style="dim")
    table.add_column("Missing")
    table.add_column("Missing ID", style="dim")

    for session_id, missing in report.session_exercise_refs.items():
        for eid in missing:
            table.add_row("session", _sid(session_id), "exercise", _sid(eid))
    for plan_id, missing in report.plan_exercise_refs.items():
        for eid in missing:
            table.add_row("plan", _sid(plan_id), "exercise", _sid(eid))
    for _exercise_id, log_id, session_id in report.orphan_logs:
        table.add_row("log", _sid(log_id), "session", _sid(session_id))

    console.print(table)
    print_warning(f"{report.issue_count} dangling reference(s) found.")


# =============================================================================
# MESSAGES
# =============================================================================


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{escape(message)}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {escape(message)}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {escape(message)}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{escape(message)}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(escape(f"{message} [y/N]: "))
    return response.lower() in ("y", "yes")
