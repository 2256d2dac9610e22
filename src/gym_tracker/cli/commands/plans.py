"""Plan commands: add-plan, edit-plan, delete-plan, list-plans, show-plan, start-session."""

from typing import Annotated, Optional

import typer

from ...core.config_loader import epley_divisor, load_settings
from .. import views
from ..app import DataDirOption, app, get_store, resolve, resolve_many

ExercisesOption = Annotated[
    Optional[list[str]],
    typer.Option("--exercise", "-e", help="Exercise id or id prefix (repeatable)"),
]


@app.command("add-plan")
def add_plan(
    name: Annotated[str, typer.Argument(help="Plan name, e.g. 'Upper/Lower A'")],
    exercise_refs: ExercisesOption = None,
    notes: Annotated[str, typer.Option("--notes", "-n", help="Description")] = "",
    data_dir: DataDirOption = None,
) -> None:
    """
    Create a reusable training plan.
    """
    name = name.strip()
    if not name:
        views.print_error("Plan name must not be empty")
        raise typer.Exit(1)

    store = get_store(data_dir)
    exercise_ids = resolve_many(store.exercises, exercise_refs or [], "exercise")
    plan = store.add_plan(name, exercise_ids, notes)
    views.print_success(f"Added plan '{plan.name}' with {len(exercise_ids)} exercise(s)")


@app.command("edit-plan")
def edit_plan(
    plan_ref: Annotated[str, typer.Argument(metavar="PLAN", help="Plan id or id prefix")],
    name: Annotated[
        Optional[str],
        typer.Option("--name", help="New name (default: unchanged)"),
    ] = None,
    exercise_refs: ExercisesOption = None,
    notes: Annotated[
        Optional[str],
        typer.Option("--notes", "-n", help="New description (default: unchanged)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Edit a plan's name, exercises or description.

    --exercise replaces the whole exercise list.
    """
    store = get_store(data_dir)
    plan = resolve(store.plans, plan_ref, "plan")
    exercise_ids = (
        resolve_many(store.exercises, exercise_refs, "exercise")
        if exercise_refs
        else plan.exercise_ids
    )
    store.update_plan(
        plan.id,
        name if name is not None else plan.name,
        exercise_ids,
        notes if notes is not None else plan.notes,
    )
    views.print_success(f"Updated plan '{plan.name}'")


@app.command("delete-plan")
def delete_plan(
    plan_ref: Annotated[str, typer.Argument(metavar="PLAN", help="Plan id or id prefix")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete a plan.  Sessions started from it are kept.
    """
    store = get_store(data_dir)
    plan = resolve(store.plans, plan_ref, "plan")
    if not force and not views.confirm_action(f"Delete plan '{plan.name}'?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)
    store.delete_plan(plan.id)
    views.print_success(f"Deleted plan '{plan.name}'")


@app.command("list-plans")
def list_plans(
    data_dir: DataDirOption = None,
) -> None:
    """
    List all training plans.
    """
    store = get_store(data_dir)
    views.print_plans(store.plans)


@app.command("show-plan")
def show_plan(
    plan_ref: Annotated[str, typer.Argument(metavar="PLAN", help="Plan id or id prefix")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Show a plan and the current 1RM estimate of each exercise.
    """
    store = get_store(data_dir)
    plan = resolve(store.plans, plan_ref, "plan")
    views.print_plan_detail(plan, store.plan_exercises(plan.id), epley_divisor(load_settings()))


@app.command("start-session")
def start_session(
    plan_ref: Annotated[str, typer.Argument(metavar="PLAN", help="Plan id or id prefix")],
    name: Annotated[
        Optional[str],
        typer.Option("--name", help="Session name (default: the plan name)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Start a new session from a plan's exercises.
    """
    store = get_store(data_dir)
    plan = resolve(store.plans, plan_ref, "plan")
    session = store.start_session_from_plan(plan.id, name)
    if session is None:
        views.print_error(f"Plan '{plan.name}' disappeared")
        raise typer.Exit(1)
    views.print_success(f"Started session '{session.name}' ({session.id})")
