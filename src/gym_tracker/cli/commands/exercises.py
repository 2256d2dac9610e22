"""Exercise and set commands: add/rename/delete/list/show exercises, log/edit/delete sets."""

from typing import Annotated, Optional

import typer

from ...core.config_loader import epley_divisor, load_settings, overload_thresholds
from ...core.metrics import classify_overload, progressive_overload_score
from .. import views
from ..app import DataDirOption, app, get_store, resolve, validate_set_values


@app.command("add-exercise")
def add_exercise(
    name: Annotated[str, typer.Argument(help="Exercise name, e.g. 'Bench Press'")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Add a new exercise.
    """
    name = name.strip()
    if not name:
        views.print_error("Exercise name must not be empty")
        raise typer.Exit(1)

    store = get_store(data_dir)
    exercise = store.add_exercise(name)
    views.print_success(f"Added exercise '{exercise.name}' ({exercise.id})")


@app.command("rename-exercise")
def rename_exercise(
    exercise_ref: Annotated[str, typer.Argument(metavar="EXERCISE", help="Exercise id or id prefix")],
    name: Annotated[str, typer.Argument(help="New name")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Rename an exercise.
    """
    name = name.strip()
    if not name:
        views.print_error("Exercise name must not be empty")
        raise typer.Exit(1)

    store = get_store(data_dir)
    exercise = resolve(store.exercises, exercise_ref, "exercise")
    old_name = exercise.name
    store.update_exercise(exercise.id, name)
    views.print_success(f"Renamed '{old_name}' to '{name}'")


@app.command("delete-exercise")
def delete_exercise(
    exercise_ref: Annotated[str, typer.Argument(metavar="EXERCISE", help="Exercise id or id prefix")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete an exercise and all of its sets.

    Sessions and plans that list the exercise keep its id; run
    check-integrity to find them.
    """
    store = get_store(data_dir)
    exercise = resolve(store.exercises, exercise_ref, "exercise")

    views.console.print(
        f"Exercise to delete: [bold]{exercise.name}[/bold] ({len(exercise.logs)} sets)"
    )
    if not force and not views.confirm_action("Delete this exercise?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.delete_exercise(exercise.id)
    views.print_success(f"Deleted exercise '{exercise.name}'")


@app.command("list-exercises")
def list_exercises(
    data_dir: DataDirOption = None,
) -> None:
    """
    List all exercises with their estimated 1RM and total volume.
    """
    store = get_store(data_dir)
    views.print_exercises(store.exercises, epley_divisor(load_settings()))


@app.command("show-exercise")
def show_exercise(
    exercise_ref: Annotated[str, typer.Argument(metavar="EXERCISE", help="Exercise id or id prefix")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Show statistics, overload trend and set history for an exercise.
    """
    cfg = load_settings()
    store = get_store(data_dir)
    exercise = resolve(store.exercises, exercise_ref, "exercise")
    trend = classify_overload(progressive_overload_score(exercise), overload_thresholds(cfg))
    views.print_exercise_detail(exercise, trend, epley_divisor(cfg))


@app.command("log-set")
def log_set(
    exercise_ref: Annotated[str, typer.Argument(metavar="EXERCISE", help="Exercise id or id prefix")],
    weight: Annotated[float, typer.Option("--weight", "-w", help="Weight in kg")],
    reps: Annotated[int, typer.Option("--reps", "-r", help="Repetitions")],
    session_ref: Annotated[
        Optional[str],
        typer.Option("--session", "-s", help="Session id or id prefix to log the set against"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Log a set for an exercise, timestamped now.
    """
    validate_set_values(weight, reps)

    store = get_store(data_dir)
    exercise = resolve(store.exercises, exercise_ref, "exercise")
    session_id = None
    if session_ref is not None:
        session_id = resolve(store.sessions, session_ref, "session").id

    log = store.add_log(exercise.id, weight, reps, session_id)
    if log is None:
        views.print_error(f"Exercise '{exercise.name}' disappeared")
        raise typer.Exit(1)
    views.print_success(
        f"Logged {log.weight:.1f} kg × {log.reps} for {exercise.name} "
        f"(volume {log.volume:.0f} kg)"
    )


@app.command("edit-set")
def edit_set(
    exercise_ref: Annotated[str, typer.Argument(metavar="EXERCISE", help="Exercise id or id prefix")],
    log_ref: Annotated[str, typer.Argument(metavar="SET", help="Set id or id prefix")],
    weight: Annotated[float, typer.Option("--weight", "-w", help="Weight in kg")],
    reps: Annotated[int, typer.Option("--reps", "-r", help="Repetitions")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Change the weight and reps of a logged set.

    The set keeps its date and session.
    """
    validate_set_values(weight, reps)

    store = get_store(data_dir)
    exercise = resolve(store.exercises, exercise_ref, "exercise")
    log = resolve(exercise.logs, log_ref, "set")
    store.update_log(exercise.id, log.id, weight, reps)
    views.print_success(
        f"Updated set: {log.weight:.1f} kg × {log.reps} → {weight:.1f} kg × {reps}"
    )


@app.command("delete-set")
def delete_set(
    exercise_ref: Annotated[str, typer.Argument(metavar="EXERCISE", help="Exercise id or id prefix")],
    log_ref: Annotated[str, typer.Argument(metavar="SET", help="Set id or id prefix")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete a logged set.
    """
    store = get_store(data_dir)
    exercise = resolve(store.exercises, exercise_ref, "exercise")
    log = resolve(exercise.logs, log_ref, "set")

    if not force and not views.confirm_action(
        f"Delete {log.weight:.1f} kg × {log.reps} from {exercise.name}?"
    ):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.delete_log(exercise.id, log.id)
    views.print_success(f"Deleted set {log.weight:.1f} kg × {log.reps}")
