"""Session commands: add-session, edit-session, delete-session, list-sessions, show-session."""

from typing import Annotated, Optional

import typer

from ...core.metrics import session_logs
from .. import views
from ..app import DataDirOption, app, get_store, resolve, resolve_many

ExercisesOption = Annotated[
    Optional[list[str]],
    typer.Option("--exercise", "-e", help="Exercise id or id prefix (repeatable)"),
]


@app.command("add-session")
def add_session(
    name: Annotated[str, typer.Argument(help="Session name, e.g. 'Push day'")],
    exercise_refs: ExercisesOption = None,
    notes: Annotated[str, typer.Option("--notes", "-n", help="Free-text notes")] = "",
    data_dir: DataDirOption = None,
) -> None:
    """
    Start a new training session, timestamped now.
    """
    store = get_store(data_dir)
    exercise_ids = resolve_many(store.exercises, exercise_refs or [], "exercise")
    session = store.add_session(name, exercise_ids, notes)
    views.print_success(f"Added session '{session.name}' ({session.id})")


@app.command("edit-session")
def edit_session(
    session_ref: Annotated[str, typer.Argument(metavar="SESSION", help="Session id or id prefix")],
    name: Annotated[
        Optional[str],
        typer.Option("--name", help="New name (default: unchanged)"),
    ] = None,
    exercise_refs: ExercisesOption = None,
    notes: Annotated[
        Optional[str],
        typer.Option("--notes", "-n", help="New notes (default: unchanged)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Edit a session's name, exercises or notes.

    Options left out keep their current value; --exercise replaces the whole
    exercise list.
    """
    store = get_store(data_dir)
    session = resolve(store.sessions, session_ref, "session")
    exercise_ids = (
        resolve_many(store.exercises, exercise_refs, "exercise")
        if exercise_refs
        else session.exercise_ids
    )
    store.update_session(
        session.id,
        name if name is not None else session.name,
        exercise_ids,
        notes if notes is not None else session.notes,
    )
    views.print_success(f"Updated session '{session.name}'")


@app.command("delete-session")
def delete_session(
    session_ref: Annotated[str, typer.Argument(metavar="SESSION", help="Session id or id prefix")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete a session and every set logged against it.
    """
    store = get_store(data_dir)
    session = resolve(store.sessions, session_ref, "session")
    set_count = len(session_logs(session.id, store.exercises))

    views.console.print(
        f"Session to delete: [bold]{session.name}[/bold] "
        f"({views.format_date(session.date)}, {set_count} sets)"
    )
    if not force and not views.confirm_action("Delete this session and its sets?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.delete_session(session.id)
    views.print_success(f"Deleted session '{session.name}' and {set_count} set(s)")


@app.command("list-sessions")
def list_sessions(
    data_dir: DataDirOption = None,
) -> None:
    """
    List sessions, newest first, with their total volume.
    """
    store = get_store(data_dir)
    volumes = {s.id: store.session_total_volume(s.id) for s in store.sessions}
    views.print_sessions(store.sessions, volumes)


@app.command("show-session")
def show_session(
    session_ref: Annotated[str, typer.Argument(metavar="SESSION", help="Session id or id prefix")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Show a session with the sets logged for each of its exercises.
    """
    store = get_store(data_dir)
    session = resolve(store.sessions, session_ref, "session")
    views.print_session_detail(
        session,
        store.session_exercises(session.id),
        session_logs(session.id, store.exercises),
        store.session_total_volume(session.id) or 0.0,
    )
