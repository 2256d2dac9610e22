"""Shared Typer app object, shared option types, and store/id utilities."""

from pathlib import Path
from typing import Annotated, Optional, Sequence, TypeVar
from uuid import UUID

import typer

from ..core.config_loader import data_dir, load_settings
from ..core.models import Exercise, TrainingPlan, TrainingSession, WorkoutLog
from ..core.store import GymStore, StoreEvent
from ..io.blob_store import DirectoryBlobStore
from ..io.snapshot_store import SnapshotStore
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", help="Data directory (default: ~/.gym-tracker)"),
]

app = typer.Typer(
    name="gym-tracker",
    help="Strength-training log: exercises, sets, sessions and plans with progress analytics.",
    no_args_is_help=True,
)

T = TypeVar("T", Exercise, TrainingSession, TrainingPlan, WorkoutLog)


def get_store(data_path: Path | None) -> GymStore:
    """Open the store in the given directory or the configured default."""
    if data_path is None:
        data_path = data_dir(load_settings())
    store = GymStore(SnapshotStore(DirectoryBlobStore(data_path)))
    for key, reason in store.load_errors.items():
        views.print_warning(f"Could not read '{key}' ({reason}); it was loaded empty.")

    def warn_unsaved(_event: StoreEvent) -> None:
        if store.last_save_error is not None:
            views.print_warning(f"Changes were not saved ({store.last_save_error})")

    store.subscribe(warn_unsaved)
    return store


def resolve(items: Sequence[T], ref: str, kind: str) -> T:
    """
    Find an entity by full id or unique id prefix.

    Exits with code 1 (after printing an error) if nothing or more than one
    entity matches.
    """
    ref = ref.strip().lower()
    matches = [item for item in items if str(item.id).startswith(ref)] if ref else []
    if not matches:
        views.print_error(f"No {kind} matches id '{ref}'")
        raise typer.Exit(1)
    if len(matches) > 1:
        views.print_error(f"Id '{ref}' is ambiguous: matches {len(matches)} {kind}s")
        raise typer.Exit(1)
    return matches[0]


def resolve_many(items: Sequence[T], refs: Sequence[str], kind: str) -> list[UUID]:
    """Resolve several id references; see resolve()."""
    return [resolve(items, ref, kind).id for ref in refs]


def validate_set_values(weight: float, reps: int) -> None:
    """Reject non-positive weight or reps before they reach the store."""
    if weight <= 0:
        views.print_error(f"Weight must be positive, got {weight}")
        raise typer.Exit(1)
    if reps <= 0:
        views.print_error(f"Reps must be positive, got {reps}")
        raise typer.Exit(1)
