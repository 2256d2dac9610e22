"""Data commands: check-integrity, export, import."""

from pathlib import Path
from typing import Annotated

import typer

from ...io.serializers import ValidationError
from ...io.snapshot_store import export_bundle, import_bundle
from .. import views
from ..app import DataDirOption, app, get_store


@app.command("check-integrity")
def check_integrity(
    data_dir: DataDirOption = None,
) -> None:
    """
    Report sessions, plans and sets that reference deleted entities.

    Exits with code 1 when dangling references exist.  Nothing is repaired.
    """
    store = get_store(data_dir)
    report = store.integrity_report()
    views.print_integrity_report(report)
    if not report.ok:
        raise typer.Exit(1)


@app.command("export")
def export_data(
    output: Annotated[Path, typer.Argument(help="Bundle file to write")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Export all data to a single backup bundle.
    """
    store = get_store(data_dir)
    bundle = export_bundle(store.exercises, store.sessions, store.plans)
    try:
        output.write_bytes(bundle)
    except OSError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(
        f"Exported {len(store.exercises)} exercises, {len(store.sessions)} sessions "
        f"and {len(store.plans)} plans to {output}"
    )


@app.command("import")
def import_data(
    source: Annotated[Path, typer.Argument(help="Bundle file written by 'export'")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Replace all data with the contents of a backup bundle.
    """
    try:
        snapshot = import_bundle(source.read_bytes())
    except (OSError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store = get_store(data_dir)
    views.console.print(
        f"Bundle holds {len(snapshot.exercises)} exercises, {len(snapshot.sessions)} sessions "
        f"and {len(snapshot.plans)} plans."
    )
    if not force and not views.confirm_action("Replace all current data?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        store.replace_all(snapshot.exercises, snapshot.sessions, snapshot.plans)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(f"Imported data from {source}")
