"""
CLI entry point using Typer.

Provides commands for the training log:
- exercises: add-exercise, rename-exercise, delete-exercise, list-exercises, show-exercise
- sets: log-set, edit-set, delete-set
- sessions: add-session, edit-session, delete-session, list-sessions, show-session
- plans: add-plan, edit-plan, delete-plan, list-plans, show-plan, start-session
- data: check-integrity, export, import
"""

from .app import app
from .commands import data, exercises, plans, sessions  # noqa: F401  registers commands


def main() -> None:
    app()


if __name__ == "__main__":
    main()
