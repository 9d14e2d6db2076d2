"""Command-line interface for TaskSync.

Commands:
- serve: Run the sync server
- list-tasks: Show stored tasks and their server watermarks
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from tasksync import __version__
from tasksync.core.config import ServerSettings


@click.group()
@click.version_option(__version__, prog_name="tasksync")
def cli() -> None:
    """TaskSync - offline-first task synchronization server."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: TASKSYNC_HOST or 127.0.0.1).")
@click.option("--port", type=int, default=None, help="Bind port (default: TASKSYNC_PORT or 8000).")
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to database file (default: TASKSYNC_DB_PATH or ./tasksync.db).",
)
def serve(host: str | None, port: int | None, db_path: Path | None) -> None:
    """Run the sync server with uvicorn."""
    import uvicorn

    from tasksync.server.app import create_app, setup_logging
    from tasksync.server.database import Database

    try:
        settings = ServerSettings.from_env()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    setup_logging(settings.log_path, settings.log_level)
    application = create_app(Database(db_path or settings.db_path))
    uvicorn.run(
        application,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@cli.command("list-tasks")
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to database file (default: TASKSYNC_DB_PATH or ./tasksync.db).",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def list_tasks(db_path: Path | None, as_json: bool) -> None:
    """List stored tasks with their server timestamps.

    Examples:

        # Show tasks in the default database
        tasksync list-tasks

        # Machine-readable output
        tasksync list-tasks --db-path /var/lib/tasksync/tasksync.db --json
    """
    from tasksync.server.database import Database

    resolved = db_path or ServerSettings.from_env().db_path
    if not resolved.exists():
        raise click.ClickException(f"Database not found: {resolved}")

    db = Database(resolved)
    try:
        tasks = db.list_tasks()
    finally:
        db.close()

    if as_json:
        rows = [
            {
                "id": t.id,
                "name": t.name,
                "is_done": t.is_done,
                "is_urgent": t.is_urgent,
                "server_created_at": t.server_created_at,
                "server_updated_at": t.server_updated_at,
            }
            for t in tasks
        ]
        click.echo(json.dumps(rows, indent=2))
        return

    if not tasks:
        click.echo("No tasks.")
        return

    for t in tasks:
        flags = ("x" if t.is_done else " ") + ("!" if t.is_urgent else " ")
        click.echo(
            f"[{flags}] {t.id}  {t.name}  "
            f"(created {t.server_created_at}, updated {t.server_updated_at})"
        )
    click.echo(f"\n{len(tasks)} task(s)")


if __name__ == "__main__":
    cli()
