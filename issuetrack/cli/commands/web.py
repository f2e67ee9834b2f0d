"""
API server command.

Starts the FastAPI app with uvicorn.
"""
import os

import click
import uvicorn


@click.command()
@click.option(
    '--host',
    default='127.0.0.1',
    help='Host to bind to (default: 127.0.0.1)'
)
@click.option(
    '--port',
    type=int,
    default=8000,
    help='Port to bind to (default: 8000)'
)
@click.option(
    '--db-path',
    type=click.Path(),
    help='Path to database file (default: ./issuetrack.db)'
)
@click.option(
    '--reload',
    is_flag=True,
    help='Auto-reload on code changes'
)
def serve(host, port, db_path, reload):
    """Start the issuetrack API server."""
    if db_path:
        # Each request opens its own connection from this setting
        os.environ['ISSUETRACK_DB_PATH'] = str(db_path)

    click.echo(f"Starting issuetrack server on http://{host}:{port}")
    if reload:
        click.echo("  Auto-reload: enabled (server restarts on code changes)")
    click.echo("\nPress Ctrl+C to stop\n")

    uvicorn.run(
        "issuetrack.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )
