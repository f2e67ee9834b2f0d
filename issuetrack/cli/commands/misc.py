"""
Miscellaneous CLI commands.
"""
import sqlite3
import sys

import click

from issuetrack import __version__
from issuetrack.core.config import get_default_db_path


@click.command()
@click.pass_context
def info(ctx):
    """Show version, database location and issue statistics."""
    click.echo(f"issuetrack {__version__}")
    click.echo(f"Python: {sys.version.split()[0]}")
    click.echo(f"SQLite: {sqlite3.sqlite_version}")

    db_file = ctx.obj.db_path or get_default_db_path()
    if not db_file.exists():
        click.echo(f"\nDatabase: {db_file} (not found)")
        click.echo("  It is created on first use.")
        return

    click.echo(f"\nDatabase: {db_file}")
    click.echo(f"  Size: {db_file.stat().st_size / 1024:.1f} KB")

    db = ctx.obj.get_db()
    state = db.maintenance.status()
    click.echo(f"  Issues: {state['issues']}")
    click.echo(f"  Projects: {len(db.projects.list())}")
    click.echo(f"  Labels: {len(db.labels.list())}")
    if state['index_exists']:
        click.echo(f"  Search index: {state['documents']} documents")
    else:
        click.secho("  Search index: missing", fg='yellow')
