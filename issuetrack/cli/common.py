"""
Reusable click options shared by CLI commands.
"""
from pathlib import Path

import click


def db_option(f):
    """Add a --db-path option that overrides the configured database."""
    return click.option(
        '--db-path',
        type=click.Path(dir_okay=False, path_type=Path),
        help='Path to database file (default: ISSUETRACK_DB_PATH or ./issuetrack.db)',
    )(f)


def use_db(ctx, db_path):
    """Apply a per-command --db-path and return the opened database."""
    if db_path:
        ctx.obj.db_path = Path(db_path)
    return ctx.obj.get_db()
