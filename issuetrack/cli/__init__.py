"""
Click-based command line interface for issuetrack.

Usage:
    issuetrack search "login bug"
    issuetrack index rebuild
    issuetrack serve --port 8000
"""
import logging
from pathlib import Path

import click

from issuetrack import __version__
from issuetrack.cli.commands.database import index, search
from issuetrack.cli.commands.misc import info
from issuetrack.cli.commands.web import serve
from issuetrack.cli.context import CLIContext


@click.group()
@click.version_option(__version__, prog_name='issuetrack')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.option(
    '--db-path',
    type=click.Path(dir_okay=False, path_type=Path),
    envvar='ISSUETRACK_DB_PATH',
    help='Path to database file (default: ./issuetrack.db)',
)
@click.pass_context
def main(ctx, verbose, db_path):
    """issuetrack - issue tracker with full-text search."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    ctx.obj = CLIContext(verbose=verbose, db_path=db_path)
    ctx.call_on_close(ctx.obj.close)


main.add_command(search)
main.add_command(index)
main.add_command(serve)
main.add_command(info)
