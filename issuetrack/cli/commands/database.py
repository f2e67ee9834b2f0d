"""
Database-related CLI commands.

Commands for searching issues and for out-of-band maintenance of the
full-text search index.
"""
import json

import click

from issuetrack.cli.common import db_option, use_db
from issuetrack.core.errors import IssueTrackError, MaintenanceInProgress
from issuetrack.services.search import IssueSearchService


@click.command()
@click.argument('query')
@click.option(
    '--limit',
    default='20',
    help='Maximum results, clamped to 1-100 (default: 20)'
)
@click.option('--json', 'as_json', is_flag=True, help='Print results as JSON')
@db_option
@click.pass_context
def search(ctx, query, limit, as_json, db_path):
    """Search issues by title and description."""
    db = use_db(ctx, db_path)

    try:
        results = IssueSearchService(db).search(query, limit)
    except IssueTrackError as e:
        click.secho(f"Search failed: {e}", fg='red', err=True)
        raise click.Abort()

    if as_json:
        click.echo(json.dumps([r.model_dump(by_alias=True) for r in results], indent=2))
        return

    if not results:
        click.echo(f"No issues found for: {query}")
        return

    click.echo(f"Found {len(results)} issues:\n")
    for result in results:
        click.secho(f"#{result.number} ", fg='cyan', nl=False)
        click.echo(f"{result.title} [{result.status}, {result.priority}]")
        if result.description_snippet:
            click.echo(f"    {result.description_snippet}")


@click.group()
def index():
    """Maintain the full-text search index."""


@index.command()
@db_option
@click.confirmation_option(prompt='Drop the search index? Search fails until it is rebuilt.')
@click.pass_context
def drop(ctx, db_path):
    """Drop the search index and its sync triggers."""
    db = use_db(ctx, db_path)

    try:
        IssueSearchService(db).drop_index()
    except IssueTrackError as e:
        click.secho(f"Error dropping index: {e}", fg='red', err=True)
        raise click.Abort()
    click.secho("Search index dropped.", fg='yellow')
    click.echo("Run 'issuetrack index rebuild' to restore search.")


@index.command()
@db_option
@click.pass_context
def rebuild(ctx, db_path):
    """Rebuild the full-text search index.

    Run this if search results seem incomplete or the index is corrupted.
    Readers see the old index until the rebuild commits.
    """
    click.echo("Rebuilding search index...")

    db = use_db(ctx, db_path)

    try:
        count = IssueSearchService(db).rebuild_index()
    except MaintenanceInProgress:
        click.secho("Another rebuild is already running.", fg='yellow', err=True)
        raise click.Abort()
    except Exception as e:
        click.secho(f"Error rebuilding index: {e}", fg='red', err=True)
        if ctx.obj.verbose:
            import traceback
            click.echo(traceback.format_exc(), err=True)
        raise click.Abort()
    click.secho(f"Search index rebuilt with {count} issues.", fg='green')


@index.command()
@db_option
@click.pass_context
def verify(ctx, db_path):
    """Check that the search index is intact and covers every issue."""
    db = use_db(ctx, db_path)

    health = IssueSearchService(db).index_health()
    click.echo(f"Index table: {'present' if health['index_exists'] else 'missing'}")
    click.echo(f"Sync triggers: {', '.join(health['hooks']) or 'none'}")
    if health['documents'] is not None:
        click.echo(f"Indexed documents: {health['documents']} / {health['issues']} issues")

    if not health['healthy']:
        click.secho("Search index is unhealthy. Run 'issuetrack index rebuild'.", fg='red', err=True)
        raise click.Abort()
    click.secho("Search index OK.", fg='green')


@index.command()
@db_option
@click.pass_context
def status(ctx, db_path):
    """Print the search index state as JSON."""
    db = use_db(ctx, db_path)
    click.echo(json.dumps(db.maintenance.status(), indent=2))
