"""
Handles the 'info' and 'drops' commands: catalog statistics and the
descriptors dropped by conversion runs.
"""

import json

import click

from ..database import Database, clear_drops, get_drop_counts, get_drops
from ..output import emit, emit_summary
from .common import get_index, handle_errors


@click.command(name='info')
@click.option('--pretty', is_flag=True, help='Display as formatted table')
@click.pass_context
@handle_errors
def info_cmd(ctx, pretty):
    """Show catalog database statistics."""
    emit_summary(get_index(ctx).info(), pretty=pretty, title="Catalog")


@click.command(name='drops')
@click.option('--reason', type=click.Choice(['unknown_platform', 'invalid_version', 'no_repository']),
              help='Only drops with this reason')
@click.option('--limit', type=int, help='Maximum number of drops to show')
@click.option('--counts', is_flag=True, help='Only show the number of drops per reason')
@click.option('--clear', is_flag=True, help='Forget all recorded drops')
@click.option('--pretty', is_flag=True, help='Display as formatted table')
@click.pass_context
@handle_errors
def drops_cmd(ctx, reason, limit, counts, clear, pretty):
    """Show descriptors dropped by conversion runs.

    Examples:

    \b
        artifactindex drops --counts
        artifactindex drops --reason unknown_platform --limit 20 --pretty
        artifactindex drops --clear
    """
    store = get_index(ctx).store
    with Database(db_path=store.db_path, config=store.config) as db:
        if clear:
            cleared = clear_drops(db)
            click.echo(json.dumps({'cleared': cleared}))
            return
        if counts:
            emit_summary(get_drop_counts(db), pretty=pretty, title="Drops")
            return
        emit(get_drops(db, reason=reason, limit=limit), pretty=pretty)
