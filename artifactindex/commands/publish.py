"""
Handles the 'publish' command: publish one descriptor into the catalog.
"""

import sys
from datetime import datetime, timezone

import click

from ..exit_codes import PUBLISH_EXIT_CODES
from ..output import emit
from .common import get_index, handle_errors


@click.command(name='publish')
@click.argument('descriptor', type=click.File('rb'))
@click.option('--login', help='Publishing user; omit for a trusted publish')
@click.option('--repo', 'repositories', multiple=True, help='Repository (org/repo) the user may publish to')
@click.option('--admin', is_flag=True, help='Grant the login publishing authority for every repository')
@click.option('--token', envvar='ARTIFACTINDEX_PUBLISH_TOKEN', help='GitHub token of the publishing user')
@click.option('--created', type=click.DateTime(), help='Release date (default: now)')
@click.option('--pretty', is_flag=True, help='Display as formatted table')
@click.pass_context
@handle_errors
def publish_cmd(ctx, descriptor, login, repositories, admin, token, created, pretty):
    """Publish a single artifact descriptor.

    DESCRIPTOR: descriptor file, or - for stdin

    \b
    Outputs one status line: success, invalid_pom, no_github_repo or
    forbidden. The exit status is non-zero unless the publish succeeded.

    Examples:

    \b
        artifactindex publish cats-core_2.13-2.9.0.json
        artifactindex publish desc.json --login alice --repo typelevel/cats
        artifactindex publish desc.json --login release-bot --admin
        cat desc.json | artifactindex publish -
    """
    index = get_index(ctx)
    if created is not None and created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)

    result = index.publish(
        descriptor.read(),
        path=descriptor.name,
        creation_date=created or datetime.now(timezone.utc),
        login=login,
        repositories=repositories,
        token=token,
        admin=admin,
    )
    emit([result], pretty=pretty)

    code = PUBLISH_EXIT_CODES.get(result.status, 1)
    if code:
        sys.exit(code)
