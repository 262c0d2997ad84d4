"""
Handles the 'project', 'projects' and 'flags' commands for reading the catalog.
"""

import click

from ..exit_codes import ProjectNotFoundError
from ..output import emit
from .common import get_index, handle_errors

TRUE_VALUES = ('true', 'yes', 'on', '1')
FALSE_VALUES = ('false', 'no', 'off', '0')


def parse_flag_value(name: str, raw: str):
    """Convert a "--set name=value" value to the type of the flag."""
    if name == 'deprecated_artifacts':
        return frozenset(v.strip() for v in raw.split(',') if v.strip())
    if name in ('custom_scaladoc', 'primary_topic'):
        return raw or None
    if raw.lower() in TRUE_VALUES:
        return True
    if raw.lower() in FALSE_VALUES:
        return False
    raise click.BadParameter(f"{name} expects true or false, got {raw!r}", param_hint='--set')


@click.command(name='project')
@click.argument('reference')
@click.option('--releases', is_flag=True, help='Output the releases of the project')
@click.option('--pretty', is_flag=True, help='Display as formatted table')
@click.pass_context
@handle_errors
def project_cmd(ctx, reference, releases, pretty):
    """Show one project of the catalog.

    REFERENCE: organization/repository

    Examples:

    \b
        artifactindex project typelevel/cats
        artifactindex project typelevel/cats --releases --pretty
    """
    index = get_index(ctx)
    project = index.project(reference)
    if project is None:
        raise ProjectNotFoundError(reference)

    if releases:
        emit(index.releases(reference), pretty=pretty, title=str(project.reference))
    else:
        emit([project], pretty=pretty)


@click.command(name='projects')
@click.option('--pretty', is_flag=True, help='Display as formatted table')
@click.pass_context
@handle_errors
def projects_cmd(ctx, pretty):
    """List all projects of the catalog."""
    emit(get_index(ctx).projects(), pretty=pretty,
         columns=['organization', 'repository', 'default_artifact', 'release_count', 'updated'] if pretty else None)


@click.command(name='flags')
@click.argument('reference')
@click.option('--set', 'assignments', multiple=True, metavar='NAME=VALUE', help='Change a flag')
@click.pass_context
@handle_errors
def flags_cmd(ctx, reference, assignments):
    """Show or change the operator flags of a project.

    REFERENCE: organization/repository

    \b
    Flags survive every later conversion of the project.

    Examples:

    \b
        artifactindex flags typelevel/cats
        artifactindex flags typelevel/cats --set strict_versions=true
        artifactindex flags typelevel/cats --set deprecated_artifacts=cats-old,cats-legacy
    """
    index = get_index(ctx)
    changes = {}
    for assignment in assignments:
        name, sep, raw = assignment.partition('=')
        if not sep:
            raise click.BadParameter(f"expected NAME=VALUE, got {assignment!r}", param_hint='--set')
        changes[name.strip()] = parse_flag_value(name.strip(), raw.strip())

    if changes:
        flags = index.set_flags(reference, **changes)
    else:
        project = index.project(reference)
        flags = project.flags if project else None

    if flags is None:
        raise ProjectNotFoundError(reference)
    emit([flags])
