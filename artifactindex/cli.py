#!/usr/bin/env python3

from pathlib import Path

import click

from artifactindex.config import configure_logging, load_config

from artifactindex.commands.convert import convert_cmd
from artifactindex.commands.publish import publish_cmd
from artifactindex.commands.project import project_cmd, projects_cmd, flags_cmd
from artifactindex.commands.info import info_cmd, drops_cmd
from artifactindex.commands.config import config_cmd


@click.group()
@click.version_option(package_name='artifactindex')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), envvar='ARTIFACTINDEX_CONFIG',
              help='Configuration file (default: ~/.artifactindex/config.json)')
@click.option('--db', 'db_path', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help='Catalog database (default: ~/.artifactindex/catalog.db)')
@click.option('-v', '--verbose', is_flag=True, help='Debug logging on stderr')
@click.option('-q', '--quiet', is_flag=True, help='Only log errors')
@click.pass_context
def cli(ctx, config_path, db_path, verbose, quiet):
    """artifactindex - Catalog of published library artifacts.

    Groups published artifacts by their source repository into projects,
    releases and dependency edges, and publishes new descriptors into the
    catalog one at a time.
    """
    config = load_config(config_path)
    configure_logging(config, verbose=verbose, quiet=quiet)

    ctx.ensure_object(dict)
    ctx.obj['config'] = config
    ctx.obj['config_path'] = config_path
    ctx.obj['db_path'] = db_path


# Pipelines
cli.add_command(convert_cmd)
cli.add_command(publish_cmd)

# Catalog
cli.add_command(project_cmd)
cli.add_command(projects_cmd)
cli.add_command(flags_cmd)
cli.add_command(info_cmd)
cli.add_command(drops_cmd)

# Command groups
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
