import json
import os

import click

from artifactindex.config import get_config_path, get_default_config, save_config


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file")
@click.pass_context
def init_config(ctx, force):
    """Write the default configuration file."""
    config_path = ctx.obj.get('config_path') if ctx.obj else None
    path = get_config_path() if config_path is None else config_path
    if os.path.exists(path) and not force:
        click.echo(json.dumps({"config_path": str(path), "written": False}))
        return
    written = save_config(get_default_config(), path)
    click.echo(json.dumps({"config_path": str(written), "written": True}))


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSONL")
@click.option("--path", is_flag=True, help="Show the config file path being used")
@click.pass_context
def show_config(ctx, pretty, path):
    """Show the current configuration with all merges applied.

    By default, outputs single-line JSON (JSONL format).
    Use --pretty for human-readable formatted output.
    Use --path to see which config file is being used.
    """
    if path:
        config_path = (ctx.obj or {}).get('config_path') or get_config_path()
        print(json.dumps({"config_path": str(config_path)}))
        return

    config = dict((ctx.obj or {}).get('config') or {})
    if config.get('github', {}).get('token'):
        config['github'] = {**config['github'], 'token': '***'}

    if pretty:
        # Pretty print for human readability
        print(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        # Default: single-line JSON (JSONL)
        print(json.dumps(config, ensure_ascii=False))
