"""
Shared helpers for artifactindex commands.
"""

import sys
from functools import wraps

import click

from ..api import ArtifactIndex
from ..config import validate_config
from ..exit_codes import INTERRUPTED, CommandError, ConfigError, get_exit_code_for_exception
from ..output import emit_error


def get_index(ctx: click.Context) -> ArtifactIndex:
    """The ArtifactIndex of this invocation, created on first use."""
    obj = ctx.ensure_object(dict)
    if 'index' not in obj:
        config = obj.get('config')
        problems = validate_config(config) if config is not None else []
        if problems:
            raise ConfigError("Invalid configuration: " + "; ".join(problems))
        obj['index'] = ArtifactIndex(config=config, db_path=obj.get('db_path'))
    return obj['index']


def handle_errors(func):
    """
    Map exceptions to JSON errors on stderr and exit codes.

    Click exceptions keep their own handling.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except KeyboardInterrupt:
            emit_error("Interrupted by user", type="interrupted")
            sys.exit(INTERRUPTED)
        except CommandError as e:
            context = None
            if hasattr(e, 'succeeded'):
                context = {'succeeded': e.succeeded, 'failed': e.failed}
            emit_error(str(e), type=type(e).__name__, context=context)
            sys.exit(e.exit_code)
        except Exception as e:
            emit_error(str(e), type=type(e).__name__)
            sys.exit(get_exit_code_for_exception(e))
    return wrapper
