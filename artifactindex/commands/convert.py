"""
Handles the 'convert' command: batch conversion of a descriptor dump.

Default output is JSONL: every project, release and dependency edge of the
run, followed by a summary line. --pretty prints the summary as a table.
"""

import click

from ..exit_codes import PartialSuccessError
from ..output import emit, emit_summary
from .common import get_index, handle_errors


@click.command(name='convert')
@click.argument('descriptor_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--dry-run', is_flag=True, help='Convert without writing to the catalog')
@click.option('--summary-only', is_flag=True, help='Only output the run summary')
@click.option('--strict', is_flag=True, help='Exit with an error status if any descriptor was dropped')
@click.option('--pretty', is_flag=True, help='Display the summary as a formatted table')
@click.pass_context
@handle_errors
def convert_cmd(ctx, descriptor_file, dry_run, summary_only, strict, pretty):
    """Convert artifact descriptors into projects, releases and dependencies.

    DESCRIPTOR_FILE: JSON object, JSON array or JSONL of descriptors

    \b
    Descriptors are merged with the releases already in the catalog;
    projects keep their stored flags. Dropped descriptors are logged
    and recorded with their reason.

    Examples:

    \b
        artifactindex convert dump.jsonl
        artifactindex convert dump.jsonl --dry-run --pretty
        artifactindex convert dump.jsonl --summary-only --strict
    """
    index = get_index(ctx)
    result = index.convert(descriptor_file, save=not dry_run)

    if not summary_only and not pretty:
        emit(result.projects)
        emit(result.releases)
        emit(result.dependencies)

    summary = result.report.to_dict()
    summary['projects'] = len(result.projects)
    summary['releases'] = len(result.releases)
    summary['dependencies'] = len(result.dependencies)
    summary['saved'] = not dry_run
    emit_summary(summary, pretty=pretty, title="Conversion")

    if strict and result.report.dropped:
        raise PartialSuccessError(
            f"{result.report.dropped} of {result.report.total} descriptors dropped",
            succeeded=result.report.kept,
            failed=result.report.dropped,
        )
