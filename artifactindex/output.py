"""
Output module for artifactindex.

Provides consistent output formatting across all commands:
- JSONL (default): Newline-delimited JSON for piping
- Pretty: Human-readable tables using Rich

Usage:
    from artifactindex.output import emit, emit_error

    # Stream items as JSONL (default) or pretty table
    emit(projects, pretty=pretty)

    # Emit error to stderr
    emit_error("Not found", type="not_found", context={"project": "org/repo"})
"""

import json
import sys
from typing import Iterable, Any, Dict, Optional, List

from rich.console import Console
from rich.table import Table


def emit(
    items: Iterable[Any],
    pretty: bool = False,
    columns: Optional[List[str]] = None,
    err: bool = False,
    title: Optional[str] = None,
) -> None:
    """
    Emit items as JSONL or pretty table.

    Args:
        items: Items to emit (should have to_dict() method or be dicts)
        pretty: If True, render as table. If False, output JSONL
        columns: Column names for table (auto-detected if None)
        err: If True, output to stderr instead of stdout
        title: Table title (pretty mode only)
    """
    stream = sys.stderr if err else sys.stdout

    if pretty:
        _emit_table(items, columns, title=title, stream=stream)
    else:
        _emit_jsonl(items, stream)


def _to_dict(item: Any) -> Dict[str, Any]:
    if hasattr(item, 'to_dict'):
        return item.to_dict()
    if isinstance(item, dict):
        return item
    return {'value': str(item)}


def _emit_jsonl(items: Iterable[Any], stream=sys.stdout) -> None:
    """Emit items as JSONL."""
    for item in items:
        print(json.dumps(_to_dict(item), ensure_ascii=False), file=stream, flush=True)


def _emit_table(
    items: Iterable[Any],
    columns: Optional[List[str]] = None,
    title: Optional[str] = None,
    stream=sys.stdout,
) -> None:
    """Emit items as a Rich table."""
    rows = [_to_dict(item) for item in items]

    console = Console(file=stream)
    if not rows:
        console.print("No results found")
        return

    # Auto-detect columns if not provided
    if not columns:
        columns = _auto_columns(rows)

    table = Table(show_header=True, header_style="bold", title=title)
    for col in columns:
        table.add_column(col)

    for row in rows:
        values = [_format_value(row.get(col, '')) for col in columns]
        table.add_row(*values)

    console.print(table)


def _auto_columns(rows: List[Dict]) -> List[str]:
    """Auto-detect columns from rows."""
    if not rows:
        return []

    # Common column order preference
    preferred = [
        'organization', 'repository', 'artifact', 'version', 'platform',
        'default_artifact', 'release_count', 'status', 'reason', 'maven',
    ]

    # Get all keys from first row
    all_keys = set(rows[0].keys())

    # Start with preferred columns that exist
    columns = [col for col in preferred if col in all_keys]

    # Add remaining columns
    for key in sorted(all_keys):
        if key not in columns:
            columns.append(key)

    # Limit to reasonable number
    return columns[:8]


def _format_value(value: Any, max_len: int = 50) -> str:
    """Format a value for table display."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    if isinstance(value, list):
        s = ', '.join(str(v) for v in value[:3])
        if len(value) > 3:
            s += f' (+{len(value) - 3} more)'
        return s
    if isinstance(value, dict):
        return '{...}'

    s = str(value)
    if len(s) > max_len:
        return s[:max_len-3] + '...'
    return s


def emit_summary(summary: Dict[str, Any], pretty: bool = False, title: str = "Summary") -> None:
    """
    Emit a run summary: one JSON line, or a two-column Rich table.

    Nested dicts are flattened into "parent.child" rows in pretty mode.
    """
    if not pretty:
        print(json.dumps(summary, ensure_ascii=False), flush=True)
        return

    table = Table(title=title, show_header=False)
    table.add_column("key", style="bold")
    table.add_column("value", justify="right")
    for key, value in summary.items():
        if key == 'type':
            continue
        if isinstance(value, dict):
            for sub_key, sub_value in sorted(value.items()):
                table.add_row(f"{key}.{sub_key}", _format_value(sub_value))
        else:
            table.add_row(key, _format_value(value))
    Console().print(table)


def emit_error(
    error: str,
    type: str = "error",
    context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Emit error to stderr as JSON.

    Args:
        error: Error message
        type: Error type (e.g., "not_found", "config_error")
        context: Additional context dict
    """
    obj: Dict[str, Any] = {
        'error': error,
        'type': type
    }
    if context:
        obj['context'] = context

    print(json.dumps(obj, ensure_ascii=False), file=sys.stderr, flush=True)
