"""
Conversion drop tracking for artifactindex.

Records descriptors dropped during conversion so operators can see
which artifacts never reached the catalog, and why.
"""

from typing import Optional, List, Dict, Any, Iterable

from ..domain import DroppedArtifact
from .connection import Database


def record_drop(db: Database, drop: DroppedArtifact) -> int:
    """
    Record a dropped descriptor.

    Clears any previous record for the same maven reference before recording.

    Args:
        db: Database connection
        drop: The dropped artifact and its reason

    Returns:
        ID of the inserted error record
    """
    maven = str(drop.maven)
    db.execute("DELETE FROM conversion_errors WHERE maven = ?", (maven,))
    db.execute(
        """INSERT INTO conversion_errors (maven, reason, detail)
           VALUES (?, ?, ?)""",
        (maven, drop.reason.value, drop.detail)
    )
    return db.lastrowid or 0


def record_drops(db: Database, drops: Iterable[DroppedArtifact]) -> int:
    """Record several drops, returning how many were recorded."""
    count = 0
    for drop in drops:
        record_drop(db, drop)
        count += 1
    return count


def get_drops(
    db: Database,
    reason: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    Get recorded drops, newest first.

    Args:
        db: Database connection
        reason: Only drops with this reason value
        limit: Maximum number of records to return

    Returns:
        List of drop records as dictionaries
    """
    sql = "SELECT * FROM conversion_errors"
    params: tuple = ()
    if reason:
        sql += " WHERE reason = ?"
        params = (reason,)
    sql += " ORDER BY recorded_at DESC, id DESC"
    if limit:
        sql += f" LIMIT {int(limit)}"

    db.execute(sql, params)
    return [dict(row) for row in db.fetchall()]


def get_drop_counts(db: Database) -> Dict[str, int]:
    """Count recorded drops per reason."""
    db.execute("SELECT reason, COUNT(*) as count FROM conversion_errors GROUP BY reason ORDER BY reason")
    return {row['reason']: row['count'] for row in db.fetchall()}


def clear_drops(db: Database) -> int:
    """
    Clear all recorded drops.

    Returns:
        Number of records cleared
    """
    db.execute("DELETE FROM conversion_errors")
    return db.rowcount
