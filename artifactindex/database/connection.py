"""
SQLite connections for the artifactindex catalog.

The catalog lives in one SQLite file in WAL mode, so catalog reads never
block on a running conversion or publish. Writers that must not interleave
(concurrent publishes of the same project) take the write lock up front
with transaction(db, immediate=True).
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from .schema import ensure_schema

# Seconds a writer waits for another writer to finish
BUSY_TIMEOUT_SECONDS = 30.0

CATALOG_TABLES = ('projects', 'releases', 'dependencies', 'conversion_errors')


def get_db_path(config: Optional[dict] = None) -> Path:
    """
    Resolve the catalog file.

    ARTIFACTINDEX_DB wins over config['database']['path'], which wins over
    ~/.artifactindex/catalog.db.
    """
    if 'ARTIFACTINDEX_DB' in os.environ:
        return Path(os.environ['ARTIFACTINDEX_DB'])

    configured = (config or {}).get('database', {}).get('path')
    if configured:
        return Path(configured).expanduser()

    return Path.home() / '.artifactindex' / 'catalog.db'


def get_connection(
    db_path: Optional[Path] = None,
    config: Optional[dict] = None,
    read_only: bool = False
) -> sqlite3.Connection:
    """
    Open the catalog, creating or migrating its schema on write connections.

    Args:
        db_path: Explicit catalog file (overrides config)
        config: Configuration dictionary
        read_only: Open with mode=ro; the file must already exist
    """
    db_path = Path(db_path) if db_path is not None else get_db_path(config)

    if read_only:
        conn = sqlite3.connect(f"file:{db_path}?mode=ro", uri=True, timeout=BUSY_TIMEOUT_SECONDS)
    else:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path), timeout=BUSY_TIMEOUT_SECONDS)

    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    if not read_only:
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA synchronous = NORMAL")
        ensure_schema(conn)

    return conn


class Database:
    """
    Catalog connection as a context manager.

    Commits on a clean exit and closes the connection either way. The
    last cursor is kept so catalog functions can read results and row
    counts after execute().

    Usage:
        with Database(db_path=path) as db:
            db.execute("SELECT * FROM projects WHERE organization = ?", ("typelevel",))
            for row in db.fetchall():
                print(row['repository'])
    """

    def __init__(
        self,
        db_path: Optional[Path] = None,
        config: Optional[dict] = None,
        read_only: bool = False
    ):
        self.db_path = db_path
        self.config = config
        self.read_only = read_only
        self._conn: Optional[sqlite3.Connection] = None
        self._cursor: Optional[sqlite3.Cursor] = None

    def __enter__(self) -> 'Database':
        self._conn = get_connection(self.db_path, self.config, self.read_only)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._conn is None:
            return
        try:
            if exc_type is None and not self.read_only:
                self._conn.commit()
        finally:
            self._conn.close()
            self._conn = None
            self._cursor = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database not connected. Use 'with Database() as db:'")
        return self._conn

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        self._cursor = self.conn.execute(sql, params)
        return self._cursor

    def executemany(self, sql: str, params_seq) -> sqlite3.Cursor:
        self._cursor = self.conn.executemany(sql, params_seq)
        return self._cursor

    def fetchone(self) -> Optional[sqlite3.Row]:
        return self._cursor.fetchone() if self._cursor else None

    def fetchall(self) -> list:
        return self._cursor.fetchall() if self._cursor else []

    def commit(self) -> None:
        self.conn.commit()

    def rollback(self) -> None:
        self.conn.rollback()

    @property
    def lastrowid(self) -> Optional[int]:
        return self._cursor.lastrowid if self._cursor else None

    @property
    def rowcount(self) -> int:
        """Rows changed by the last INSERT/UPDATE/DELETE."""
        return self._cursor.rowcount if self._cursor else 0


@contextmanager
def transaction(db: Database, immediate: bool = False) -> Generator[None, None, None]:
    """
    Commit the block as one unit, or roll it back if it raises.

    With immediate=True the write lock is taken by BEGIN IMMEDIATE before
    the first read, so a read-modify-write block (insert_artifact) cannot
    interleave with another writer.
    """
    if immediate:
        if db.conn.in_transaction:
            db.commit()
        db.execute("BEGIN IMMEDIATE")
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise


def reset_database(config: Optional[dict] = None) -> None:
    """
    Delete the catalog file and recreate an empty schema.

    Operator flags are stored in the catalog and are lost too.
    """
    db_path = get_db_path(config)
    for suffix in ('', '-wal', '-shm'):
        Path(f"{db_path}{suffix}").unlink(missing_ok=True)

    with Database(config=config):
        pass


def get_database_info(config: Optional[dict] = None) -> dict:
    """Row counts, schema version and size of the catalog file."""
    db_path = get_db_path(config)
    if not db_path.exists():
        return {'exists': False, 'path': str(db_path)}

    with Database(config=config, read_only=True) as db:
        counts = {}
        for table in CATALOG_TABLES:
            db.execute(f"SELECT COUNT(*) FROM {table}")
            counts[table] = db.fetchone()[0]

        db.execute("SELECT MAX(version) FROM _schema_info")
        schema_version = db.fetchone()[0] or 0

    size = db_path.stat().st_size
    return {
        'exists': True,
        'path': str(db_path),
        'size_bytes': size,
        'size_human': _human_size(size),
        'schema_version': schema_version,
        **counts,
    }


def _human_size(size_bytes: int) -> str:
    size: float = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
