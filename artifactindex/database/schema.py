"""
Database schema for artifactindex.

This module defines the SQLite schema and handles schema versioning.
The schema is designed to:
- Store one row per project, release and dependency edge
- Keep operator flags in the project row next to the derived fields
- Record dropped descriptors so drop statistics survive the run
"""

import logging
import sqlite3
from typing import List, Tuple

logger = logging.getLogger(__name__)

# Current schema version - increment when schema changes
# v1: Initial schema
CURRENT_VERSION = 1

SCHEMA_V1 = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS _schema_info (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    description TEXT
);

-- Projects (one per source repository)
CREATE TABLE IF NOT EXISTS projects (
    organization TEXT NOT NULL,
    repository TEXT NOT NULL,

    -- Derived from releases (replaced on every conversion)
    artifacts TEXT,             -- JSON array
    default_artifact TEXT,
    release_count INTEGER DEFAULT 0,
    created TEXT,               -- earliest release (ISO-8601)
    updated TEXT,               -- latest release (ISO-8601)
    target_type TEXT,           -- JSON array
    scala_version TEXT,         -- JSON array
    scala_js_version TEXT,      -- JSON array
    scala_native_version TEXT,  -- JSON array
    sbt_version TEXT,           -- JSON array
    dependency_count INTEGER DEFAULT 0,
    dependent_count INTEGER DEFAULT 0,

    -- Upstream repository metadata (JSON object, nullable)
    github TEXT,
    github_updated_at TIMESTAMP,

    -- Operator flags
    default_stable_version BOOLEAN DEFAULT 1,
    strict_versions BOOLEAN DEFAULT 0,
    contributors_wanted BOOLEAN DEFAULT 0,
    deprecated_artifacts TEXT,  -- JSON array
    custom_scaladoc TEXT,
    primary_topic TEXT,

    stored_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (organization, repository)
);

-- Releases (identity is the coordinate)
CREATE TABLE IF NOT EXISTS releases (
    organization TEXT NOT NULL,
    repository TEXT NOT NULL,
    artifact TEXT NOT NULL,
    version TEXT NOT NULL,
    platform TEXT NOT NULL,

    group_id TEXT NOT NULL,
    artifact_id TEXT NOT NULL,
    maven_version TEXT NOT NULL,
    target_type TEXT NOT NULL,
    resolver TEXT,
    name TEXT,
    description TEXT,
    released TEXT,
    licenses TEXT,              -- JSON array of {name, short_name, url}
    is_non_standard_lib BOOLEAN DEFAULT 0,
    scala_version TEXT,
    scala_js_version TEXT,
    scala_native_version TEXT,
    sbt_version TEXT,

    stored_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (organization, repository, artifact, version, platform)
);

-- Dependency edges (global, deduplicated by full tuple)
CREATE TABLE IF NOT EXISTS dependencies (
    source_group_id TEXT NOT NULL,
    source_artifact_id TEXT NOT NULL,
    source_version TEXT NOT NULL,
    target_group_id TEXT NOT NULL,
    target_artifact_id TEXT NOT NULL,
    target_version TEXT NOT NULL,
    scope TEXT NOT NULL DEFAULT 'compile',
    PRIMARY KEY (
        source_group_id, source_artifact_id, source_version,
        target_group_id, target_artifact_id, target_version, scope
    )
);

-- Descriptors dropped by a conversion run
CREATE TABLE IF NOT EXISTS conversion_errors (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    maven TEXT NOT NULL,
    reason TEXT NOT NULL,
    detail TEXT,
    recorded_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_releases_project ON releases(organization, repository);
CREATE INDEX IF NOT EXISTS idx_releases_maven ON releases(group_id, artifact_id, maven_version);
CREATE INDEX IF NOT EXISTS idx_dependencies_target ON dependencies(target_group_id, target_artifact_id);
CREATE INDEX IF NOT EXISTS idx_conversion_errors_reason ON conversion_errors(reason);
"""


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Get current schema version from database."""
    try:
        cursor = conn.execute(
            "SELECT MAX(version) FROM _schema_info"
        )
        result = cursor.fetchone()
        return result[0] if result[0] is not None else 0
    except sqlite3.OperationalError:
        # Table doesn't exist yet
        return 0


def apply_schema(conn: sqlite3.Connection, version: int = CURRENT_VERSION) -> None:
    """
    Apply schema migrations up to the given version.

    Unlike a cache, the catalog holds operator flags that cannot be
    rebuilt, so migrations only ever add; nothing is dropped.
    """
    current = get_schema_version(conn)
    for migration_version, description, sql in get_migrations():
        if current < migration_version <= version:
            logger.info(f"Applying schema v{migration_version}: {description}")
            conn.executescript(sql)
            conn.execute(
                "INSERT OR REPLACE INTO _schema_info (version, description) VALUES (?, ?)",
                (migration_version, description)
            )
    conn.commit()


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Ensure database has current schema, migrating if necessary."""
    current = get_schema_version(conn)

    if current < CURRENT_VERSION:
        apply_schema(conn, CURRENT_VERSION)


def get_migrations() -> List[Tuple[int, str, str]]:
    """
    Get list of migrations.

    Returns:
        List of (version, description, sql) tuples
    """
    return [
        (1, "Initial schema", SCHEMA_V1),
    ]
