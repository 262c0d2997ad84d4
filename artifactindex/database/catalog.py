"""
Catalog database operations for artifactindex.

Provides CRUD operations for projects, releases and dependency edges,
mapping between domain objects and database records.
"""

import json
from datetime import datetime
from typing import Any, Dict, Generator, Iterable, List, Optional

from ..domain import (
    DependencyEdge,
    License,
    MavenReference,
    Project,
    Release,
    ReleaseCoordinate,
    RepositoryMetadata,
    RepositoryReference,
    StoredFlags,
)
from .connection import Database

_LIST_FIELDS = (
    'artifacts', 'target_type', 'scala_version', 'scala_js_version',
    'scala_native_version', 'sbt_version',
)


def _project_to_record(project: Project) -> Dict[str, Any]:
    """Convert Project domain object to database record."""
    record: Dict[str, Any] = {
        'organization': project.organization,
        'repository': project.repository,
        'default_artifact': project.default_artifact,
        'release_count': project.release_count,
        'created': project.created,
        'updated': project.updated,
        'dependency_count': project.dependency_count,
        'dependent_count': project.dependent_count,
        'github': json.dumps(project.github.to_dict()) if project.github else None,
        'stored_at': datetime.now().isoformat(),
    }
    for name in _LIST_FIELDS:
        record[name] = json.dumps(list(getattr(project, name)))

    flags = project.flags
    record.update({
        'default_stable_version': flags.default_stable_version,
        'strict_versions': flags.strict_versions,
        'contributors_wanted': flags.contributors_wanted,
        'deprecated_artifacts': json.dumps(sorted(flags.deprecated_artifacts)),
        'custom_scaladoc': flags.custom_scaladoc,
        'primary_topic': flags.primary_topic,
    })
    return record


def _json_list(value: Optional[str]) -> tuple:
    return tuple(json.loads(value)) if value else ()


def record_to_flags(record: Dict[str, Any]) -> StoredFlags:
    """Extract the operator flags of a project record."""
    return StoredFlags(
        default_stable_version=bool(record.get('default_stable_version', True)),
        strict_versions=bool(record.get('strict_versions', False)),
        contributors_wanted=bool(record.get('contributors_wanted', False)),
        deprecated_artifacts=frozenset(_json_list(record.get('deprecated_artifacts'))),
        custom_scaladoc=record.get('custom_scaladoc'),
        primary_topic=record.get('primary_topic'),
    )


def record_to_project(record: Dict[str, Any]) -> Project:
    """
    Convert a database record to a Project domain object.

    Args:
        record: Database row as dictionary

    Returns:
        Project domain object
    """
    github = None
    if record.get('github'):
        github = RepositoryMetadata.from_dict(json.loads(record['github']))

    return Project(
        organization=record['organization'],
        repository=record['repository'],
        github=github,
        artifacts=_json_list(record.get('artifacts')),
        default_artifact=record.get('default_artifact'),
        release_count=record.get('release_count') or 0,
        created=record.get('created'),
        updated=record.get('updated'),
        target_type=_json_list(record.get('target_type')),
        scala_version=_json_list(record.get('scala_version')),
        scala_js_version=_json_list(record.get('scala_js_version')),
        scala_native_version=_json_list(record.get('scala_native_version')),
        sbt_version=_json_list(record.get('sbt_version')),
        dependency_count=record.get('dependency_count') or 0,
        dependent_count=record.get('dependent_count') or 0,
        flags=record_to_flags(record),
    )


def _release_to_record(release: Release) -> Dict[str, Any]:
    coordinate = release.coordinate
    return {
        'organization': coordinate.organization,
        'repository': coordinate.repository,
        'artifact': coordinate.artifact,
        'version': coordinate.version,
        'platform': coordinate.platform,
        'group_id': release.maven.group_id,
        'artifact_id': release.maven.artifact_id,
        'maven_version': release.maven.version,
        'target_type': release.target_type,
        'resolver': release.resolver,
        'name': release.name,
        'description': release.description,
        'released': release.released,
        'licenses': json.dumps([lic.to_dict() for lic in release.licenses]),
        'is_non_standard_lib': release.is_non_standard_lib,
        'scala_version': release.scala_version,
        'scala_js_version': release.scala_js_version,
        'scala_native_version': release.scala_native_version,
        'sbt_version': release.sbt_version,
    }


def record_to_release(record: Dict[str, Any]) -> Release:
    """Convert a database record to a Release domain object."""
    licenses = tuple(
        License(name=lic['name'], short_name=lic['short_name'], url=lic.get('url'))
        for lic in json.loads(record.get('licenses') or '[]')
    )
    return Release(
        coordinate=ReleaseCoordinate(
            organization=record['organization'],
            repository=record['repository'],
            artifact=record['artifact'],
            version=record['version'],
            platform=record['platform'],
        ),
        maven=MavenReference(record['group_id'], record['artifact_id'], record['maven_version']),
        target_type=record['target_type'],
        resolver=record.get('resolver'),
        name=record.get('name'),
        description=record.get('description'),
        released=record.get('released'),
        licenses=licenses,
        is_non_standard_lib=bool(record.get('is_non_standard_lib')),
        scala_version=record.get('scala_version'),
        scala_js_version=record.get('scala_js_version'),
        scala_native_version=record.get('scala_native_version'),
        sbt_version=record.get('sbt_version'),
    )


def _insert(db: Database, table: str, record: Dict[str, Any], verb: str = "INSERT") -> None:
    columns = list(record.keys())
    placeholders = ', '.join(['?' for _ in columns])
    column_names = ', '.join(columns)
    db.execute(f"{verb} INTO {table} ({column_names}) VALUES ({placeholders})", tuple(record.values()))


def project_exists(db: Database, reference: RepositoryReference) -> bool:
    db.execute(
        "SELECT 1 FROM projects WHERE organization = ? AND repository = ?",
        (reference.organization, reference.repository)
    )
    return db.fetchone() is not None


def upsert_project(db: Database, project: Project) -> bool:
    """
    Insert or fully replace a project.

    Returns:
        True if the project was inserted, False if it replaced an existing row
    """
    record = _project_to_record(project)

    if project_exists(db, project.reference):
        keys = [k for k in record if k not in ('organization', 'repository')]
        set_clause = ', '.join([f"{k} = ?" for k in keys])
        db.execute(
            f"UPDATE projects SET {set_clause} WHERE organization = ? AND repository = ?",
            tuple(record[k] for k in keys) + (project.organization, project.repository)
        )
        return False

    _insert(db, 'projects', record)
    return True


def upsert_release(db: Database, release: Release) -> None:
    """Store a release; an existing release with the same coordinate is replaced."""
    _insert(db, 'releases', _release_to_record(release), verb="INSERT OR REPLACE")


def insert_dependencies(db: Database, edges: Iterable[DependencyEdge]) -> None:
    """Store dependency edges, ignoring ones already present."""
    db.executemany(
        """INSERT OR IGNORE INTO dependencies (
               source_group_id, source_artifact_id, source_version,
               target_group_id, target_artifact_id, target_version, scope
           ) VALUES (?, ?, ?, ?, ?, ?, ?)""",
        [
            (
                e.source.group_id, e.source.artifact_id, e.source.version,
                e.target.group_id, e.target.artifact_id, e.target.version, e.scope,
            )
            for e in edges
        ]
    )


def get_project(db: Database, reference: RepositoryReference) -> Optional[Project]:
    db.execute(
        "SELECT * FROM projects WHERE organization = ? AND repository = ?",
        (reference.organization, reference.repository)
    )
    row = db.fetchone()
    return record_to_project(dict(row)) if row else None


def get_all_projects(db: Database) -> Generator[Project, None, None]:
    """Get all projects, ordered by organization and repository."""
    db.execute("SELECT * FROM projects ORDER BY organization, repository")
    for row in db.fetchall():
        yield record_to_project(dict(row))


def get_flags(db: Database, reference: RepositoryReference) -> Optional[StoredFlags]:
    """Stored flags of a project, None if the project was never stored."""
    db.execute(
        "SELECT * FROM projects WHERE organization = ? AND repository = ?",
        (reference.organization, reference.repository)
    )
    row = db.fetchone()
    return record_to_flags(dict(row)) if row else None


def set_flags(db: Database, reference: RepositoryReference, flags: StoredFlags) -> bool:
    """
    Replace the flags of a stored project.

    Returns:
        True if the project exists and was updated
    """
    db.execute(
        """UPDATE projects SET
               default_stable_version = ?, strict_versions = ?, contributors_wanted = ?,
               deprecated_artifacts = ?, custom_scaladoc = ?, primary_topic = ?
           WHERE organization = ? AND repository = ?""",
        (
            flags.default_stable_version, flags.strict_versions, flags.contributors_wanted,
            json.dumps(sorted(flags.deprecated_artifacts)), flags.custom_scaladoc, flags.primary_topic,
            reference.organization, reference.repository,
        )
    )
    return db.rowcount > 0


def update_metadata(
    db: Database,
    reference: RepositoryReference,
    metadata: RepositoryMetadata,
    now: datetime,
) -> bool:
    """Store upstream repository metadata of a project."""
    db.execute(
        "UPDATE projects SET github = ?, github_updated_at = ? WHERE organization = ? AND repository = ?",
        (json.dumps(metadata.to_dict()), now.isoformat(), reference.organization, reference.repository)
    )
    return db.rowcount > 0


def get_metadata(db: Database, reference: RepositoryReference) -> Optional[RepositoryMetadata]:
    db.execute(
        "SELECT github FROM projects WHERE organization = ? AND repository = ?",
        (reference.organization, reference.repository)
    )
    row = db.fetchone()
    if row and row['github']:
        return RepositoryMetadata.from_dict(json.loads(row['github']))
    return None


def get_releases(db: Database, reference: RepositoryReference) -> List[Release]:
    """Get the releases of one project, ordered by coordinate."""
    db.execute(
        """SELECT * FROM releases WHERE organization = ? AND repository = ?
           ORDER BY artifact, version, platform""",
        (reference.organization, reference.repository)
    )
    return [record_to_release(dict(row)) for row in db.fetchall()]


def get_indexed_releases(db: Database) -> Dict[RepositoryReference, List[Release]]:
    """Get all stored releases grouped by repository."""
    db.execute("SELECT * FROM releases ORDER BY organization, repository, artifact, version, platform")
    result: Dict[RepositoryReference, List[Release]] = {}
    for row in db.fetchall():
        release = record_to_release(dict(row))
        result.setdefault(release.reference, []).append(release)
    return result


def get_dependencies(db: Database, source: Optional[MavenReference] = None) -> List[DependencyEdge]:
    """Get dependency edges, optionally only those declared by one release."""
    if source is None:
        db.execute("SELECT * FROM dependencies")
    else:
        db.execute(
            """SELECT * FROM dependencies
               WHERE source_group_id = ? AND source_artifact_id = ? AND source_version = ?""",
            (source.group_id, source.artifact_id, source.version)
        )
    return sorted(
        DependencyEdge(
            source=MavenReference(row['source_group_id'], row['source_artifact_id'], row['source_version']),
            target=MavenReference(row['target_group_id'], row['target_artifact_id'], row['target_version']),
            scope=row['scope'],
        )
        for row in db.fetchall()
    )


def get_project_count(db: Database) -> int:
    db.execute("SELECT COUNT(*) as count FROM projects")
    row = db.fetchone()
    return row['count'] if row else 0
