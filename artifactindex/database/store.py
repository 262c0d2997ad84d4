"""
SQLite-backed catalog store.

CatalogStore is the default collaborator of the conversion and publish
services: it provides stored project state (releases, flags, metadata)
and persists converted artifacts. Each call opens its own connection so
one store can be shared across threads.
"""

import logging
import threading
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from ..domain import (
    ConversionResult,
    DependencyEdge,
    DroppedArtifact,
    Project,
    Release,
    RepositoryMetadata,
    RepositoryReference,
    StoredFlags,
)
from . import catalog
from .connection import Database, transaction
from .errors import record_drops

logger = logging.getLogger(__name__)


class CatalogStore:
    """
    Catalog persistence.

    Implements the PriorStateStore, PersistenceSink and
    RepositoryMetadataReader protocols.

    Example:
        store = CatalogStore(config=config)
        result = service.convert_all(descriptors, store.indexed_releases(), store)
        store.save(result)
    """

    def __init__(self, db_path: Optional[Path] = None, config: Optional[dict] = None):
        self.db_path = Path(db_path) if db_path else None
        self.config = config
        self._write_lock = threading.Lock()

    def _db(self, read_only: bool = False) -> Database:
        return Database(db_path=self.db_path, config=self.config, read_only=read_only)

    # Prior state

    def releases_of(self, reference: RepositoryReference) -> List[Release]:
        with self._db() as db:
            return catalog.get_releases(db, reference)

    def flags_of(self, reference: RepositoryReference) -> Optional[StoredFlags]:
        with self._db() as db:
            return catalog.get_flags(db, reference)

    def project_of(self, reference: RepositoryReference) -> Optional[Project]:
        with self._db() as db:
            return catalog.get_project(db, reference)

    def indexed_releases(self) -> Dict[RepositoryReference, List[Release]]:
        """All stored releases grouped by repository."""
        with self._db() as db:
            return catalog.get_indexed_releases(db)

    def projects(self) -> List[Project]:
        with self._db() as db:
            return list(catalog.get_all_projects(db))

    def dependencies_of(self, release: Release) -> List[DependencyEdge]:
        with self._db() as db:
            return catalog.get_dependencies(db, release.maven)

    # Metadata

    def read(self, reference: RepositoryReference) -> Optional[RepositoryMetadata]:
        """Stored upstream metadata of a repository."""
        with self._db() as db:
            return catalog.get_metadata(db, reference)

    def update_metadata(
        self,
        reference: RepositoryReference,
        metadata: RepositoryMetadata,
        now: datetime,
    ) -> None:
        with self._write_lock, self._db() as db:
            with transaction(db, immediate=True):
                if not catalog.update_metadata(db, reference, metadata, now):
                    logger.warning(f"Metadata for unknown project {reference} not stored")

    # Persistence

    def insert_artifact(
        self,
        project: Project,
        release: Release,
        dependencies: Sequence[DependencyEdge],
        now: datetime,
    ) -> bool:
        """
        Store one published artifact atomically.

        The stored flags of an existing project are kept; everything else
        in the project row is replaced.

        Returns:
            True if the project did not exist before this call
        """
        with self._write_lock, self._db() as db:
            with transaction(db, immediate=True):
                stored_flags = catalog.get_flags(db, project.reference)
                if stored_flags is not None:
                    project = replace(project, flags=stored_flags)
                is_new = catalog.upsert_project(db, project)
                catalog.upsert_release(db, release)
                catalog.insert_dependencies(db, dependencies)

        logger.debug(f"Stored {release.maven} at {now.isoformat()} (new project: {is_new})")
        return is_new

    def save(self, result: ConversionResult) -> None:
        """Persist the collections of a batch run, and its drops, in one transaction."""
        projects, releases, dependencies = result.collections()
        with self._write_lock, self._db() as db:
            with transaction(db, immediate=True):
                for project in projects:
                    catalog.upsert_project(db, project)
                for release in releases:
                    catalog.upsert_release(db, release)
                catalog.insert_dependencies(db, dependencies)
                record_drops(db, result.report.drops)

        logger.info(
            f"Saved {len(projects)} projects, {len(releases)} releases, "
            f"{len(dependencies)} dependencies"
        )

    def record_drops(self, drops: Iterable[DroppedArtifact]) -> int:
        with self._write_lock, self._db() as db:
            with transaction(db, immediate=True):
                return record_drops(db, drops)

    # Flags

    def set_flags(self, reference: RepositoryReference, flags: StoredFlags) -> bool:
        """Replace the operator flags of a stored project."""
        with self._write_lock, self._db() as db:
            with transaction(db, immediate=True):
                return catalog.set_flags(db, reference, flags)
