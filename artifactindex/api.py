"""
High-level Python API for artifactindex.

Wires the default collaborators (descriptor reader, repository resolver,
license normalizer, catalog store, GitHub client) from configuration and
exposes the batch conversion and publish pipelines.

Example:
    import artifactindex

    # Create instance (uses config defaults)
    ai = artifactindex.ArtifactIndex()

    # Batch conversion of a descriptor dump
    result = ai.convert("descriptors.jsonl")
    print(result.report.to_dict())

    # Publish a single descriptor
    outcome = ai.publish(data, login="alice", repositories=["typelevel/cats"])
    print(outcome.status)

    # Inspect the catalog
    project = ai.project("typelevel/cats")
    ai.set_flags("typelevel/cats", strict_versions=True)

    # Low-level access to services
    ai.conversion_service
    ai.publish_service
    ai.store
"""

from concurrent.futures import Executor
from dataclasses import fields, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union
import logging

from .config import load_config
from .database import CatalogStore, get_database_info
from .domain import (
    ConversionResult,
    Identity,
    Project,
    PublishResult,
    Release,
    RepositoryReference,
    StoredFlags,
)
from .infra import GitHubClient, GitHubRepoResolver, JsonDescriptorReader, LicenseNormalizer, TempStore
from .services import ConversionService, DefaultReleaseSelection, PublishService

logger = logging.getLogger(__name__)

RepositoryLike = Union[str, RepositoryReference]


def _reference(value: RepositoryLike) -> RepositoryReference:
    if isinstance(value, RepositoryReference):
        return value
    return RepositoryReference.parse(value)


class ArtifactIndex:
    """
    High-level API for artifactindex.

    Example:
        ai = ArtifactIndex(db_path=Path("catalog.db"))
        ai.convert("descriptors.jsonl")
        for project in ai.projects():
            print(project.reference, project.default_artifact)
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
        db_path: Optional[Path] = None,
        executor: Optional[Executor] = None,
    ):
        """
        Initialize ArtifactIndex.

        Args:
            config_path: Path to config file (default: ~/.artifactindex/config.json)
            config: Full config dict (overrides file if provided)
            db_path: Catalog database path (overrides config)
            executor: Runs metadata refreshes after publishes; inline if None
        """
        self._config = config if config is not None else load_config(config_path)

        self.reader = JsonDescriptorReader(non_standard=self._config.get('non_standard', []))
        self.resolver = GitHubRepoResolver(claims=self._config.get('claims', {}))
        self.store = CatalogStore(db_path=db_path, config=self._config)

        self._conversion_service = ConversionService(
            resolver=self.resolver,
            license_normalizer=LicenseNormalizer(aliases=self._config.get('licenses', {})),
            metadata_reader=self.store,
            selection_policy=DefaultReleaseSelection(),
            workers=self._config.get('conversion', {}).get('workers', 1),
        )
        self._publish_service = PublishService(
            parser=self.reader,
            converter=self._conversion_service,
            state=self.store,
            sink=self.store,
            temp_store=TempStore(),
            metadata_client_factory=self._metadata_client,
            executor=executor,
        )

    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    @property
    def conversion_service(self) -> ConversionService:
        return self._conversion_service

    @property
    def publish_service(self) -> PublishService:
        return self._publish_service

    def _metadata_client(self, identity: Identity) -> Optional[GitHubClient]:
        return GitHubClient.from_config(self._config, token=identity.token)

    # Pipelines

    def convert(self, path: Union[str, Path], save: bool = True) -> ConversionResult:
        """
        Convert every descriptor of a file against the stored catalog.

        Args:
            path: JSON, JSON array or JSONL descriptor file
            save: Persist the result (False for a dry run)

        Returns:
            ConversionResult with the full project, release and dependency sets
        """
        descriptors = list(self.reader.read_file(Path(path)))
        logger.info(f"Read {len(descriptors)} descriptors from {path}")

        result = self._conversion_service.convert_all(
            descriptors, self.store.indexed_releases(), self.store
        )
        if save:
            self.store.save(result)
        return result

    def identity(
        self,
        login: str,
        repositories: Iterable[RepositoryLike] = (),
        token: Optional[str] = None,
        admin: bool = False,
    ) -> Identity:
        """Build a publisher identity; admins (flagged or configured) may publish anywhere."""
        admins = self._config.get('publishing', {}).get('admins', [])
        return Identity(
            login=login,
            repositories=frozenset(_reference(r) for r in repositories),
            has_publishing_authority=admin or login in admins,
            token=token,
        )

    def publish(
        self,
        data: bytes,
        path: str = "<stdin>",
        creation_date: Optional[datetime] = None,
        login: Optional[str] = None,
        repositories: Iterable[RepositoryLike] = (),
        token: Optional[str] = None,
        admin: bool = False,
    ) -> PublishResult:
        """
        Publish one descriptor payload.

        Without a login the caller is trusted and no authorization check is made.
        """
        identity = self.identity(login, repositories, token, admin) if login else None
        return self._publish_service.publish(
            path, data, creation_date or datetime.now(timezone.utc), identity
        )

    # Catalog access

    def project(self, reference: RepositoryLike) -> Optional[Project]:
        return self.store.project_of(_reference(reference))

    def releases(self, reference: RepositoryLike) -> List[Release]:
        return self.store.releases_of(_reference(reference))

    def projects(self) -> List[Project]:
        return self.store.projects()

    def set_flags(self, reference: RepositoryLike, **changes: Any) -> Optional[StoredFlags]:
        """
        Change operator flags of a stored project.

        Returns:
            The new flags, or None if the project is not in the catalog

        Raises:
            ValueError: on an unknown flag name
        """
        known = {f.name for f in fields(StoredFlags)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown flags: {', '.join(sorted(unknown))}")

        ref = _reference(reference)
        current = self.store.flags_of(ref)
        if current is None:
            return None

        if 'deprecated_artifacts' in changes:
            changes['deprecated_artifacts'] = frozenset(changes['deprecated_artifacts'])
        flags = replace(current, **changes)
        self.store.set_flags(ref, flags)
        return flags

    def info(self) -> Dict[str, Any]:
        return get_database_info(self._config if self.store.db_path is None else {
            'database': {'path': str(self.store.db_path)}
        })


# Convenience function for quick access
def create(**kwargs) -> ArtifactIndex:
    """
    Create an ArtifactIndex instance.

    Args:
        **kwargs: Arguments passed to ArtifactIndex

    Returns:
        Configured ArtifactIndex instance
    """
    return ArtifactIndex(**kwargs)
