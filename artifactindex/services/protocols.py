"""
Collaborator interfaces used by the conversion and publish services.

The services depend only on these protocols. Default implementations live
in artifactindex.infra and artifactindex.database; tests substitute mocks.
"""

from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence

from ..domain import (
    ArtifactDescriptor,
    DependencyEdge,
    License,
    Project,
    RawLicense,
    Release,
    RepositoryMetadata,
    RepositoryReference,
    StoredFlags,
)


class DescriptorParser(Protocol):
    def parse(self, payload: bytes) -> ArtifactDescriptor:
        """Raises DescriptorParseError when the payload is not a descriptor."""
        ...


class RepositoryResolver(Protocol):
    def resolve(self, descriptor: ArtifactDescriptor) -> Optional[RepositoryReference]:
        ...


class RepositoryMetadataReader(Protocol):
    def read(self, reference: RepositoryReference) -> Optional[RepositoryMetadata]:
        ...


class LicenseNormalizer(Protocol):
    def normalize(self, licenses: Iterable[RawLicense]) -> List[License]:
        ...


class PriorStateStore(Protocol):
    def releases_of(self, reference: RepositoryReference) -> List[Release]:
        ...

    def flags_of(self, reference: RepositoryReference) -> Optional[StoredFlags]:
        ...

    def project_of(self, reference: RepositoryReference) -> Optional[Project]:
        ...


class PersistenceSink(Protocol):
    def insert_artifact(
        self,
        project: Project,
        release: Release,
        dependencies: Sequence[DependencyEdge],
        now: datetime,
    ) -> bool:
        """Store one artifact; return True when the project did not exist before."""
        ...

    def update_metadata(
        self,
        reference: RepositoryReference,
        metadata: RepositoryMetadata,
        now: datetime,
    ) -> None:
        ...


class TempStore(Protocol):
    def create(self, data: bytes, sha1: str, suffix: str) -> Path:
        ...

    def delete(self, path: Path) -> None:
        ...


class ReleaseSelectionPolicy(Protocol):
    def select(
        self,
        repository: RepositoryReference,
        releases: Sequence[Release],
        flags: StoredFlags,
    ) -> Optional[Release]:
        """Pick the release that represents the project, or None if there are none."""
        ...
