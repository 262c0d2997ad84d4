"""
Domain layer for artifactindex.

Contains pure domain objects with no I/O or side effects:
- ArtifactDescriptor: One published artifact as read from its descriptor
- Platform: Normalized target platform (tagged variant)
- Release: Immutable release record, one per coordinate
- DependencyEdge: Declared dependency between two maven references
- Project: Per-repository aggregate over all releases
- PublishResult: Outcome variants of a single publish

These objects are immutable where possible and provide
serialization methods for JSONL output.
"""

from .reference import RepositoryReference, MavenReference
from .platform import Platform, PlatformType
from .descriptor import ArtifactDescriptor, RawDependency, RawLicense
from .release import Release, ReleaseCoordinate, License, DependencyEdge, dedupe_releases
from .project import Project, RepositoryMetadata, StoredFlags
from .conversion import (
    ConversionReport,
    ConversionResult,
    DropReason,
    DroppedArtifact,
    PreparedArtifact,
)
from .publish import Identity, PublishResult, Success, InvalidPom, NoGithubRepo, Forbidden

__all__ = [
    'RepositoryReference',
    'MavenReference',
    'Platform',
    'PlatformType',
    'ArtifactDescriptor',
    'RawDependency',
    'RawLicense',
    'Release',
    'ReleaseCoordinate',
    'License',
    'DependencyEdge',
    'dedupe_releases',
    'Project',
    'RepositoryMetadata',
    'StoredFlags',
    'ConversionReport',
    'ConversionResult',
    'DropReason',
    'DroppedArtifact',
    'PreparedArtifact',
    'Identity',
    'PublishResult',
    'Success',
    'InvalidPom',
    'NoGithubRepo',
    'Forbidden',
]
