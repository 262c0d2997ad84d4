"""
Release building for artifactindex.

Two steps turn a descriptor into a Release:

1. prepare_artifact() classifies the platform, parses the version and
   resolves the owning repository. It returns either a PreparedArtifact or
   a DroppedArtifact carrying the reason; it never raises for bad data.
2. ReleaseBuilder.build() turns a PreparedArtifact into the immutable
   Release record.
"""

from datetime import datetime, timezone
from typing import Optional, Union

import semantic_version

from ..domain import (
    ArtifactDescriptor,
    DropReason,
    DroppedArtifact,
    PreparedArtifact,
    Release,
    ReleaseCoordinate,
    RepositoryReference,
)
from ..errors import InvalidVersionError, UnknownPlatformError
from .platform_classifier import classify_platform
from .protocols import LicenseNormalizer, RepositoryResolver


def parse_version(raw: str) -> semantic_version.Version:
    """
    Parse a release version as a semantic version.

    Maven-style versions are coerced: a missing patch or minor part is
    zero-filled, so "1.0-SNAPSHOT" reads as 1.0.0-SNAPSHOT and "1.0.0-M1"
    is a pre-release of 1.0.0.

    Raises:
        InvalidVersionError: if the string does not start with a numeric version
    """
    try:
        return semantic_version.Version.coerce(raw.strip())
    except (ValueError, AttributeError):
        raise InvalidVersionError(raw)


def is_prerelease(version: semantic_version.Version) -> bool:
    return bool(version.prerelease)


def prepare_artifact(
    descriptor: ArtifactDescriptor,
    resolver: RepositoryResolver,
    created: Optional[datetime] = None,
    repository: Optional[RepositoryReference] = None,
) -> Union[PreparedArtifact, DroppedArtifact]:
    """
    Validate one descriptor and attach its repository.

    Args:
        descriptor: Descriptor to prepare
        resolver: Repository resolver used when repository is not given
        created: Release timestamp (defaults to descriptor.created)
        repository: Already-resolved repository, skips the resolver

    Returns:
        PreparedArtifact, or DroppedArtifact with the first failing reason
    """
    try:
        platform = classify_platform(descriptor.platform)
    except UnknownPlatformError as e:
        return DroppedArtifact(descriptor.maven, DropReason.UNKNOWN_PLATFORM, str(e))

    try:
        version = parse_version(descriptor.version)
    except InvalidVersionError as e:
        return DroppedArtifact(descriptor.maven, DropReason.INVALID_VERSION, str(e))

    if repository is None:
        repository = resolver.resolve(descriptor)
    if repository is None:
        return DroppedArtifact(
            descriptor.maven, DropReason.NO_REPOSITORY, descriptor.scm_url or descriptor.homepage
        )

    return PreparedArtifact(
        repository=repository,
        artifact_name=descriptor.artifact_name,
        platform=platform,
        descriptor=descriptor,
        created=created or descriptor.created,
        resolver=descriptor.resolver,
        version=version,
        is_non_standard_lib=descriptor.is_non_standard_lib,
    )


class ReleaseBuilder:
    """
    Builds Release records. Pure: the only collaborator is the license
    normalizer, which must itself be side-effect free.
    """

    def __init__(self, license_normalizer: LicenseNormalizer):
        self.licenses = license_normalizer

    def build(self, prepared: PreparedArtifact) -> Release:
        descriptor = prepared.descriptor
        platform = prepared.platform
        coordinate = ReleaseCoordinate(
            organization=prepared.repository.organization,
            repository=prepared.repository.repository,
            artifact=prepared.artifact_name,
            version=descriptor.version,
            platform=platform.label,
        )
        return Release(
            coordinate=coordinate,
            maven=descriptor.maven,
            target_type=platform.type.value,
            resolver=prepared.resolver,
            name=descriptor.name,
            description=descriptor.description,
            released=format_date(prepared.created),
            licenses=tuple(self.licenses.normalize(descriptor.licenses)),
            is_non_standard_lib=prepared.is_non_standard_lib,
            scala_version=platform.scala_version,
            scala_js_version=platform.scala_js_version,
            scala_native_version=platform.scala_native_version,
            sbt_version=platform.sbt_version,
        )


def format_date(value: datetime) -> str:
    """Canonical date string of a release (ISO-8601, seconds precision)."""
    return value.replace(microsecond=0).isoformat()


def parse_date(value: str) -> datetime:
    """
    Inverse of format_date. Naive values are taken as UTC so that dates
    from different sources stay comparable.

    Raises:
        ValueError: on malformed input
    """
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
