"""
Release and dependency records.

A Release is built once per artifact descriptor and never mutated. Its
identity is its coordinate: two releases with the same coordinate describe
the same artifact, and deduplication keeps the first one seen.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .platform import Platform, PlatformType
from .reference import MavenReference, RepositoryReference


@dataclass(frozen=True)
class License:
    """Normalized license."""
    name: str
    short_name: str
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'short_name': self.short_name, 'url': self.url}


@dataclass(frozen=True, order=True)
class ReleaseCoordinate:
    """(organization, repository, artifact, version, platform) identifying one release."""
    organization: str
    repository: str
    artifact: str
    version: str
    platform: str  # suffix label, see Platform.label

    @property
    def repository_reference(self) -> RepositoryReference:
        return RepositoryReference(self.organization, self.repository)

    def __str__(self) -> str:
        return f"{self.organization}/{self.repository}/{self.artifact}{self.platform}/{self.version}"


@dataclass(frozen=True)
class Release:
    """One published artifact at one version for one platform."""
    coordinate: ReleaseCoordinate
    maven: MavenReference
    target_type: str
    resolver: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    released: Optional[str] = None  # ISO-8601
    licenses: Tuple[License, ...] = ()
    is_non_standard_lib: bool = False
    scala_version: Optional[str] = None
    scala_js_version: Optional[str] = None
    scala_native_version: Optional[str] = None
    sbt_version: Optional[str] = None

    @property
    def reference(self) -> RepositoryReference:
        return self.coordinate.repository_reference

    @property
    def artifact(self) -> str:
        return self.coordinate.artifact

    @property
    def version(self) -> str:
        return self.coordinate.version

    @property
    def platform(self) -> Platform:
        return Platform(
            type=PlatformType(self.target_type),
            scala_version=self.scala_version,
            scala_js_version=self.scala_js_version,
            scala_native_version=self.scala_native_version,
            sbt_version=self.sbt_version,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'organization': self.coordinate.organization,
            'repository': self.coordinate.repository,
            'artifact': self.coordinate.artifact,
            'version': self.coordinate.version,
            'platform': self.coordinate.platform,
            'maven': str(self.maven),
            'resolver': self.resolver,
            'name': self.name,
            'description': self.description,
            'released': self.released,
            'licenses': [lic.to_dict() for lic in self.licenses],
            'is_non_standard_lib': self.is_non_standard_lib,
            'target_type': self.target_type,
            'scala_version': self.scala_version,
            'scala_js_version': self.scala_js_version,
            'scala_native_version': self.scala_native_version,
            'sbt_version': self.sbt_version,
        }
        return {k: v for k, v in result.items() if v is not None}

    def to_jsonl(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        return str(self.coordinate)


def dedupe_releases(releases: Iterable[Release]) -> List[Release]:
    """Keep the first release for each coordinate, preserving order."""
    seen = set()
    result = []
    for release in releases:
        if release.coordinate in seen:
            continue
        seen.add(release.coordinate)
        result.append(release)
    return result


@dataclass(frozen=True, order=True)
class DependencyEdge:
    """Declared dependency from one maven reference to another."""
    source: MavenReference
    target: MavenReference
    scope: str = "compile"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'source': str(self.source),
            'target': str(self.target),
            'scope': self.scope,
        }

    def __str__(self) -> str:
        return f"{self.source} -> {self.target} ({self.scope})"
