"""
Project domain object for artifactindex.

A Project is the per-repository summary over every known release. It is
immutable and only ever replaced as a whole: to "update" a Project, build a
new one (dataclasses.replace) and store it.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Optional, Tuple

from .reference import RepositoryReference


@dataclass(frozen=True)
class RepositoryMetadata:
    """Upstream (GitHub) repository metadata used for project display fields."""
    owner: str
    name: str
    description: Optional[str] = None
    homepage: Optional[str] = None
    stars: int = 0
    forks: int = 0
    watchers: int = 0
    open_issues_count: int = 0
    is_fork: bool = False
    is_archived: bool = False
    default_branch: str = "main"
    topics: tuple = ()
    license_key: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    pushed_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'owner': self.owner,
            'name': self.name,
            'description': self.description,
            'homepage': self.homepage,
            'stars': self.stars,
            'forks': self.forks,
            'watchers': self.watchers,
            'open_issues_count': self.open_issues_count,
            'is_fork': self.is_fork,
            'is_archived': self.is_archived,
            'default_branch': self.default_branch,
            'topics': list(self.topics),
            'license_key': self.license_key,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'pushed_at': self.pushed_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RepositoryMetadata':
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if 'topics' in known:
            known['topics'] = tuple(known['topics'] or ())
        return cls(**known)


@dataclass(frozen=True)
class StoredFlags:
    """
    Operator-controlled project settings.

    These cannot be derived from artifact data; they are kept in the store
    and survive every rebuild of the project.
    """
    default_stable_version: bool = True
    strict_versions: bool = False
    contributors_wanted: bool = False
    deprecated_artifacts: FrozenSet[str] = field(default_factory=frozenset)
    custom_scaladoc: Optional[str] = None
    primary_topic: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'default_stable_version': self.default_stable_version,
            'strict_versions': self.strict_versions,
            'contributors_wanted': self.contributors_wanted,
            'deprecated_artifacts': sorted(self.deprecated_artifacts),
            'custom_scaladoc': self.custom_scaladoc,
            'primary_topic': self.primary_topic,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoredFlags':
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if 'deprecated_artifacts' in known:
            known['deprecated_artifacts'] = frozenset(known['deprecated_artifacts'] or ())
        return cls(**known)


@dataclass(frozen=True)
class Project:
    """
    Summary of all releases owned by one source repository.

    List fields are sorted, distinct tuples. dependency_count and
    dependent_count are placeholders filled by an external collaborator.
    """

    organization: str
    repository: str
    github: Optional[RepositoryMetadata] = None

    artifacts: Tuple[str, ...] = ()
    default_artifact: Optional[str] = None
    release_count: int = 0
    created: Optional[str] = None  # earliest release, ISO-8601
    updated: Optional[str] = None  # latest release, ISO-8601

    target_type: Tuple[str, ...] = ()
    scala_version: Tuple[str, ...] = ()
    scala_js_version: Tuple[str, ...] = ()
    scala_native_version: Tuple[str, ...] = ()
    sbt_version: Tuple[str, ...] = ()

    dependency_count: int = 0
    dependent_count: int = 0

    flags: StoredFlags = field(default_factory=StoredFlags)

    @property
    def reference(self) -> RepositoryReference:
        return RepositoryReference(self.organization, self.repository)

    @classmethod
    def default(cls, reference: RepositoryReference,
                github: Optional[RepositoryMetadata] = None) -> 'Project':
        """An empty project for a repository seen for the first time."""
        return cls(
            organization=reference.organization,
            repository=reference.repository,
            github=github,
        )

    def with_github(self, github: Optional[RepositoryMetadata]) -> 'Project':
        """Create a new Project with refreshed metadata (kept if None)."""
        if github is None:
            return self
        return replace(self, github=github)

    def with_flags(self, flags: StoredFlags) -> 'Project':
        return replace(self, flags=flags)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'organization': self.organization,
            'repository': self.repository,
            'github': self.github.to_dict() if self.github else None,
            'artifacts': list(self.artifacts),
            'default_artifact': self.default_artifact,
            'release_count': self.release_count,
            'created': self.created,
            'updated': self.updated,
            'target_type': list(self.target_type),
            'scala_version': list(self.scala_version),
            'scala_js_version': list(self.scala_js_version),
            'scala_native_version': list(self.scala_native_version),
            'sbt_version': list(self.sbt_version),
            'dependency_count': self.dependency_count,
            'dependent_count': self.dependent_count,
            'flags': self.flags.to_dict(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def to_jsonl(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        return str(self.reference)
