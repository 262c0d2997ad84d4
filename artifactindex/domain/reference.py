"""
Reference types for artifactindex.

A RepositoryReference names the source repository that owns artifacts and
is the grouping key for every aggregate. A MavenReference names one
published file set (group:artifact:version).
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True, order=True)
class RepositoryReference:
    """(organization, repository) pair. Equality is exact and case-sensitive."""
    organization: str
    repository: str

    @classmethod
    def parse(cls, value: str) -> 'RepositoryReference':
        """
        Parse an "organization/repository" string.

        Raises:
            ValueError: if the string is not exactly two non-empty segments
        """
        parts = value.strip().split('/')
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"Expected 'organization/repository', got {value!r}")
        return cls(organization=parts[0], repository=parts[1])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'organization': self.organization,
            'repository': self.repository,
        }

    def __str__(self) -> str:
        return f"{self.organization}/{self.repository}"


@dataclass(frozen=True, order=True)
class MavenReference:
    """Maven coordinate without scope."""
    group_id: str
    artifact_id: str
    version: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'group_id': self.group_id,
            'artifact_id': self.artifact_id,
            'version': self.version,
        }

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"
