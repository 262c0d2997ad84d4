"""
Conversion outcome domain objects for artifactindex.

Each descriptor entering the batch pipeline is either kept (as a
PreparedArtifact) or dropped with a reason. The ConversionReport collects
the drops so that drop statistics of a run can be reconstructed.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import semantic_version

from .descriptor import ArtifactDescriptor
from .platform import Platform
from .project import Project
from .reference import MavenReference, RepositoryReference
from .release import DependencyEdge, Release


class DropReason(Enum):
    """Why a descriptor did not contribute to a run."""
    UNKNOWN_PLATFORM = "unknown_platform"
    INVALID_VERSION = "invalid_version"
    NO_REPOSITORY = "no_repository"


@dataclass(frozen=True)
class PreparedArtifact:
    """A descriptor that passed classification, version parsing and repository resolution."""
    repository: RepositoryReference
    artifact_name: str
    platform: Platform
    descriptor: ArtifactDescriptor
    created: datetime
    resolver: Optional[str]
    version: semantic_version.Version
    is_non_standard_lib: bool


@dataclass(frozen=True)
class DroppedArtifact:
    """A descriptor excluded from a run."""
    maven: MavenReference
    reason: DropReason
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'type': 'dropped',
            'maven': str(self.maven),
            'reason': self.reason.value,
        }
        if self.detail:
            result['detail'] = self.detail
        return result


@dataclass
class ConversionReport:
    """Kept/dropped statistics of one batch run."""
    total: int = 0
    kept: int = 0
    drops: List[DroppedArtifact] = field(default_factory=list)

    def add_kept(self) -> None:
        self.total += 1
        self.kept += 1

    def add_drop(self, drop: DroppedArtifact) -> None:
        self.total += 1
        self.drops.append(drop)

    @property
    def dropped(self) -> int:
        return len(self.drops)

    def counts_by_reason(self) -> Dict[str, int]:
        return dict(Counter(drop.reason.value for drop in self.drops))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'summary',
            'total': self.total,
            'kept': self.kept,
            'dropped': self.dropped,
            'drops_by_reason': self.counts_by_reason(),
        }


@dataclass
class ConversionResult:
    """The three output collections of a batch run plus its report."""
    projects: List[Project] = field(default_factory=list)
    releases: List[Release] = field(default_factory=list)
    dependencies: List[DependencyEdge] = field(default_factory=list)
    report: ConversionReport = field(default_factory=ConversionReport)

    def collections(self) -> Tuple[List[Project], List[Release], List[DependencyEdge]]:
        return self.projects, self.releases, self.dependencies
