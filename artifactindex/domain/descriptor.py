"""
Artifact descriptor: the input unit of the conversion pipelines.

Descriptors are produced by a DescriptorParser and consumed read-only.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .reference import MavenReference


@dataclass(frozen=True)
class RawDependency:
    """A dependency as declared by the descriptor."""
    reference: MavenReference
    scope: Optional[str] = None


@dataclass(frozen=True)
class RawLicense:
    """A license as declared by the descriptor, before normalization."""
    name: str
    url: Optional[str] = None


@dataclass(frozen=True)
class ArtifactDescriptor:
    """
    One published artifact as described by its build descriptor.

    artifact_name and platform are the two halves of the artifact id
    ("cats-core" and "_2.13" for "cats-core_2.13"); platform is the raw
    suffix and is classified later.
    """
    maven: MavenReference
    artifact_name: str
    platform: str
    created: datetime
    name: Optional[str] = None
    description: Optional[str] = None
    resolver: Optional[str] = None
    dependencies: Tuple[RawDependency, ...] = ()
    licenses: Tuple[RawLicense, ...] = ()
    scm_url: Optional[str] = None
    homepage: Optional[str] = None
    is_non_standard_lib: bool = False

    @property
    def version(self) -> str:
        return self.maven.version

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'maven': self.maven.to_dict(),
            'artifact_name': self.artifact_name,
            'platform': self.platform,
            'created': self.created.isoformat(),
            'name': self.name,
            'description': self.description,
            'resolver': self.resolver,
            'dependencies': [
                {**dep.reference.to_dict(), 'scope': dep.scope} for dep in self.dependencies
            ],
            'licenses': [{'name': lic.name, 'url': lic.url} for lic in self.licenses],
            'scm_url': self.scm_url,
            'homepage': self.homepage,
            'is_non_standard_lib': self.is_non_standard_lib,
        }
        return {k: v for k, v in result.items() if v is not None}

    def __str__(self) -> str:
        return str(self.maven)
