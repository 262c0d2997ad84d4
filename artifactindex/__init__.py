"""
artifactindex - A catalog of published library artifacts.

artifactindex groups published artifacts (identified by maven coordinates)
by their source repository into projects, keeps one release per
coordinate and records the declared dependencies between artifacts.

Quick Start:
    import artifactindex

    # Create instance
    ai = artifactindex.ArtifactIndex()

    # Batch conversion of a descriptor dump
    result = ai.convert("descriptors.jsonl")
    for project in result.projects:
        print(project.reference, project.default_artifact)

    # Publish a single descriptor
    outcome = ai.publish(payload, login="alice", repositories=["typelevel/cats"])
    if not outcome.is_success:
        print(outcome.status)

    # Operator flags survive later conversions
    ai.set_flags("typelevel/cats", strict_versions=True)

Domain Objects:
    ArtifactDescriptor - One published artifact as read from its descriptor
    Release - One release per (organization, repository, artifact, version, platform)
    Project - Per-repository aggregate over all releases
    DependencyEdge - Declared dependency between two maven references

Services:
    ConversionService - Batch and single-descriptor conversion
    PublishService - Publish pipeline with authorization

Publish results:
    Success, InvalidPom, NoGithubRepo, Forbidden
"""

__version__ = "0.3.0"

# High-level API
from .api import ArtifactIndex, create

# Domain objects
from .domain import (
    ArtifactDescriptor,
    DependencyEdge,
    Forbidden,
    Identity,
    InvalidPom,
    MavenReference,
    NoGithubRepo,
    Platform,
    PlatformType,
    Project,
    PublishResult,
    Release,
    RepositoryReference,
    StoredFlags,
    Success,
)

# Services (for advanced use)
from .services import (
    ConversionService,
    PublishService,
    DefaultReleaseSelection,
)

# Configuration
from .config import load_config, save_config

__all__ = [
    # Version
    "__version__",
    # High-level API
    "ArtifactIndex",
    "create",
    # Domain objects
    "ArtifactDescriptor",
    "DependencyEdge",
    "MavenReference",
    "Platform",
    "PlatformType",
    "Project",
    "Release",
    "RepositoryReference",
    "StoredFlags",
    "Identity",
    "PublishResult",
    "Success",
    "InvalidPom",
    "NoGithubRepo",
    "Forbidden",
    # Services
    "ConversionService",
    "PublishService",
    "DefaultReleaseSelection",
    # Configuration
    "load_config",
    "save_config",
]
