"""
Exception types for artifactindex.

Per-item data errors (a descriptor that cannot become a release) derive from
ArtifactDataError. The batch pipeline drops such items, the publish pipeline
turns them into typed results. Anything else is a collaborator fault and
propagates to the caller.
"""


class CatalogError(Exception):
    """Base class for artifactindex errors."""


class ArtifactDataError(CatalogError):
    """A single artifact descriptor carries unusable data."""


class UnknownPlatformError(ArtifactDataError):
    """The raw platform suffix is not one of the recognized forms."""

    def __init__(self, raw: str):
        super().__init__(f"Unrecognized platform: {raw!r}")
        self.raw = raw


class InvalidVersionError(ArtifactDataError):
    """The version string is not a semantic version."""

    def __init__(self, raw: str):
        super().__init__(f"Invalid version: {raw!r}")
        self.raw = raw


class DescriptorParseError(ArtifactDataError):
    """The raw payload could not be read as an artifact descriptor."""
