"""
Service layer for artifactindex.

Contains business logic that orchestrates domain objects and collaborators:
- ConversionService: Batch conversion of descriptors into the catalog
- PublishService: Single-artifact publish with authorization
- DefaultReleaseSelection: Default-artifact selection policy

Services depend on collaborator protocols (see protocols.py), not on
concrete infrastructure.
"""

from .conversion_service import ConversionService
from .publish_service import PublishService
from .release_selection import DefaultReleaseSelection

__all__ = [
    'ConversionService',
    'PublishService',
    'DefaultReleaseSelection',
]
