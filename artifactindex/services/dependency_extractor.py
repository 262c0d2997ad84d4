"""Dependency edge extraction from artifact descriptors."""

from typing import Tuple

from ..domain import ArtifactDescriptor, DependencyEdge

DEFAULT_SCOPE = "compile"


def extract_dependencies(descriptor: ArtifactDescriptor) -> Tuple[DependencyEdge, ...]:
    """
    Build the dependency edges declared by one descriptor.

    Undeclared scopes become "compile". Duplicates are removed, first
    occurrence wins the position.
    """
    edges = dict.fromkeys(
        DependencyEdge(
            source=descriptor.maven,
            target=dependency.reference,
            scope=dependency.scope or DEFAULT_SCOPE,
        )
        for dependency in descriptor.dependencies
    )
    return tuple(edges)
