"""Grouping of prepared artifacts by owning repository."""

from typing import Dict, Iterable, List

from ..domain import PreparedArtifact, RepositoryReference


def group_by_repository(
    artifacts: Iterable[PreparedArtifact],
) -> Dict[RepositoryReference, List[PreparedArtifact]]:
    """
    Partition artifacts by repository.

    Keys compare exactly (organization and repository, case-sensitive).
    Groups keep input order; the dict keeps first-seen key order.
    """
    groups: Dict[RepositoryReference, List[PreparedArtifact]] = {}
    for artifact in artifacts:
        groups.setdefault(artifact.repository, []).append(artifact)
    return groups
