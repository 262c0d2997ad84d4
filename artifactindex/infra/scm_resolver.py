"""
Source repository resolution for artifactindex.

Links a descriptor to its GitHub repository, from an explicit claim
("group:artifact" or "group" -> "org/repo") or from the scm url / homepage
declared in the descriptor.
"""

import logging
import re
from typing import Dict, Optional

from ..domain import ArtifactDescriptor, RepositoryReference

logger = logging.getLogger(__name__)

_GITHUB_URL = re.compile(
    r'^(?:scm:)?(?:git:)?(?:'
    r'(?:https?|git)://(?:www\.)?github\.com/'
    r'|git@github\.com:'
    r')(?P<owner>[^/\s]+)/(?P<repo>[^/\s#?]+?)(?:\.git)?(?:[/#?].*)?$'
)


def parse_github_url(url: Optional[str]) -> Optional[RepositoryReference]:
    """
    Parse a GitHub repository reference from a URL.

    Accepts https, git and ssh forms, with or without "scm:git:" prefix
    and ".git" suffix.
    """
    if not url:
        return None
    match = _GITHUB_URL.match(url.strip())
    if not match:
        return None
    return RepositoryReference(match.group('owner'), match.group('repo'))


class GitHubRepoResolver:
    """
    Resolver from descriptors to GitHub repositories.

    Example:
        resolver = GitHubRepoResolver(claims={"org.typelevel:cats-core": "typelevel/cats"})
        ref = resolver.resolve(descriptor)
    """

    def __init__(self, claims: Optional[Dict[str, str]] = None):
        """
        Args:
            claims: Overrides keyed by "group:artifact_name" or "group"
        """
        self.claims: Dict[str, RepositoryReference] = {}
        for key, value in (claims or {}).items():
            try:
                self.claims[key] = RepositoryReference.parse(value)
            except ValueError:
                logger.warning(f"Ignoring invalid claim {key!r} -> {value!r}")

    def resolve(self, descriptor: ArtifactDescriptor) -> Optional[RepositoryReference]:
        group = descriptor.maven.group_id
        for key in (f"{group}:{descriptor.artifact_name}", group):
            if key in self.claims:
                return self.claims[key]

        return parse_github_url(descriptor.scm_url) or parse_github_url(descriptor.homepage)
