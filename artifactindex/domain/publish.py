"""
Publish domain objects: caller identity and the publish result variants.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from .reference import RepositoryReference


@dataclass(frozen=True)
class Identity:
    """
    Authenticated caller of a publish request.

    has_publishing_authority grants publishing to any repository;
    otherwise the caller may only publish to its own repositories.
    """
    login: str
    repositories: FrozenSet[RepositoryReference] = field(default_factory=frozenset)
    has_publishing_authority: bool = False
    token: Optional[str] = None

    def can_publish_to(self, reference: RepositoryReference) -> bool:
        return self.has_publishing_authority or reference in self.repositories


class PublishResult:
    """Base of the publish result variants."""

    status = "unknown"

    @property
    def is_success(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {'status': self.status}

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.to_dict().items())))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Success(PublishResult):
    status = "success"

    @property
    def is_success(self) -> bool:
        return True


class InvalidPom(PublishResult):
    status = "invalid_pom"


class NoGithubRepo(PublishResult):
    status = "no_github_repo"


class Forbidden(PublishResult):
    """The identity may not publish to the resolved repository."""

    status = "forbidden"

    def __init__(self, login: str, repository: RepositoryReference):
        self.login = login
        self.repository = repository

    def to_dict(self) -> Dict[str, Any]:
        return {'status': self.status, 'login': self.login, 'repository': str(self.repository)}

    def __repr__(self) -> str:
        return f"Forbidden(login={self.login!r}, repository={str(self.repository)!r})"
