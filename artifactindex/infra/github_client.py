"""
GitHub API client infrastructure for artifactindex.

Provides repository metadata for projects:
- Token authentication (per publishing user, or from config/env)
- Handles rate limiting with exponential backoff
"""

import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

import requests

from ..domain import RepositoryMetadata, RepositoryReference

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"


@dataclass
class RateLimitStatus:
    """GitHub API rate limit status."""
    remaining: int
    limit: int
    reset_time: int  # Unix timestamp
    used: int

    @property
    def reset_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.reset_time)

    @property
    def minutes_until_reset(self) -> int:
        now = int(time.time())
        return max(0, (self.reset_time - now) // 60)

    @property
    def is_low(self) -> bool:
        """Check if rate limit is getting low (< 100 remaining)."""
        return self.remaining < 100


def metadata_from_api_response(data: Dict[str, Any]) -> RepositoryMetadata:
    """Create RepositoryMetadata from a GitHub "repos/{owner}/{name}" response."""
    owner = data.get('owner', {})
    license_info = data.get('license') or {}

    return RepositoryMetadata(
        owner=owner.get('login', '') if isinstance(owner, dict) else str(owner),
        name=data.get('name', ''),
        description=data.get('description'),
        homepage=data.get('homepage') or None,
        stars=data.get('stargazers_count', 0),
        forks=data.get('forks_count', 0),
        watchers=data.get('subscribers_count', data.get('watchers_count', 0)),
        open_issues_count=data.get('open_issues_count', 0),
        is_fork=data.get('fork', False),
        is_archived=data.get('archived', False),
        default_branch=data.get('default_branch', 'main'),
        topics=tuple(data.get('topics', [])),
        license_key=license_info.get('key') if isinstance(license_info, dict) else None,
        created_at=data.get('created_at'),
        updated_at=data.get('updated_at'),
        pushed_at=data.get('pushed_at'),
    )


class GitHubClient:
    """
    GitHub API client with rate limiting.

    Implements the RepositoryMetadataReader protocol through read().

    Example:
        client = GitHubClient(token=identity.token)
        metadata = client.read(RepositoryReference("typelevel", "cats"))
        if metadata:
            print(f"Stars: {metadata.stars}")
    """

    def __init__(
        self,
        token: Optional[str] = None,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize GitHubClient.

        Args:
            token: GitHub token (defaults to ARTIFACTINDEX_GITHUB_TOKEN or GITHUB_TOKEN env var)
            max_retries: Maximum retry attempts for rate-limited requests
            base_delay: Base delay for exponential backoff
            max_delay: Maximum delay between retries
            session: requests session to use (a new one if None)
        """
        self.token = token or os.environ.get('ARTIFACTINDEX_GITHUB_TOKEN') or os.environ.get('GITHUB_TOKEN')
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.session = session or requests.Session()
        self._rate_limit_status: Optional[RateLimitStatus] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any], token: Optional[str] = None) -> 'GitHubClient':
        github = config.get('github', {})
        rate_limit = github.get('rate_limit', {})
        return cls(
            token=token or github.get('token') or None,
            max_retries=rate_limit.get('max_retries', 3),
            max_delay=rate_limit.get('max_delay_seconds', 60),
        )

    @property
    def rate_limit_status(self) -> Optional[RateLimitStatus]:
        """Rate limit status seen on the last API response."""
        return self._rate_limit_status

    def _update_rate_limit_from_headers(self, headers) -> None:
        try:
            remaining = int(headers.get('X-RateLimit-Remaining', -1))
            limit = int(headers.get('X-RateLimit-Limit', -1))
            reset_time = int(headers.get('X-RateLimit-Reset', 0))
            used = int(headers.get('X-RateLimit-Used', 0))
        except (ValueError, TypeError):
            return

        if remaining >= 0 and limit >= 0:
            self._rate_limit_status = RateLimitStatus(
                remaining=remaining,
                limit=limit,
                reset_time=reset_time,
                used=used
            )

            if self._rate_limit_status.is_low:
                logger.warning(
                    f"GitHub API rate limit low: {remaining}/{limit} remaining, "
                    f"resets in {self._rate_limit_status.minutes_until_reset} minutes"
                )

    def _api(self, endpoint: str) -> Optional[Dict[str, Any]]:
        """Call the GitHub API, retrying rate-limited and failed requests."""
        url = f"{API_URL}/{endpoint}"
        headers = {
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'artifactindex'
        }
        if self.token:
            headers['Authorization'] = f'token {self.token}'

        for attempt in range(self.max_retries):
            try:
                response = self.session.get(url, headers=headers, timeout=30)
            except requests.RequestException as e:
                logger.warning(f"GitHub API request failed: {e}")
                if attempt < self.max_retries - 1:
                    time.sleep(min(self.base_delay * (2 ** attempt), self.max_delay))
                continue

            self._update_rate_limit_from_headers(response.headers)

            if response.status_code == 200:
                return response.json()

            if response.status_code == 404:
                return None

            if response.status_code in (403, 429):
                reset_time = response.headers.get('X-RateLimit-Reset')
                if reset_time:
                    wait_time = int(reset_time) - int(time.time())
                    if 0 < wait_time < self.max_delay:
                        logger.info(f"Rate limited, waiting {wait_time}s")
                        time.sleep(wait_time)
                        continue

                delay = min(self.base_delay * (2 ** attempt), self.max_delay)
                logger.info(f"Rate limited, waiting {delay}s (attempt {attempt + 1})")
                time.sleep(delay)
                continue

            logger.warning(f"GitHub API error {response.status_code} for {endpoint}")
            return None

        return None

    def get_repo(self, owner: str, name: str) -> Optional[RepositoryMetadata]:
        """
        Get repository metadata.

        Returns:
            RepositoryMetadata or None if not found
        """
        data = self._api(f"repos/{owner}/{name}")
        if data:
            return metadata_from_api_response(data)
        return None

    def read(self, reference: RepositoryReference) -> Optional[RepositoryMetadata]:
        return self.get_repo(reference.organization, reference.repository)
