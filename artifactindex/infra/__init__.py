"""
Infrastructure layer for artifactindex.

Contains default implementations of the service collaborators:
- JsonDescriptorReader: JSON artifact descriptors
- GitHubRepoResolver: Descriptor -> GitHub repository
- LicenseNormalizer: Declared license names -> normalized licenses
- GitHubClient: GitHub API access (repository metadata)
- TempStore: Staging of raw publish payloads

These provide clean interfaces that can be mocked for testing.
"""

from .descriptor_reader import JsonDescriptorReader
from .scm_resolver import GitHubRepoResolver, parse_github_url
from .license_normalizer import LicenseNormalizer
from .github_client import GitHubClient, RateLimitStatus
from .temp_store import TempStore

__all__ = [
    'JsonDescriptorReader',
    'GitHubRepoResolver',
    'parse_github_url',
    'LicenseNormalizer',
    'GitHubClient',
    'RateLimitStatus',
    'TempStore',
]
