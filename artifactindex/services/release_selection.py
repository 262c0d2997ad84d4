"""
Release selection: which release represents a project.

The selected release names the project's default artifact. The policy is
pluggable (see protocols.ReleaseSelectionPolicy); DefaultReleaseSelection
is used unless the caller supplies another one.
"""

from typing import Optional, Sequence, Tuple

import semantic_version

from ..domain import PlatformType, Release, RepositoryReference, StoredFlags
from ..errors import InvalidVersionError
from .release_builder import is_prerelease, parse_version

_ZERO = semantic_version.Version("0.0.0")


def _version_or_zero(raw: Optional[str]) -> semantic_version.Version:
    if not raw:
        return _ZERO
    try:
        return parse_version(raw)
    except InvalidVersionError:
        return _ZERO


class DefaultReleaseSelection:
    """
    Rank releases and pick the best one.

    Deprecated artifacts are skipped unless nothing else is left. When the
    project honors default_stable_version, pre-releases only win if there is
    no stable release. Among the remaining releases the ranking is, in order:

    - artifact named like the repository
    - standard library over non-standard
    - higher version
    - JVM over other platforms
    - higher Scala version
    - later release date
    - artifact name (for a total order)
    """

    def select(
        self,
        repository: RepositoryReference,
        releases: Sequence[Release],
        flags: StoredFlags,
    ) -> Optional[Release]:
        candidates = [r for r in releases if r.artifact not in flags.deprecated_artifacts]
        if not candidates:
            candidates = list(releases)
        if not candidates:
            return None

        if flags.default_stable_version:
            stable = [r for r in candidates if not is_prerelease(_version_or_zero(r.version))]
            candidates = stable or candidates

        return max(candidates, key=lambda r: self._rank(repository, r))

    @staticmethod
    def _rank(repository: RepositoryReference, release: Release) -> Tuple:
        return (
            release.artifact == repository.repository,
            not release.is_non_standard_lib,
            _version_or_zero(release.version),
            release.target_type == PlatformType.JVM.value,
            _version_or_zero(release.scala_version),
            release.released or '',
            release.artifact,
        )
