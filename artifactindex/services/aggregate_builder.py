"""
Project aggregation for artifactindex.

Two modes:

- build_project() (batch): recompute a Project from the union of new and
  previously indexed releases of one repository.
- add_release() (incremental): extend an existing Project by a single
  release without touching the rest of the catalog.
"""

import json
import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from ..domain import (
    Project,
    Release,
    RepositoryMetadata,
    RepositoryReference,
    StoredFlags,
    dedupe_releases,
)
from .protocols import ReleaseSelectionPolicy
from .release_builder import parse_date
from .release_selection import DefaultReleaseSelection

logger = logging.getLogger(__name__)


def distinct_sorted(values: Iterable[Optional[str]]) -> Tuple[str, ...]:
    """Sorted tuple of the distinct non-empty values."""
    return tuple(sorted({v for v in values if v}))


def latest_and_earliest(releases: Iterable[Release]) -> Tuple[Optional[str], Optional[str]]:
    """
    Latest and earliest release dates, as the original date strings.

    Dates that fail to parse are skipped with a warning.
    """
    dated = []
    for release in releases:
        if not release.released:
            continue
        try:
            dated.append((parse_date(release.released), release.released))
        except ValueError:
            logger.warning(f"Ignoring malformed release date {release.released!r} of {release}")

    if not dated:
        return None, None

    dated.sort(reverse=True)
    return dated[0][1], dated[-1][1]


def release_precedence(release: Release) -> Tuple:
    """
    Total order used to pick one of several releases sharing a coordinate:
    earliest release date first, then resolver, then the full record.
    """
    try:
        timestamp = parse_date(release.released).timestamp() if release.released else None
    except ValueError:
        timestamp = None
    return (
        timestamp is None,
        timestamp or 0.0,
        release.resolver or '',
        json.dumps(release.to_dict(), sort_keys=True, default=str),
    )


def build_project(
    reference: RepositoryReference,
    new_releases: Sequence[Release],
    prior_releases: Sequence[Release],
    flags: Optional[StoredFlags] = None,
    github: Optional[RepositoryMetadata] = None,
    policy: Optional[ReleaseSelectionPolicy] = None,
) -> Tuple[Optional[Project], List[Release]]:
    """
    Fold new and prior releases of one repository into a Project.

    Args:
        reference: Repository owning the releases
        new_releases: Releases built in this run (win over prior ones; among
            new releases sharing a coordinate the earliest one is kept)
        prior_releases: Releases already indexed for this repository
        flags: Stored flags, only used to steer release selection
        github: Upstream repository metadata
        policy: Release selection policy (DefaultReleaseSelection if None)

    Returns:
        (project, releases) where releases is the deduplicated union.
        project is None when the union is empty.
    """
    releases = dedupe_releases(
        sorted(new_releases, key=release_precedence)
        + sorted(prior_releases, key=release_precedence)
    )
    if not releases:
        return None, []

    policy = policy or DefaultReleaseSelection()
    selected = policy.select(reference, releases, flags or StoredFlags())
    updated, created = latest_and_earliest(releases)

    project = Project(
        organization=reference.organization,
        repository=reference.repository,
        github=github,
        artifacts=distinct_sorted(r.artifact for r in releases),
        default_artifact=selected.artifact if selected else None,
        release_count=len({r.version for r in releases}),
        created=created,
        updated=updated,
        target_type=distinct_sorted(r.target_type for r in releases),
        scala_version=distinct_sorted(r.scala_version for r in releases),
        scala_js_version=distinct_sorted(r.scala_js_version for r in releases),
        scala_native_version=distinct_sorted(r.scala_native_version for r in releases),
        sbt_version=distinct_sorted(r.sbt_version for r in releases),
    )
    return project, releases


def add_release(
    project: Optional[Project],
    release: Release,
    github: Optional[RepositoryMetadata] = None,
) -> Project:
    """
    Extend a project by one release.

    A missing project starts from Project.default(). Counts grow by one and
    list fields gain the release's values; nothing is recomputed from other
    releases.
    """
    base = project or Project.default(release.reference)
    base = base.with_github(github)

    def extend(values: Tuple[str, ...], value: Optional[str]) -> Tuple[str, ...]:
        return distinct_sorted(values + (value,))

    return replace(
        base,
        artifacts=extend(base.artifacts, release.artifact),
        default_artifact=base.default_artifact or release.artifact,
        release_count=base.release_count + 1,
        created=_pick_date(base.created, release.released, earliest=True),
        updated=_pick_date(base.updated, release.released, earliest=False),
        target_type=extend(base.target_type, release.target_type),
        scala_version=extend(base.scala_version, release.scala_version),
        scala_js_version=extend(base.scala_js_version, release.scala_js_version),
        scala_native_version=extend(base.scala_native_version, release.scala_native_version),
        sbt_version=extend(base.sbt_version, release.sbt_version),
    )


def _pick_date(current: Optional[str], candidate: Optional[str], earliest: bool) -> Optional[str]:
    if not current:
        return candidate
    if not candidate:
        return current
    try:
        current_dt, candidate_dt = parse_date(current), parse_date(candidate)
    except ValueError:
        logger.warning(f"Cannot compare release dates {current!r} and {candidate!r}")
        return current
    if earliest:
        return candidate if candidate_dt < current_dt else current
    return candidate if candidate_dt > current_dt else current
