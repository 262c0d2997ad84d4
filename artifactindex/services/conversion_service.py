"""
Conversion service for artifactindex.

Turns artifact descriptors into projects, releases and dependency edges:

- convert_all(): batch mode over a whole descriptor set, consistent with
  the previously indexed releases and stored project flags.
- convert_one(): a single descriptor, used by the publish pipeline.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from ..domain import (
    ArtifactDescriptor,
    ConversionReport,
    ConversionResult,
    DependencyEdge,
    DroppedArtifact,
    PreparedArtifact,
    Project,
    Release,
    RepositoryReference,
    dedupe_releases,
)
from .aggregate_builder import add_release, build_project
from .dependency_extractor import extract_dependencies
from .grouping import group_by_repository
from .protocols import (
    LicenseNormalizer,
    PriorStateStore,
    ReleaseSelectionPolicy,
    RepositoryMetadataReader,
    RepositoryResolver,
)
from .release_builder import ReleaseBuilder, prepare_artifact
from .state_merger import merge_state

logger = logging.getLogger(__name__)


class ConversionService:
    """
    Service for converting artifact descriptors into catalog records.

    Example:
        service = ConversionService(resolver, LicenseNormalizer())
        result = service.convert_all(descriptors, indexed_releases, store)
        for project in result.projects:
            print(project.reference, project.release_count)
    """

    def __init__(
        self,
        resolver: RepositoryResolver,
        license_normalizer: LicenseNormalizer,
        metadata_reader: Optional[RepositoryMetadataReader] = None,
        selection_policy: Optional[ReleaseSelectionPolicy] = None,
        workers: int = 1,
    ):
        """
        Initialize ConversionService.

        Args:
            resolver: Maps a descriptor to its source repository
            license_normalizer: Normalizes declared licenses
            metadata_reader: Supplies upstream repository metadata (optional)
            selection_policy: Picks each project's default artifact
            workers: Threads used to fold repositories (1 = no pool)
        """
        self.resolver = resolver
        self.builder = ReleaseBuilder(license_normalizer)
        self.metadata = metadata_reader
        self.policy = selection_policy
        self.workers = max(1, workers)

    def prepare(
        self,
        descriptors: Iterable[ArtifactDescriptor],
        report: ConversionReport,
    ) -> List[PreparedArtifact]:
        """Validate descriptors, recording every drop in the report."""
        prepared = []
        for descriptor in descriptors:
            outcome = prepare_artifact(descriptor, self.resolver)
            if isinstance(outcome, DroppedArtifact):
                logger.warning(
                    f"Dropping {outcome.maven}: {outcome.reason.value}"
                    + (f" ({outcome.detail})" if outcome.detail else "")
                )
                report.add_drop(outcome)
                continue
            report.add_kept()
            prepared.append(outcome)
        return prepared

    def convert_all(
        self,
        descriptors: Iterable[ArtifactDescriptor],
        indexed_releases: Mapping[RepositoryReference, Sequence[Release]],
        prior_state: Optional[PriorStateStore] = None,
    ) -> ConversionResult:
        """
        Convert a full descriptor set.

        Repositories known only from indexed_releases are rebuilt from their
        prior releases. Malformed descriptors are dropped; collaborator
        errors propagate.

        Args:
            descriptors: All descriptors of this run
            indexed_releases: Previously indexed releases per repository
            prior_state: Source of stored project flags (defaults if None)

        Returns:
            ConversionResult with sorted, deduplicated collections
        """
        report = ConversionReport()

        logger.info("Collecting metadata")
        prepared = self.prepare(descriptors, report)
        groups = group_by_repository(prepared)

        references = list(groups)
        references.extend(ref for ref in indexed_releases if ref not in groups)

        def fold(reference: RepositoryReference) -> Tuple[Optional[Project], List[Release]]:
            new_releases = [self.builder.build(p) for p in groups.get(reference, [])]
            prior_releases = list(indexed_releases.get(reference, ()))
            flags = prior_state.flags_of(reference) if prior_state is not None else None
            github = self.metadata.read(reference) if self.metadata is not None else None

            project, releases = build_project(
                reference, new_releases, prior_releases,
                flags=flags, github=github, policy=self.policy,
            )
            if project is None:
                return None, []
            return merge_state(project, flags), releases

        logger.info(f"Converting {len(references)} repositories")
        if self.workers > 1 and len(references) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                folded = list(executor.map(fold, references))
        else:
            folded = [fold(reference) for reference in references]

        projects = [project for project, _ in folded if project is not None]
        releases = dedupe_releases(release for _, group in folded for release in group)

        logger.info("Dependencies")
        dependencies = {
            edge
            for artifact in prepared
            for edge in extract_dependencies(artifact.descriptor)
        }

        return ConversionResult(
            projects=sorted(projects, key=lambda p: p.reference),
            releases=sorted(releases, key=lambda r: r.coordinate),
            dependencies=sorted(dependencies),
            report=report,
        )

    def convert_one(
        self,
        descriptor: ArtifactDescriptor,
        reference: RepositoryReference,
        created: datetime,
        existing_project: Optional[Project] = None,
    ) -> Optional[Tuple[Project, Release, Tuple[DependencyEdge, ...]]]:
        """
        Convert one descriptor already resolved to a repository.

        Returns:
            (project, release, dependencies), or None if the descriptor has
            an unknown platform or an invalid version
        """
        logger.info("Converting the descriptor to a project/release/dependencies")
        outcome = prepare_artifact(descriptor, self.resolver, created=created, repository=reference)
        if isinstance(outcome, DroppedArtifact):
            logger.warning(f"Cannot convert {outcome.maven}: {outcome.reason.value}")
            return None

        release = self.builder.build(outcome)
        github = self.metadata.read(reference) if self.metadata is not None else None
        project = add_release(existing_project, release, github)
        return project, release, extract_dependencies(descriptor)
