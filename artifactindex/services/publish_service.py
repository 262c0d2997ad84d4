"""
Publish service for artifactindex.

Handles one publish request at a time:

    received -> parsed -> classified -> authorized -> converted -> persisted

Every data or authorization problem ends in a PublishResult variant;
only collaborator faults (storage, I/O) raise.
"""

import hashlib
import logging
from concurrent.futures import Executor
from datetime import datetime, timezone
from typing import Callable, Optional

from ..domain import (
    ArtifactDescriptor,
    Forbidden,
    Identity,
    InvalidPom,
    NoGithubRepo,
    PublishResult,
    RepositoryReference,
    Success,
)
from ..errors import DescriptorParseError
from .conversion_service import ConversionService
from .protocols import (
    DescriptorParser,
    PersistenceSink,
    PriorStateStore,
    RepositoryMetadataReader,
    TempStore,
)

logger = logging.getLogger(__name__)

MetadataClientFactory = Callable[[Identity], Optional[RepositoryMetadataReader]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PublishService:
    """
    Publishes single artifact descriptors into the catalog.

    Concurrent publishes to the same repository must be serialized by the
    PersistenceSink; this service assumes it.

    Example:
        service = PublishService(parser, converter, store, store, TempStore())
        result = service.publish("org/lib_2.13/1.0/lib_2.13-1.0.pom", data, now, identity)
        if isinstance(result, Forbidden):
            ...
    """

    def __init__(
        self,
        parser: DescriptorParser,
        converter: ConversionService,
        state: PriorStateStore,
        sink: PersistenceSink,
        temp_store: TempStore,
        metadata_client_factory: Optional[MetadataClientFactory] = None,
        executor: Optional[Executor] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize PublishService.

        Args:
            parser: Reads raw payloads into descriptors
            converter: Conversion service (its resolver links repositories)
            state: Stored project state, for the existing project
            sink: Persistence of the converted artifact
            temp_store: Staging area for raw payloads
            metadata_client_factory: Builds a metadata client for an identity;
                when None no metadata refresh is attempted
            executor: Runs the metadata refresh in the background; inline if None
            clock: Source of "now" timestamps
        """
        self.parser = parser
        self.converter = converter
        self.state = state
        self.sink = sink
        self.temp_store = temp_store
        self.metadata_client_factory = metadata_client_factory
        self.executor = executor
        self.clock = clock

    def publish(
        self,
        path: str,
        data: bytes,
        creation_date: datetime,
        identity: Optional[Identity] = None,
    ) -> PublishResult:
        """
        Publish one raw descriptor.

        Args:
            path: Path the payload was published under (for logging)
            data: Raw descriptor payload
            creation_date: Release timestamp
            identity: Caller; None for trusted internal callers

        Returns:
            Success, InvalidPom, NoGithubRepo or Forbidden
        """
        logger.info(f"Publishing {path}")
        sha1 = hashlib.sha1(data).hexdigest()
        staged = self.temp_store.create(data, sha1, ".pom")
        try:
            try:
                descriptor = self.parser.parse(staged.read_bytes())
            except DescriptorParseError as e:
                logger.error(f"Invalid descriptor {path}: {e}")
                return InvalidPom()
            return self._publish_descriptor(descriptor, creation_date, identity)
        finally:
            self.temp_store.delete(staged)

    def _publish_descriptor(
        self,
        descriptor: ArtifactDescriptor,
        creation_date: datetime,
        identity: Optional[Identity],
    ) -> PublishResult:
        reference = self.converter.resolver.resolve(descriptor)
        if reference is None:
            logger.info(f"No source repository for {descriptor.maven}")
            return NoGithubRepo()

        if identity is not None and not identity.can_publish_to(reference):
            logger.warning(f"User {identity.login} attempted to publish to {reference}")
            return Forbidden(identity.login, reference)

        converted = self.converter.convert_one(
            descriptor, reference, creation_date, self.state.project_of(reference)
        )
        if converted is None:
            logger.warning(f"Cannot convert {descriptor.maven} to a valid artifact")
            return InvalidPom()

        project, release, dependencies = converted
        is_new_project = self.sink.insert_artifact(project, release, dependencies, self.clock())

        if is_new_project:
            client = self._metadata_client(identity)
            if client is not None:
                if self.executor is not None:
                    self.executor.submit(self._refresh_metadata, client, reference)
                else:
                    self._refresh_metadata(client, reference)

        logger.info(f"Published {descriptor.maven}")
        return Success()

    def _metadata_client(self, identity: Optional[Identity]) -> Optional[RepositoryMetadataReader]:
        if identity is None or self.metadata_client_factory is None:
            return None
        return self.metadata_client_factory(identity)

    def _refresh_metadata(self, client: RepositoryMetadataReader, reference: RepositoryReference) -> None:
        """Best-effort metadata refresh for a newly created project."""
        try:
            metadata = client.read(reference)
            if metadata is not None:
                self.sink.update_metadata(reference, metadata, self.clock())
        except Exception as e:
            logger.warning(f"Repository metadata refresh failed for {reference}: {e}")
