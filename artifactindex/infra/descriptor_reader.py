"""
JSON descriptor reader for artifactindex.

Reads artifact descriptors from JSON documents, one object per descriptor
(a single object, a JSON array, or JSONL). Expected keys:

    {
      "group_id": "org.typelevel",
      "artifact_id": "cats-core_2.13",
      "version": "2.9.0",
      "created": "2023-01-02T10:00:00+00:00",
      "name": "cats-core", "description": "...",
      "resolver": "central",
      "scm_url": "https://github.com/typelevel/cats",
      "homepage": "...",
      "licenses": [{"name": "MIT", "url": "..."}],
      "dependencies": [{"group_id": "...", "artifact_id": "...", "version": "...", "scope": "test"}]
    }

artifact_name and platform may be given explicitly; otherwise they are
split from artifact_id.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from ..domain import ArtifactDescriptor, MavenReference, RawDependency, RawLicense
from ..errors import DescriptorParseError
from ..services.platform_classifier import split_artifact_id

logger = logging.getLogger(__name__)


class JsonDescriptorReader:
    """
    Parser for JSON artifact descriptors.

    Example:
        reader = JsonDescriptorReader(non_standard=["org.scala-lang:scala-library"])
        descriptor = reader.parse(b'{"group_id": ...}')
    """

    def __init__(self, non_standard: Optional[List[str]] = None):
        """
        Args:
            non_standard: "group:artifact" names flagged as non-standard libraries
        """
        self.non_standard = set(non_standard or [])

    def parse(self, payload: bytes) -> ArtifactDescriptor:
        """
        Parse a single descriptor.

        Raises:
            DescriptorParseError: if the payload is not a valid descriptor
        """
        try:
            data = json.loads(payload.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DescriptorParseError(f"Not a JSON document: {e}") from e
        return self.from_dict(data)

    def read_file(self, path: Path) -> Iterator[ArtifactDescriptor]:
        """
        Read every descriptor in a file (JSON object, array or JSONL).

        Malformed entries are skipped with a warning.
        """
        text = Path(path).read_text(encoding='utf-8')
        for index, item in enumerate(self._documents(text)):
            try:
                yield self.from_dict(item)
            except DescriptorParseError as e:
                logger.warning(f"Skipping descriptor #{index} in {path}: {e}")

    def _documents(self, text: str) -> Iterator[Any]:
        stripped = text.strip()
        if not stripped:
            return
        try:
            document = json.loads(stripped)
        except json.JSONDecodeError:
            for number, line in enumerate(stripped.splitlines(), 1):
                if not line.strip():
                    continue
                try:
                    yield json.loads(line)
                except json.JSONDecodeError as e:
                    logger.warning(f"Skipping malformed line {number}: {e}")
            return
        if isinstance(document, list):
            yield from document
        else:
            yield document

    def from_dict(self, data: Any) -> ArtifactDescriptor:
        """Build a descriptor from a decoded JSON object."""
        if not isinstance(data, dict):
            raise DescriptorParseError(f"Expected an object, got {type(data).__name__}")

        maven = MavenReference(
            group_id=_required(data, 'group_id'),
            artifact_id=_required(data, 'artifact_id'),
            version=_required(data, 'version'),
        )

        if 'artifact_name' in data:
            artifact_name = str(data['artifact_name'])
            platform = str(data.get('platform') or '')
        else:
            artifact_name, platform = split_artifact_id(maven.artifact_id)

        key = f"{maven.group_id}:{maven.artifact_id}"
        return ArtifactDescriptor(
            maven=maven,
            artifact_name=artifact_name,
            platform=platform,
            created=_parse_created(data.get('created')),
            name=_optional(data, 'name'),
            description=_optional(data, 'description'),
            resolver=_optional(data, 'resolver'),
            dependencies=tuple(_dependency(d) for d in _list(data, 'dependencies')),
            licenses=tuple(_license(lic) for lic in _list(data, 'licenses')),
            scm_url=_optional(data, 'scm_url'),
            homepage=_optional(data, 'homepage'),
            is_non_standard_lib=bool(data.get('is_non_standard_lib')) or key in self.non_standard,
        )


def _required(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not value or not isinstance(value, str):
        raise DescriptorParseError(f"Missing or invalid '{key}'")
    return value


def _optional(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise DescriptorParseError(f"'{key}' must be a string")
    return value


def _list(data: Dict[str, Any], key: str) -> List[Any]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise DescriptorParseError(f"'{key}' must be a list")
    return value


def _parse_created(value: Any) -> datetime:
    if value is None:
        return datetime.now(timezone.utc).replace(microsecond=0)
    if isinstance(value, (int, float)):
        # epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as e:
            raise DescriptorParseError(f"Invalid 'created': {value!r}") from e
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError as e:
        raise DescriptorParseError(f"Invalid 'created': {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _dependency(data: Any) -> RawDependency:
    if not isinstance(data, dict):
        raise DescriptorParseError("Dependency entries must be objects")
    return RawDependency(
        reference=MavenReference(
            group_id=_required(data, 'group_id'),
            artifact_id=_required(data, 'artifact_id'),
            version=str(data.get('version') or ''),
        ),
        scope=data.get('scope'),
    )


def _license(data: Any) -> RawLicense:
    if isinstance(data, str):
        return RawLicense(name=data)
    if not isinstance(data, dict) or not data.get('name'):
        raise DescriptorParseError("License entries must have a name")
    return RawLicense(name=data['name'], url=data.get('url'))
