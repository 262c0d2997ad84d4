"""
Platform classification for artifactindex.

Maps the raw platform suffix of an artifact id to a normalized Platform.
Every variant is listed once in PLATFORM_PATTERNS; adding a platform means
adding a row there and nowhere else.

Recognized forms (the leading underscore is optional):

    ""  / "java"        Java
    _2.13               Jvm     (scala 2.13)
    _2.13.8             Jvm     (scala 2.13, full cross version)
    _sjs1_2.13          Js      (scala 2.13, scala.js 1)
    _native0.4_3        Native  (scala 3, scala-native 0.4)
    _2.12_1.0           Sbt     (scala 2.12, sbt 1.0)
"""

import re
from typing import Callable, List, Optional, Pattern, Tuple

from ..domain import Platform
from ..errors import UnknownPlatformError

_BINARY = r'\d+(?:\.\d+)?'
_SCALA = r'\d+(?:\.\d+){0,2}'

PLATFORM_PATTERNS: List[Tuple[Pattern, Callable[[re.Match], Platform]]] = [
    (
        re.compile(rf'sjs(?P<js>{_BINARY})_(?P<scala>{_SCALA})'),
        lambda m: Platform.js(scala_family(m.group('scala')), m.group('js')),
    ),
    (
        re.compile(rf'native(?P<native>{_BINARY})_(?P<scala>{_SCALA})'),
        lambda m: Platform.native(scala_family(m.group('scala')), m.group('native')),
    ),
    (
        re.compile(rf'(?P<scala>{_BINARY})_(?P<sbt>{_BINARY})'),
        lambda m: Platform.sbt_plugin(scala_family(m.group('scala')), m.group('sbt')),
    ),
    (
        re.compile(rf'(?P<scala>{_SCALA})'),
        lambda m: Platform.jvm(scala_family(m.group('scala'))),
    ),
]

_ARTIFACT_ID = re.compile(
    rf'^(?P<name>.+?)(?P<suffix>(?:_sjs{_BINARY}|_native{_BINARY})?_{_SCALA}(?:_{_BINARY})?)?$'
)


def scala_family(version: str) -> str:
    """
    Reduce a Scala version to its binary family.

    "2.13.8" -> "2.13", "3.3.1" -> "3", "2.13" -> "2.13"
    """
    parts = version.split('.')
    if int(parts[0]) >= 3:
        return parts[0]
    return '.'.join(parts[:2])


def classify_platform(raw: Optional[str]) -> Platform:
    """
    Classify a raw platform suffix.

    Args:
        raw: Suffix as found in the artifact id, e.g. "_sjs1_2.13"

    Returns:
        The normalized Platform

    Raises:
        UnknownPlatformError: if the suffix matches no known form
    """
    value = (raw or '').strip()
    if value.startswith('_'):
        value = value[1:]

    if value == '' or value.lower() == 'java':
        return Platform.java()

    for pattern, build in PLATFORM_PATTERNS:
        match = pattern.fullmatch(value)
        if match:
            return build(match)

    raise UnknownPlatformError(raw or '')


def split_artifact_id(artifact_id: str) -> Tuple[str, str]:
    """
    Split an artifact id into (artifact name, raw platform suffix).

    "cats-core_2.13" -> ("cats-core", "_2.13")
    "guava" -> ("guava", "")
    """
    match = _ARTIFACT_ID.match(artifact_id)
    if not match:
        return artifact_id, ''
    return match.group('name'), match.group('suffix') or ''
