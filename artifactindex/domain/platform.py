"""
Target platform of an artifact.

A Platform is a tagged variant: the PlatformType tag decides which of the
optional version fields are set.

    Jvm     scala_version
    Js      scala_version, scala_js_version
    Native  scala_version, scala_native_version
    Sbt     scala_version, sbt_version
    Java    (nothing)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class PlatformType(Enum):
    """Normalized platform tags."""
    JVM = "Jvm"
    JS = "Js"
    NATIVE = "Native"
    SBT = "Sbt"
    JAVA = "Java"


@dataclass(frozen=True)
class Platform:
    """Normalized platform with the versions its tag carries."""
    type: PlatformType
    scala_version: Optional[str] = None
    scala_js_version: Optional[str] = None
    scala_native_version: Optional[str] = None
    sbt_version: Optional[str] = None

    @classmethod
    def jvm(cls, scala_version: str) -> 'Platform':
        return cls(PlatformType.JVM, scala_version=scala_version)

    @classmethod
    def js(cls, scala_version: str, scala_js_version: str) -> 'Platform':
        return cls(PlatformType.JS, scala_version=scala_version, scala_js_version=scala_js_version)

    @classmethod
    def native(cls, scala_version: str, scala_native_version: str) -> 'Platform':
        return cls(PlatformType.NATIVE, scala_version=scala_version,
                   scala_native_version=scala_native_version)

    @classmethod
    def sbt_plugin(cls, scala_version: str, sbt_version: str) -> 'Platform':
        return cls(PlatformType.SBT, scala_version=scala_version, sbt_version=sbt_version)

    @classmethod
    def java(cls) -> 'Platform':
        return cls(PlatformType.JAVA)

    @property
    def label(self) -> str:
        """Artifact-id suffix form, e.g. "_sjs1_2.13" ("" for Java)."""
        if self.type == PlatformType.JVM:
            return f"_{self.scala_version}"
        if self.type == PlatformType.JS:
            return f"_sjs{self.scala_js_version}_{self.scala_version}"
        if self.type == PlatformType.NATIVE:
            return f"_native{self.scala_native_version}_{self.scala_version}"
        if self.type == PlatformType.SBT:
            return f"_{self.scala_version}_{self.sbt_version}"
        return ""

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'type': self.type.value,
            'scala_version': self.scala_version,
            'scala_js_version': self.scala_js_version,
            'scala_native_version': self.scala_native_version,
            'sbt_version': self.sbt_version,
        }
        return {k: v for k, v in result.items() if v is not None}

    def __str__(self) -> str:
        return self.label or "java"
