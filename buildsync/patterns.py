"""
patterns.py

Responsibility: the fixed registry of code-generation annotations.

Each annotation kind maps to one detection rule: the regex that finds the
annotation marker in Dart source, and the builder key under
`targets.$default.builders` in `build.yaml` that receives the matching files.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


class AnnotationKind(enum.Enum):
    COPY_WITH = "CopyWith"
    JSON_SERIALIZABLE = "JsonSerializable"
    HIVE = "Hive"


class UnknownAnnotationError(KeyError):
    pass


@dataclass(frozen=True)
class DetectionRule:
    """How to find one annotation kind and where its files go in `build.yaml`."""

    kind: AnnotationKind
    pattern: str
    target_key: str

    def compile(self) -> re.Pattern[str]:
        return re.compile(self.pattern)


_RULES: Mapping[AnnotationKind, DetectionRule] = MappingProxyType(
    {
        AnnotationKind.COPY_WITH: DetectionRule(
            kind=AnnotationKind.COPY_WITH,
            pattern=r"@CopyWith\s*\(",
            target_key="copy_with_extension_gen",
        ),
        AnnotationKind.JSON_SERIALIZABLE: DetectionRule(
            kind=AnnotationKind.JSON_SERIALIZABLE,
            pattern=r"@JsonSerializable\s*\(",
            target_key="json_serializable",
        ),
        AnnotationKind.HIVE: DetectionRule(
            kind=AnnotationKind.HIVE,
            pattern=r"@HiveType\s*\(",
            target_key="hive_generator",
        ),
    }
)


def rules_for() -> Mapping[AnnotationKind, DetectionRule]:
    """
    Return the read-only registry, in annotation declaration order.
    """
    return _RULES


def rule_for(kind: AnnotationKind) -> DetectionRule:
    try:
        return _RULES[kind]
    except KeyError as e:
        raise UnknownAnnotationError(f"Unsupported annotation type: {kind!r}") from e
