"""Data models for Maven coordinates, manifests and resolution output."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from constants import Scopes


@dataclass(frozen=True)
class Coordinate:
    """A ``groupId:artifactId:version`` reference; version may be unknown."""

    group_id: str
    artifact_id: str
    version: Optional[str] = None

    @property
    def ga_key(self) -> str:
        """The ``groupId:artifactId`` slot key, independent of version."""
        return f"{self.group_id}:{self.artifact_id}"

    @property
    def file_stem(self) -> str:
        return f"{self.artifact_id}-{self.version}"

    def relative_path(self, extension: str) -> str:
        """Repository-relative path of the artifact file with ``extension``."""
        group_path = self.group_id.replace(".", "/")
        return f"{group_path}/{self.artifact_id}/{self.version}/{self.file_stem}.{extension}"

    @classmethod
    def parse(cls, token: str) -> "Coordinate":
        """Parse ``g:a`` or ``g:a:v``.

        Raises:
            ValueError: If the token does not have two or three non-empty parts.
        """
        parts = [p.strip() for p in token.strip().split(":")]
        if len(parts) not in (2, 3) or not all(parts):
            raise ValueError(f"Invalid coordinate '{token}', expected groupId:artifactId[:version]")
        return cls(parts[0], parts[1], parts[2] if len(parts) == 3 else None)

    def __str__(self) -> str:
        if self.version is None:
            return self.ga_key
        return f"{self.ga_key}:{self.version}"


@dataclass(frozen=True)
class DeclaredDependency:
    """A dependency declaration as read from a manifest."""

    group_id: str
    artifact_id: str
    version: Optional[str] = None
    scope: Optional[str] = None
    optional: bool = False

    @property
    def ga_key(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    @property
    def effective_scope(self) -> str:
        return self.scope or Scopes.COMPILE.value

    def should_include(self) -> bool:
        """Whether the dependency propagates transitively.

        ``test`` and ``provided`` scopes and optional dependencies do not;
        a missing scope means ``compile``.
        """
        if self.scope in (Scopes.TEST.value, Scopes.PROVIDED.value):
            return False
        return not self.optional

    def coordinate(self) -> Coordinate:
        return Coordinate(self.group_id, self.artifact_id, self.version)


_BUILTIN_GROUP_KEYS = ("${project.groupId}", "${pom.groupId}")
_BUILTIN_ARTIFACT_KEYS = ("${project.artifactId}", "${pom.artifactId}")
_BUILTIN_VERSION_KEYS = ("${project.version}", "${pom.version}", "${version}")


def builtin_properties(coordinate: Optional[Coordinate]) -> Dict[str, str]:
    """Substitution keys derived from a manifest's own coordinate."""
    props: Dict[str, str] = {}
    if coordinate is None:
        return props
    if coordinate.group_id is not None:
        props.update(dict.fromkeys(_BUILTIN_GROUP_KEYS, coordinate.group_id))
    if coordinate.artifact_id is not None:
        props.update(dict.fromkeys(_BUILTIN_ARTIFACT_KEYS, coordinate.artifact_id))
    if coordinate.version is not None:
        props.update(dict.fromkeys(_BUILTIN_VERSION_KEYS, coordinate.version))
    return props


@dataclass(frozen=True)
class ManifestInfo:
    """Immutable snapshot of one manifest and its already-resolved ancestors.

    ``properties`` and ``managed_versions`` hold this manifest's own
    declarations only; the ``all_*`` views merge the parent chain with the
    nearest declaration winning. Properties are stored under both ``name``
    and ``${name}``.
    """

    coordinate: Coordinate
    properties: Dict[str, str] = field(default_factory=dict)
    managed_versions: Dict[str, str] = field(default_factory=dict)
    parent: Optional["ManifestInfo"] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", dict(self.properties))
        object.__setattr__(self, "managed_versions", dict(self.managed_versions))

    @property
    def ga_key(self) -> str:
        return self.coordinate.ga_key

    def all_properties(self) -> Dict[str, str]:
        merged: Dict[str, str] = {}
        if self.parent is not None:
            merged.update(self.parent.all_properties())
        merged.update(self.properties)
        merged.update(builtin_properties(self.coordinate))
        return merged

    def all_managed_versions(self) -> Dict[str, str]:
        merged: Dict[str, str] = {}
        if self.parent is not None:
            merged.update(self.parent.all_managed_versions())
        merged.update(self.managed_versions)
        return merged

    def with_property(self, name: str, value: str) -> "ManifestInfo":
        props = dict(self.properties)
        props[name] = value
        props["${" + name + "}"] = value
        return replace(self, properties=props)

    def with_managed_version(self, ga_key: str, version: str) -> "ManifestInfo":
        managed = dict(self.managed_versions)
        managed[ga_key] = version
        return replace(self, managed_versions=managed)

    def with_parent(self, parent: Optional["ManifestInfo"]) -> "ManifestInfo":
        return replace(self, parent=parent)

    def chain_depth(self) -> int:
        """Number of ancestors attached below this manifest."""
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth


@dataclass(frozen=True)
class ResolvedDependency:
    """One artifact of a finished resolution."""

    coordinate: Coordinate
    binary_path: str

    @property
    def group_id(self) -> str:
        return self.coordinate.group_id

    @property
    def artifact_id(self) -> str:
        return self.coordinate.artifact_id

    @property
    def version(self) -> Optional[str]:
        return self.coordinate.version

    @property
    def ga_key(self) -> str:
        return self.coordinate.ga_key

    @property
    def classpath_entry(self) -> str:
        return os.path.abspath(self.binary_path)

    def __str__(self) -> str:
        return str(self.coordinate)


@dataclass(frozen=True)
class ArtifactSpec:
    """An artifact file to fetch in a batch download."""

    coordinate: Coordinate
    output_dir: str
    extension: str = "jar"

    @property
    def output_path(self) -> str:
        return os.path.join(self.output_dir, f"{self.coordinate.file_stem}.{self.extension}")

    def __str__(self) -> str:
        return str(self.coordinate)
