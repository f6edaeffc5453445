"""POM manifest parsing with property and managed-version substitution."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from common.logging_utils import extra_context, is_debug_enabled

from .models import Coordinate, DeclaredDependency, ManifestInfo, builtin_properties

if TYPE_CHECKING:
    from .parent_resolver import ParentChainResolver

logger = logging.getLogger(__name__)

# Bounds nested placeholder expansion such as a=${b}, b=${c}.
MAX_SUBSTITUTION_PASSES = 10


class ManifestParseError(ValueError):
    """Raised when a manifest is not well-formed XML."""


def _local_name(tag) -> str:
    if isinstance(tag, str) and tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


class ManifestDocument:
    """A parsed POM with XML namespaces stripped from every tag.

    Lookups only ever follow direct children, so ``<parent>`` or
    ``<dependencies>`` nested under ``<dependencyManagement>``, ``<profiles>``
    or ``<build>`` are never mistaken for the project's own.
    """

    def __init__(self, root: ET.Element):
        self.root = root

    @classmethod
    def from_text(cls, text: str) -> "ManifestDocument":
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise ManifestParseError(f"Malformed manifest: {exc}") from exc
        for elem in root.iter():
            elem.tag = _local_name(elem.tag)
        return cls(root)

    @staticmethod
    def child_text(elem: ET.Element, tag: str) -> Optional[str]:
        child = elem.find(tag)
        if child is None or child.text is None:
            return None
        value = child.text.strip()
        return value or None

    def coordinate(self) -> Coordinate:
        """The document's own coordinate; group and version fall back to ``<parent>``."""
        group = self.child_text(self.root, "groupId")
        artifact = self.child_text(self.root, "artifactId")
        version = self.child_text(self.root, "version")
        parent = self.root.find("parent")
        if parent is not None:
            group = group or self.child_text(parent, "groupId")
            version = version or self.child_text(parent, "version")
        return Coordinate(group, artifact, version)

    def properties(self) -> Dict[str, str]:
        """Local ``<properties>``, keyed both as ``name`` and ``${name}``."""
        props: Dict[str, str] = {}
        block = self.root.find("properties")
        if block is None:
            return props
        for prop in block:
            if not isinstance(prop.tag, str):
                continue
            value = (prop.text or "").strip()
            props[prop.tag] = value
            props["${" + prop.tag + "}"] = value
        return props

    def managed_versions(self) -> Dict[str, str]:
        """Local ``<dependencyManagement>`` entries that carry a version."""
        managed: Dict[str, str] = {}
        block = self.root.find("dependencyManagement/dependencies")
        if block is None:
            return managed
        for dep in block.findall("dependency"):
            group = self.child_text(dep, "groupId")
            artifact = self.child_text(dep, "artifactId")
            version = self.child_text(dep, "version")
            if group and artifact and version:
                managed[f"{group}:{artifact}"] = version
        return managed

    def parent_reference(self) -> Optional[Coordinate]:
        """The ``<parent>`` directly under the root, if fully specified."""
        parent = self.root.find("parent")
        if parent is None:
            return None
        group = self.child_text(parent, "groupId")
        artifact = self.child_text(parent, "artifactId")
        version = self.child_text(parent, "version")
        if group and artifact and version:
            return Coordinate(group, artifact, version)
        return None

    def dependency_elements(self) -> Iterator[ET.Element]:
        block = self.root.find("dependencies")
        if block is None:
            return iter(())
        return iter(block.findall("dependency"))

    def manifest_info(self, coordinate: Optional[Coordinate] = None) -> ManifestInfo:
        """A bare ManifestInfo (no parent attached) for this document."""
        return ManifestInfo(
            coordinate=coordinate or self.coordinate(),
            properties=self.properties(),
            managed_versions=self.managed_versions(),
        )


def substitute_properties(value: Optional[str], properties: Dict[str, str]) -> Optional[str]:
    """Replace ``${...}`` placeholders, longest key first.

    Ordering by length keeps a short key from corrupting a longer one that
    shares its prefix. Placeholders whose values contain further placeholders
    are expanded over repeated passes; unknown placeholders are left as-is.
    """
    if value is None or "${" not in value:
        return value
    keys = sorted((k for k in properties if k.startswith("${")), key=len, reverse=True)
    result = value
    for _ in range(MAX_SUBSTITUTION_PASSES):
        previous = result
        for key in keys:
            if key in result:
                result = result.replace(key, properties[key])
        if result == previous or "${" not in result:
            break
    return result


class ManifestParser:
    """Turns POM text into the dependencies it declares.

    With a ParentChainResolver configured, properties and managed versions
    are inherited from the manifest's ancestors.
    """

    def __init__(self, parent_resolver: Optional["ParentChainResolver"] = None):
        self.parent_resolver = parent_resolver

    def manifest_info(self, document: ManifestDocument, coordinate: Coordinate) -> ManifestInfo:
        """ManifestInfo for ``document`` with its ancestor chain attached when resolvable."""
        info = document.manifest_info(coordinate)
        parent_coord = document.parent_reference()
        if self.parent_resolver is None or parent_coord is None:
            return info
        if not (coordinate.group_id and coordinate.artifact_id and coordinate.version):
            return info
        visited = {str(coordinate)}
        parent = self.parent_resolver.resolve_chain(parent_coord, depth=1, visited=visited)
        return info.with_parent(parent)

    def effective_properties(self, info: ManifestInfo) -> Dict[str, str]:
        """Built-ins, then inherited properties, then local ones; later wins."""
        props = builtin_properties(info.coordinate)
        props.update(info.all_properties())
        props.update(info.properties)
        return props

    def parse_dependencies(
        self, text: Optional[str], coordinate: Optional[Coordinate] = None
    ) -> List[DeclaredDependency]:
        """Parse the direct ``<dependencies>`` of a manifest.

        Args:
            text: Raw POM document.
            coordinate: The manifest's coordinate when already known; otherwise
                it is read from the document.

        Raises:
            ManifestParseError: If the text is not well-formed XML.
        """
        if text is None or not text.strip():
            return []
        document = ManifestDocument.from_text(text)
        coordinate = coordinate or document.coordinate()

        info = self.manifest_info(document, coordinate)
        properties = self.effective_properties(info)
        managed = info.all_managed_versions()

        deps: List[DeclaredDependency] = []
        for elem in document.dependency_elements():
            dep = self._declared_dependency(elem, properties, managed)
            if dep is not None:
                deps.append(dep)

        if is_debug_enabled(logger):
            logger.debug("Parsed manifest dependencies", extra=extra_context(
                event="parse", component="pom_parser", action="parse_dependencies",
                target=str(coordinate), count=len(deps), package_manager="maven"
            ))
        return deps

    @staticmethod
    def _declared_dependency(
        elem: ET.Element, properties: Dict[str, str], managed: Dict[str, str]
    ) -> Optional[DeclaredDependency]:
        raw_group = ManifestDocument.child_text(elem, "groupId")
        raw_artifact = ManifestDocument.child_text(elem, "artifactId")
        group = substitute_properties(raw_group, properties)
        artifact = substitute_properties(raw_artifact, properties)
        if not group or not artifact:
            return None

        version = substitute_properties(ManifestDocument.child_text(elem, "version"), properties)
        if not version:
            # Managed entries are keyed by the declaration as written.
            version = managed.get(f"{raw_group}:{raw_artifact}") or managed.get(f"{group}:{artifact}")
            version = substitute_properties(version, properties) or None

        optional = (ManifestDocument.child_text(elem, "optional") or "").lower() == "true"
        return DeclaredDependency(
            group_id=group,
            artifact_id=artifact,
            version=version,
            scope=ManifestDocument.child_text(elem, "scope"),
            optional=optional,
        )
