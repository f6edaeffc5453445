"""Shared fixtures: an in-memory Maven repository behind a real on-disk cache."""

import os
from typing import Dict, Optional, Set

import pytest

from registry.maven.cache import ArtifactCache
from registry.maven.client import ArtifactClient
from registry.maven.models import Coordinate


def pom(group, artifact, version, body="", parent=None):
    """Build a minimal namespaced POM document."""
    parent_xml = ""
    if parent:
        pg, pa, pv = parent
        parent_xml = (
            f"<parent><groupId>{pg}</groupId><artifactId>{pa}</artifactId>"
            f"<version>{pv}</version></parent>"
        )
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  {parent_xml}
  <groupId>{group}</groupId>
  <artifactId>{artifact}</artifactId>
  <version>{version}</version>
  {body}
</project>
"""


def dep(group, artifact, version=None, scope=None, optional=False):
    parts = [f"<groupId>{group}</groupId>", f"<artifactId>{artifact}</artifactId>"]
    if version is not None:
        parts.append(f"<version>{version}</version>")
    if scope:
        parts.append(f"<scope>{scope}</scope>")
    if optional:
        parts.append("<optional>true</optional>")
    return "<dependency>" + "".join(parts) + "</dependency>"


class FakeRepositoryClient(ArtifactClient):
    """ArtifactClient serving manifests and binaries from dictionaries."""

    def __init__(self, cache: ArtifactCache):
        super().__init__(base_url="https://repo.example.test/maven2", cache=cache)
        self.manifests: Dict[str, str] = {}
        self.binaries: Set[str] = set()
        self.manifest_requests = []
        self.binary_requests = []

    def add(self, group, artifact, version, body="", parent=None, jar=True, manifest=True):
        key = f"{group}:{artifact}:{version}"
        if manifest:
            self.manifests[key] = pom(group, artifact, version, body, parent)
        if jar:
            self.binaries.add(key)

    def fetch_binary(self, coord: Coordinate, dest_dir: str, extension: str = "jar") -> bool:
        self.binary_requests.append(str(coord))
        dest = os.path.join(dest_dir, f"{coord.file_stem}.{extension}")
        if os.path.isfile(dest):
            return True
        if str(coord) not in self.binaries:
            return False
        with open(dest, "wb") as fh:
            fh.write(b"PK\x03\x04")
        return True

    def fetch_manifest(self, coord: Coordinate) -> Optional[str]:
        self.manifest_requests.append(str(coord))
        return self.manifests.get(str(coord))


@pytest.fixture
def cache(tmp_path):
    return ArtifactCache(str(tmp_path / "cache"))


@pytest.fixture
def repo(cache):
    return FakeRepositoryClient(cache)
