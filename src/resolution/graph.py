"""Transitive dependency graph resolution.

Conflict policy: the highest version seen so far wins, and the outcome
depends on visit order. When a newer version of an already-resolved GA key
turns up, that key is re-resolved at the newer version, but artifacts pulled
in by the older version stay in the result. The graph is never re-evaluated
as a whole.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Set

from common.logging_utils import extra_context, is_debug_enabled, Timer
from registry.maven.cache import ArtifactCache
from registry.maven.client import ArtifactClient
from registry.maven.models import Coordinate, ResolvedDependency
from registry.maven.parent_resolver import ParentChainResolver
from registry.maven.pom_parser import ManifestParseError, ManifestParser
from versioning.version_compare import is_newer

from . import lockfile

logger = logging.getLogger(__name__)


@dataclass
class ResolutionContext:
    """State of one top-level resolution call; never shared between calls."""

    attempted: Set[str] = field(default_factory=set)
    resolved: Dict[str, ResolvedDependency] = field(default_factory=dict)

    def results(self) -> List[ResolvedDependency]:
        return list(self.resolved.values())


class DependencyResolver:
    """Expands root coordinates into a conflict-resolved artifact set."""

    def __init__(
        self,
        client: Optional[ArtifactClient] = None,
        parser: Optional[ManifestParser] = None,
        cache: Optional[ArtifactCache] = None,
    ):
        self.client = client or ArtifactClient(cache=cache)
        self.cache = cache or self.client.cache
        self.parser = parser or ManifestParser(ParentChainResolver(self.client))

    def resolve_one(self, group_id: str, artifact_id: str, version: Optional[str]) -> List[ResolvedDependency]:
        """Resolve a single root coordinate and everything it pulls in."""
        ctx = ResolutionContext()
        self._resolve_internal(ctx, group_id, artifact_id, version, 0)
        return ctx.results()

    def resolve_all(self, dependencies: Mapping[str, Optional[str]]) -> List[ResolvedDependency]:
        """Resolve a ``{"group:artifact": version}`` mapping in iteration order."""
        ctx = ResolutionContext()
        with Timer() as t:
            for ga_key, version in dependencies.items():
                parts = ga_key.split(":")
                if len(parts) != 2:
                    logger.warning("Skipping malformed dependency key '%s'", ga_key)
                    continue
                self._resolve_internal(ctx, parts[0], parts[1], version, 0)
        logger.info("Resolved %d artifacts", len(ctx.resolved), extra=extra_context(
            event="complete", component="graph", action="resolve_all",
            count=len(ctx.resolved), duration_ms=t.duration_ms(), package_manager="maven"
        ))
        return ctx.results()

    def resolve_with_lockfile(
        self,
        project_dir: str,
        dependencies: Mapping[str, Optional[str]],
        force_refresh: bool = False,
    ) -> List[ResolvedDependency]:
        """Use the project's lockfile when still valid, else resolve and rewrite it."""
        if not force_refresh and lockfile.is_valid(project_dir, dependencies):
            logger.info("Using cached dependencies from lockfile")
            try:
                return lockfile.load(project_dir)
            except lockfile.LockfileError as exc:
                logger.warning("Lockfile unusable, resolving again: %s", exc)

        logger.info("Resolving dependencies...")
        resolved = self.resolve_all(dependencies)
        try:
            lockfile.save(project_dir, resolved, dependencies)
        except OSError as exc:
            logger.warning("Failed to save lockfile: %s", exc)
        return resolved

    def _resolve_internal(
        self,
        ctx: ResolutionContext,
        group_id: str,
        artifact_id: str,
        version: Optional[str],
        depth: int,
    ) -> None:
        coord = Coordinate(group_id, artifact_id, version)
        key = coord.ga_key

        if key in ctx.attempted:
            existing = ctx.resolved.get(key)
            if existing is None or version is None or not is_newer(version, existing.version):
                return
            logger.info("Resolving version conflict: %s %s -> %s", key, existing.version, version)
            ctx.attempted.discard(key)
            del ctx.resolved[key]

        if version is None:
            logger.warning("No version specified for %s", key)
            return

        logger.info("%sResolving %s", "  " * depth, coord)
        ctx.attempted.add(key)

        cache_dir = self.cache.ensure_dir(coord)
        binary_ok = self.client.fetch_binary(coord, cache_dir)
        if not binary_ok:
            logger.warning("Failed to download JAR for %s", coord)

        manifest = self.client.load_manifest(coord)
        if manifest is not None:
            try:
                deps = self.parser.parse_dependencies(manifest, coord)
            except ManifestParseError as exc:
                logger.warning("Failed to parse POM for %s: %s", key, exc)
                deps = []
            for dep in deps:
                if dep.should_include() and dep.version is not None:
                    self._resolve_internal(ctx, dep.group_id, dep.artifact_id, dep.version, depth + 1)
        elif is_debug_enabled(logger):
            logger.debug("No manifest for artifact", extra=extra_context(
                event="manifest_missing", component="graph", action="resolve",
                target=str(coord), package_manager="maven"
            ))

        if binary_ok:
            ctx.resolved[key] = ResolvedDependency(coord, self.cache.binary_path(coord))
