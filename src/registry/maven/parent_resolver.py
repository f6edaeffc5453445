"""Resolution of a manifest's parent chain into nested ManifestInfo values."""
from __future__ import annotations

import logging
from typing import Optional, Set

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, Timer

from .client import ArtifactClient
from .models import Coordinate, ManifestInfo
from .pom_parser import ManifestDocument, ManifestParseError

logger = logging.getLogger(__name__)


class ParentChainResolver:
    """Builds ManifestInfo chains bottom-up, guarded against cycles and depth.

    Each call to ``resolve_chain`` owns its own ``visited`` set, so the
    resolver holds no per-resolution state and may be shared.
    """

    def __init__(self, client: ArtifactClient, max_depth: Optional[int] = None):
        self.client = client
        self.max_depth = Constants.MAX_PARENT_DEPTH if max_depth is None else max_depth

    def resolve_chain(
        self,
        coord: Coordinate,
        depth: int = 0,
        visited: Optional[Set[str]] = None,
    ) -> Optional[ManifestInfo]:
        """Fetch ``coord`` and its ancestors.

        Args:
            coord: Manifest to start from.
            depth: Chain depth of ``coord``; anything beyond ``max_depth`` is refused.
            visited: ``g:a:v`` keys already on this chain.

        Returns:
            The ManifestInfo with its resolved parent attached, or None when the
            node is refused, cannot be fetched, or cannot be parsed. A None
            parent below a node simply ends inheritance there.
        """
        if visited is None:
            visited = set()
        key = str(coord)

        if depth > self.max_depth:
            logger.warning(
                "Parent manifest chain exceeds maximum depth (%d) at %s", self.max_depth, key
            )
            return None
        if key in visited:
            logger.warning("Cyclic parent manifest reference detected for %s", key)
            return None
        visited.add(key)

        with Timer() as t:
            text = self.client.load_manifest(coord)
        if text is None:
            logger.warning("Failed to fetch parent manifest %s", key)
            return None

        try:
            document = ManifestDocument.from_text(text)
        except ManifestParseError as exc:
            logger.warning("Failed to parse parent manifest %s: %s", key, exc)
            return None

        info = document.manifest_info(coord)
        if is_debug_enabled(logger):
            logger.debug("Loaded parent manifest", extra=extra_context(
                event="parent_manifest", component="parent_resolver", action="resolve_chain",
                target=key, depth=depth, duration_ms=t.duration_ms(), package_manager="maven"
            ))

        parent_coord = document.parent_reference()
        if parent_coord is None:
            return info
        return info.with_parent(self.resolve_chain(parent_coord, depth + 1, visited))
