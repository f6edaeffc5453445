"""Maven repository client: artifact binaries, manifests and batch prefetch."""
from __future__ import annotations

import asyncio
import logging
import os
from typing import List, Optional, Sequence

import aiohttp

from constants import Constants
from common import http_client
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

from .cache import ArtifactCache
from .models import ArtifactSpec, Coordinate

logger = logging.getLogger(__name__)


class ArtifactClient:
    """Fetches files laid out as ``<base>/<group path>/<artifact>/<version>/<file>``.

    Every failure (network error, non-200) is soft: binaries report False and
    manifests None, and the caller decides whether to warn and move on.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        cache: Optional[ArtifactCache] = None,
        session=None,
    ):
        self.base_url = (base_url or Constants.REPOSITORY_URL).rstrip("/") + "/"
        self.cache = cache or ArtifactCache()
        self._session = session

    def artifact_url(self, coord: Coordinate, extension: str) -> str:
        return self.base_url + coord.relative_path(extension)

    def fetch_binary(self, coord: Coordinate, dest_dir: str, extension: str = "jar") -> bool:
        """Download an artifact file into ``dest_dir`` unless it is already there."""
        dest = os.path.join(dest_dir, f"{coord.file_stem}.{extension}")
        if os.path.isfile(dest):
            if is_debug_enabled(logger):
                logger.debug("Artifact already cached", extra=extra_context(
                    event="cache_hit", component="client", action="fetch_binary",
                    target=dest, package_manager="maven"
                ))
            return True

        url = self.artifact_url(coord, extension)
        with Timer() as t:
            ok = http_client.download_to_file(url, dest, context="maven", session=self._session)
        if not ok and is_debug_enabled(logger):
            logger.debug("HTTP download failed", extra=extra_context(
                event="http_response", component="client", action="fetch_binary",
                outcome="not_found_or_error", target=safe_url(url),
                duration_ms=t.duration_ms(), package_manager="maven"
            ))
        return ok

    def fetch_manifest(self, coord: Coordinate) -> Optional[str]:
        """Fetch the POM text for ``coord`` from the remote repository."""
        url = self.artifact_url(coord, "pom")
        status, text = http_client.fetch_text(url, context="maven", session=self._session)
        if text is None:
            if is_debug_enabled(logger):
                logger.debug("Manifest not available", extra=extra_context(
                    event="http_response", component="client", action="fetch_manifest",
                    outcome="not_found", status_code=status, target=safe_url(url),
                    package_manager="maven"
                ))
            return None
        return text

    def load_manifest(self, coord: Coordinate) -> Optional[str]:
        """Return the POM for ``coord``, preferring the local cache.

        A freshly downloaded manifest is written to the cache before returning.
        """
        cached = self.cache.read_manifest(coord)
        if cached is not None:
            return cached
        text = self.fetch_manifest(coord)
        if text is not None:
            self.cache.store_manifest(coord, text)
        return text

    def batch_download(self, specs: Sequence[ArtifactSpec]) -> List[bool]:
        """Download many artifacts concurrently; one result per spec, in order.

        Only for prefetching a known set of artifacts; must not be called from
        inside a running event loop (use ``batch_download_async`` there).
        """
        if not specs:
            return []
        return asyncio.run(self.batch_download_async(specs))

    async def batch_download_async(self, specs: Sequence[ArtifactSpec]) -> List[bool]:
        limit = max(1, Constants.BATCH_MAX_CONCURRENCY)
        semaphore = asyncio.Semaphore(limit)
        timeout = aiohttp.ClientTimeout(total=Constants.REQUEST_TIMEOUT)
        connector = aiohttp.TCPConnector(limit=limit)
        logger.info("Batch download of %d artifacts started", len(specs))
        with Timer() as t:
            async with aiohttp.ClientSession(timeout=timeout, connector=connector) as session:
                results = await asyncio.gather(
                    *(self._bounded_download(session, semaphore, spec) for spec in specs)
                )
        logger.info(
            "Batch download finished: %d/%d succeeded",
            sum(1 for r in results if r),
            len(results),
            extra=extra_context(
                event="complete", component="client", action="batch_download",
                count=len(results), duration_ms=t.duration_ms(), package_manager="maven"
            ),
        )
        return list(results)

    async def _bounded_download(self, session, semaphore: asyncio.Semaphore, spec: ArtifactSpec) -> bool:
        async with semaphore:
            try:
                return await self._download_one(session, spec)
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
                logger.warning("Failed to download %s: %s", spec, exc)
                http_client.remove_partial(spec.output_path)
                return False

    async def _download_one(self, session, spec: ArtifactSpec) -> bool:
        dest = spec.output_path
        if os.path.isfile(dest):
            return True
        await asyncio.to_thread(os.makedirs, spec.output_dir, exist_ok=True)
        url = self.artifact_url(spec.coordinate, spec.extension)
        async with session.get(url, allow_redirects=True) as resp:
            if resp.status != 200:
                logger.warning("Failed to download %s: HTTP %s", spec, resp.status)
                return False
            # Blocking file calls stay off the event loop.
            fh = await asyncio.to_thread(open, dest, "wb")
            try:
                async for chunk in resp.content.iter_chunked(Constants.DOWNLOAD_CHUNK_SIZE):
                    await asyncio.to_thread(fh.write, chunk)
            finally:
                await asyncio.to_thread(fh.close)
        return True
