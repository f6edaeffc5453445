"""Repository search API helpers (artifact lookup, latest stable version)."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from constants import Constants
from common.http_client import get_json
from common.logging_utils import safe_url
from versioning.version_compare import is_newer

logger = logging.getLogger(__name__)

_MILESTONE = re.compile(r".*-m\d+.*")


@dataclass(frozen=True)
class SearchResult:
    """One artifact hit from the search API."""

    group_id: str
    artifact_id: str
    latest_version: str

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id} (v{self.latest_version})"


def is_stable_version(version: str) -> bool:
    """False for snapshots, release candidates, alphas, betas and ``-M<n>`` milestones."""
    lower = version.lower()
    return not (
        "snapshot" in lower
        or "-rc" in lower
        or "alpha" in lower
        or "beta" in lower
        or _MILESTONE.match(lower)
    )


def _docs(data: Any) -> Optional[List[Dict[str, Any]]]:
    """The ``response.docs`` list of a search reply, or None if the reply has another shape."""
    if not isinstance(data, dict):
        return None
    response = data.get("response")
    if not isinstance(response, dict):
        return None
    docs = response.get("docs", [])
    if not isinstance(docs, list):
        return None
    return [doc for doc in docs if isinstance(doc, dict)]


def _all_text(*values: Any) -> bool:
    return all(isinstance(v, str) and v for v in values)


def search_by_artifact_id(artifact_id: str, rows: int = 20, url: Optional[str] = None) -> List[SearchResult]:
    """Search the repository index by artifactId.

    Returns:
        Matching artifacts; empty on any HTTP or decoding failure.
    """
    endpoint = url or Constants.REPOSITORY_SEARCH_URL
    params = {"q": f"a:{artifact_id}", "rows": rows, "wt": "json"}
    status, data = get_json(endpoint, context="maven-search", params=params)
    docs = _docs(data)
    if docs is None:
        logger.warning("Search for %s failed (status %s) at %s", artifact_id, status, safe_url(endpoint))
        return []

    results: List[SearchResult] = []
    for doc in docs:
        group = doc.get("g")
        artifact = doc.get("a")
        version = doc.get("latestVersion")
        if _all_text(group, artifact, version):
            results.append(SearchResult(group, artifact, version))
    return results


def latest_stable_version(group_id: str, artifact_id: str, url: Optional[str] = None) -> Optional[str]:
    """Highest stable version listed by the search API, or None."""
    endpoint = url or Constants.REPOSITORY_SEARCH_URL
    params = {"q": f'g:"{group_id}" AND a:"{artifact_id}"', "core": "gav", "rows": 20, "wt": "json"}
    status, data = get_json(endpoint, context="maven-search", params=params)
    docs = _docs(data)
    if docs is None:
        logger.warning(
            "Version lookup for %s:%s failed (status %s)", group_id, artifact_id, status
        )
        return None

    latest: Optional[str] = None
    for doc in docs:
        version = doc.get("v")
        if not _all_text(version) or not is_stable_version(version):
            continue
        if latest is None or is_newer(version, latest):
            latest = version
    return latest
