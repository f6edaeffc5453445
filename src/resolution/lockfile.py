"""Hash-gated lockfile persistence.

The lockfile is a JSON document in the project directory::

    {
      "version": "1",
      "configHash": "<sha256 of the declared dependencies>",
      "dependencies": [
        {"groupId": ..., "artifactId": ..., "version": ..., "binaryPath": ...}
      ]
    }

It is valid only while the declared dependencies hash the same and every
recorded binary is still on disk; one missing artifact invalidates the whole
file.
"""
from __future__ import annotations

import hashlib
import json
import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Sequence

from constants import Constants
from registry.maven.models import Coordinate, ResolvedDependency

logger = logging.getLogger(__name__)


class LockfileError(Exception):
    """The lockfile is missing or cannot be decoded."""


def lockfile_path(project_dir: str) -> str:
    return os.path.join(project_dir, Constants.LOCKFILE_NAME)


def _config_string(dependencies: Mapping[str, Optional[str]]) -> str:
    return "".join(f"{ga_key}={version};" for ga_key, version in dependencies.items())


def compute_hash(dependencies: Mapping[str, Optional[str]]) -> str:
    """Digest of the declared dependencies, in mapping order.

    Falls back to the raw ``key=version;`` concatenation when SHA-256 is
    unavailable (e.g. a restricted OpenSSL build); still deterministic.
    """
    payload = _config_string(dependencies)
    try:
        digest = hashlib.new("sha256")
    except ValueError:
        logger.warning("SHA-256 unavailable; using plain dependency string as lockfile hash")
        return payload
    digest.update(payload.encode("utf-8"))
    return digest.hexdigest()


def _read(project_dir: str) -> Dict[str, Any]:
    path = lockfile_path(project_dir)
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError as exc:
        raise LockfileError(f"Lockfile not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise LockfileError(f"Failed to read lockfile {path}: {exc}") from exc
    if not isinstance(data, dict) or not isinstance(data.get("dependencies", []), list):
        raise LockfileError(f"Lockfile {path} has an unexpected layout")
    return data


def _entries(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [e for e in data.get("dependencies", []) if isinstance(e, dict)]


def _to_resolved(entry: Dict[str, Any]) -> Optional[ResolvedDependency]:
    try:
        coord = Coordinate(entry["groupId"], entry["artifactId"], entry["version"])
        return ResolvedDependency(coord, entry["binaryPath"])
    except KeyError:
        return None


def is_valid(project_dir: str, dependencies: Mapping[str, Optional[str]]) -> bool:
    """Whether the lockfile can stand in for a full resolution."""
    if not os.path.isfile(lockfile_path(project_dir)):
        return False
    try:
        data = _read(project_dir)
    except LockfileError as exc:
        logger.warning("%s", exc)
        return False

    if str(data.get("version")) != Constants.LOCKFILE_FORMAT_VERSION:
        logger.info("Lockfile format %s is not %s", data.get("version"), Constants.LOCKFILE_FORMAT_VERSION)
        return False
    if compute_hash(dependencies) != data.get("configHash"):
        logger.info("Declared dependencies changed since the lockfile was written")
        return False

    entries = _entries(data)
    present = [r for r in map(_to_resolved, entries) if r is not None and os.path.isfile(r.binary_path)]
    if len(present) != len(entries):
        logger.info("Cached artifacts missing (%d of %d present)", len(present), len(entries))
        return False
    return True


def load(project_dir: str) -> List[ResolvedDependency]:
    """Resolved dependencies recorded in the lockfile whose binaries still exist.

    Raises:
        LockfileError: If the lockfile is missing or unreadable.
    """
    data = _read(project_dir)
    resolved = []
    for entry in _entries(data):
        dep = _to_resolved(entry)
        if dep is not None and os.path.isfile(dep.binary_path):
            resolved.append(dep)
    return resolved


def save(
    project_dir: str,
    resolved: Sequence[ResolvedDependency],
    dependencies: Mapping[str, Optional[str]],
) -> str:
    """Write the lockfile, returning its path."""
    entries = [
        {
            "groupId": dep.group_id,
            "artifactId": dep.artifact_id,
            "version": dep.version,
            "binaryPath": dep.classpath_entry,
        }
        for dep in sorted(resolved, key=lambda d: d.ga_key)
    ]
    data = {
        "version": Constants.LOCKFILE_FORMAT_VERSION,
        "configHash": compute_hash(dependencies),
        "dependencies": entries,
    }
    path = lockfile_path(project_dir)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2)
        fh.write("\n")
    logger.info("Wrote lockfile %s (%d entries)", path, len(entries))
    return path


def delete(project_dir: str) -> bool:
    path = lockfile_path(project_dir)
    if not os.path.isfile(path):
        return False
    os.remove(path)
    return True
