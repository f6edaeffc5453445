"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    EXIT_WARNINGS = 3
    RESOLUTION_ERROR = 4


class Scopes(Enum):
    """Dependency scopes understood by the manifest parser.

    Args:
        Enum (string): Scope names as written in a POM.
    """

    COMPILE = "compile"
    RUNTIME = "runtime"
    TEST = "test"
    PROVIDED = "provided"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REPOSITORY_URL = "https://repo1.maven.org/maven2/"
    REPOSITORY_SEARCH_URL = "https://search.maven.org/solrsearch/select"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_POOL_CONNECTIONS = 10
    HTTP_POOL_MAXSIZE = 20
    BATCH_MAX_CONCURRENCY = 8
    DOWNLOAD_CHUNK_SIZE = 64 * 1024

    MAX_PARENT_DEPTH = 10
    VERSION_CACHE_SIZE = 1000

    CACHE_DIR = os.path.join(os.path.expanduser("~"), ".jarlock", "cache")
    LOCKFILE_NAME = "jarlock.lock"
    LOCKFILE_FORMAT_VERSION = "1"

    CONFIG_FILE_NAME = "jarlock.yml"
    ENV_CONFIG = "JARLOCK_CONFIG"
    ENV_REPOSITORY_URL = "JARLOCK_REPOSITORY_URL"
    ENV_CACHE_DIR = "JARLOCK_CACHE_DIR"
    ENV_LOG_LEVEL = "JARLOCK_LOG_LEVEL"


# YAML keys mapped onto Constants attributes with the type they are coerced to.
_CONFIG_KEYS = {
    "repository_url": ("REPOSITORY_URL", str),
    "search_url": ("REPOSITORY_SEARCH_URL", str),
    "request_timeout": ("REQUEST_TIMEOUT", int),
    "pool_connections": ("HTTP_POOL_CONNECTIONS", int),
    "pool_maxsize": ("HTTP_POOL_MAXSIZE", int),
    "batch_concurrency": ("BATCH_MAX_CONCURRENCY", int),
    "max_parent_depth": ("MAX_PARENT_DEPTH", int),
    "cache_dir": ("CACHE_DIR", str),
    "lockfile_name": ("LOCKFILE_NAME", str),
}


def _config_candidates() -> list:
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path:
        return [env_path]
    return [
        os.path.join(os.getcwd(), Constants.CONFIG_FILE_NAME),
        os.path.join(os.path.expanduser("~"), ".config", "jarlock", "config.yml"),
    ]


def _read_yaml(path: str) -> Optional[Dict[str, Any]]:
    import yaml  # pylint: disable=import-outside-toplevel

    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Failed to load config %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: top level is not a mapping", path)
        return None
    return data


def apply_config(data: Dict[str, Any]) -> None:
    """Apply a config mapping onto Constants; invalid entries are logged and skipped."""
    for key, value in data.items():
        target = _CONFIG_KEYS.get(key)
        if target is None:
            logger.warning("Unknown config key ignored: %s", key)
            continue
        attr, cast = target
        try:
            setattr(Constants, attr, cast(value))
        except (TypeError, ValueError):
            logger.warning("Invalid value for config key %s: %r", key, value)


def _load_yaml_config(path: Optional[str] = None) -> Optional[str]:
    """Load the first YAML config found and apply it, then environment overrides.

    Returns:
        The path of the config file that was applied, or None.
    """
    applied = None
    for candidate in ([path] if path else _config_candidates()):
        if candidate and os.path.isfile(candidate):
            data = _read_yaml(candidate)
            if data is not None:
                apply_config(data.get("jarlock", data))
                applied = candidate
            break

    env_repo = os.environ.get(Constants.ENV_REPOSITORY_URL)
    if env_repo:
        Constants.REPOSITORY_URL = env_repo
    env_cache = os.environ.get(Constants.ENV_CACHE_DIR)
    if env_cache:
        Constants.CACHE_DIR = env_cache
    return applied
