"""jarlock - transitive Maven dependency resolver with lockfile caching.

Returns:
    int: Exit code
"""
import json
import logging
import sys
from typing import Dict, List, Optional

from args import parse_args
from constants import Constants, ExitCodes, _load_yaml_config
from common.logging_utils import configure_logging
from registry.maven.cache import ArtifactCache
from registry.maven.client import ArtifactClient
from registry.maven.models import Coordinate, ResolvedDependency
from registry.maven import search
from resolution.classpath import build_classpath
from resolution.graph import DependencyResolver

logger = logging.getLogger(__name__)


def _setup(args) -> None:
    configure_logging(getattr(args, "LOG_LEVEL", None))
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)

    applied = _load_yaml_config(getattr(args, "CONFIG", None))
    if applied:
        logger.debug("Loaded configuration from %s", applied)
    # CLI flags take precedence over config files and environment.
    if getattr(args, "REPOSITORY_URL", None):
        Constants.REPOSITORY_URL = args.REPOSITORY_URL
    if getattr(args, "CACHE_DIR", None):
        Constants.CACHE_DIR = args.CACHE_DIR


def parse_declared(tokens: List[str]) -> Dict[str, Optional[str]]:
    """Turn ``g:a:v`` tokens into the ``{"g:a": "v"}`` mapping the resolver takes.

    Raises:
        ValueError: On a malformed token.
    """
    declared: Dict[str, Optional[str]] = {}
    for token in tokens:
        coord = Coordinate.parse(token)
        declared[coord.ga_key] = coord.version
    return declared


def _resolve(args) -> Optional[List[ResolvedDependency]]:
    try:
        declared = parse_declared(args.PACKAGES)
    except ValueError as exc:
        logger.error("%s", exc)
        sys.exit(ExitCodes.FILE_ERROR.value)
    if not declared:
        logger.error("No dependencies given; use -p groupId:artifactId:version")
        sys.exit(ExitCodes.FILE_ERROR.value)

    missing = [ga for ga, version in declared.items() if not version]
    if missing:
        logger.error("No version specified for %s", ", ".join(missing))
        sys.exit(ExitCodes.RESOLUTION_ERROR.value)

    resolver = DependencyResolver(ArtifactClient(cache=ArtifactCache()))
    if args.PROJECT_DIR:
        resolved = resolver.resolve_with_lockfile(args.PROJECT_DIR, declared, args.FORCE)
    else:
        resolved = resolver.resolve_all(declared)
    if not resolved:
        logger.error("No artifacts could be resolved")
        return None
    return resolved


def _cmd_resolve(args) -> int:
    resolved = _resolve(args)
    if resolved is None:
        return ExitCodes.RESOLUTION_ERROR.value
    rows = [
        {
            "groupId": dep.group_id,
            "artifactId": dep.artifact_id,
            "version": dep.version,
            "binaryPath": dep.classpath_entry,
        }
        for dep in sorted(resolved, key=lambda d: d.ga_key)
    ]
    if args.OUTPUT:
        try:
            with open(args.OUTPUT, "w", encoding="utf-8") as fh:
                json.dump(rows, fh, indent=2)
        except OSError as e:
            logger.error("Could not write %s: %s", args.OUTPUT, e)
            return ExitCodes.FILE_ERROR.value
    else:
        for row in rows:
            print(f"{row['groupId']}:{row['artifactId']}:{row['version']}")
    return ExitCodes.SUCCESS.value


def _cmd_classpath(args) -> int:
    resolved = _resolve(args)
    if resolved is None:
        return ExitCodes.RESOLUTION_ERROR.value
    print(build_classpath(sorted(resolved, key=lambda d: d.ga_key)))
    return ExitCodes.SUCCESS.value


def _cmd_search(args) -> int:
    results = search.search_by_artifact_id(args.ARTIFACT, rows=args.ROWS)
    if not results:
        logger.warning("No artifacts found for '%s'", args.ARTIFACT)
        return ExitCodes.EXIT_WARNINGS.value
    for result in results:
        print(result)
    return ExitCodes.SUCCESS.value


def _cmd_clean(args) -> int:
    cache = ArtifactCache()
    if args.ARTIFACT:
        try:
            coord = Coordinate.parse(args.ARTIFACT)
        except ValueError as exc:
            logger.error("%s", exc)
            return ExitCodes.FILE_ERROR.value
        if not cache.clean_artifact(coord.group_id, coord.artifact_id):
            logger.warning("%s is not cached", coord.ga_key)
            return ExitCodes.EXIT_WARNINGS.value
    else:
        cache.clean_all()
    return ExitCodes.SUCCESS.value


_COMMANDS = {
    "resolve": _cmd_resolve,
    "classpath": _cmd_classpath,
    "search": _cmd_search,
    "clean": _cmd_clean,
}


def main(argv=None) -> int:
    """Main function of the program."""
    args = parse_args(argv)
    _setup(args)
    return _COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
