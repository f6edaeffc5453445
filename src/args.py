"""Argument parsing functionality for jarlock."""

import argparse


def _add_common(parser):
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to YAML configuration file",
                        action="store",
                        type=str)
    parser.add_argument("--repository",
                        dest="REPOSITORY_URL",
                        help="Base URL of the Maven repository",
                        action="store",
                        type=str)
    parser.add_argument("--cache-dir",
                        dest="CACHE_DIR",
                        help="Local artifact cache directory",
                        action="store",
                        type=str)


def _add_dependency_inputs(parser):
    parser.add_argument("-p", "--package",
                        dest="PACKAGES",
                        help="Dependency coordinate groupId:artifactId:version (repeatable)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("-d", "--project-dir",
                        dest="PROJECT_DIR",
                        help="Project directory holding the lockfile; enables lockfile reuse",
                        action="store",
                        type=str)
    parser.add_argument("--force",
                        dest="FORCE",
                        help="Ignore an existing lockfile and resolve again",
                        action="store_true")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="jarlock",
        description="jarlock - transitive Maven dependency resolver with lockfile caching",
        add_help=True,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    resolve = sub.add_parser("resolve", help="Resolve dependencies and list the artifacts")
    _add_dependency_inputs(resolve)
    _add_common(resolve)
    resolve.add_argument("-o", "--output",
                         dest="OUTPUT",
                         help="Write the resolved artifacts as JSON to this path",
                         action="store",
                         type=str)

    classpath = sub.add_parser("classpath", help="Resolve dependencies and print a classpath")
    _add_dependency_inputs(classpath)
    _add_common(classpath)

    search = sub.add_parser("search", help="Search the repository index by artifactId")
    search.add_argument("ARTIFACT", help="artifactId to search for", type=str)
    search.add_argument("--rows", dest="ROWS", type=int, default=20,
                        help="Maximum number of results")
    _add_common(search)

    clean = sub.add_parser("clean", help="Remove cached artifacts")
    clean.add_argument("--artifact", dest="ARTIFACT",
                       help="Only remove groupId:artifactId", type=str)
    _add_common(clean)

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
