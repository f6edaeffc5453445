"""Dependency graph resolution, lockfile handling and classpath assembly."""

from .graph import DependencyResolver, ResolutionContext
from .lockfile import LockfileError
from .classpath import build_classpath, classpath_from_dir, combine_classpaths

__all__ = [
    "DependencyResolver",
    "ResolutionContext",
    "LockfileError",
    "build_classpath",
    "classpath_from_dir",
    "combine_classpaths",
]
