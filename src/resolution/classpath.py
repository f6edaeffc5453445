"""Classpath string assembly from resolved artifacts."""

import glob
import os
from typing import Iterable

from registry.maven.models import ResolvedDependency


def build_classpath(dependencies: Iterable[ResolvedDependency]) -> str:
    return os.pathsep.join(dep.classpath_entry for dep in dependencies)


def classpath_from_dir(lib_dir: str) -> str:
    """Every ``*.jar`` directly inside ``lib_dir``, sorted; empty if the directory is missing."""
    if not os.path.isdir(lib_dir):
        return ""
    jars = sorted(glob.glob(os.path.join(glob.escape(lib_dir), "*.jar")))
    return os.pathsep.join(os.path.abspath(j) for j in jars)


def combine_classpaths(*classpaths: str) -> str:
    """Join non-empty classpath fragments."""
    return os.pathsep.join(cp for cp in classpaths if cp)
