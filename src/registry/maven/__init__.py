"""Maven repository access: client, cache, manifest parsing and parent chains."""

from .models import ArtifactSpec, Coordinate, DeclaredDependency, ManifestInfo, ResolvedDependency
from .cache import ArtifactCache
from .client import ArtifactClient
from .pom_parser import ManifestDocument, ManifestParseError, ManifestParser, substitute_properties
from .parent_resolver import ParentChainResolver

__all__ = [
    "ArtifactSpec",
    "Coordinate",
    "DeclaredDependency",
    "ManifestInfo",
    "ResolvedDependency",
    "ArtifactCache",
    "ArtifactClient",
    "ManifestDocument",
    "ManifestParseError",
    "ManifestParser",
    "substitute_properties",
    "ParentChainResolver",
]
