"""Game Content Manifest.

Identity and compatibility core for installable game content: manifest ids,
dependency satisfaction and conflict resolution for Command & Conquer:
Generals / Zero Hour content packages.
"""

# Identity
from .core import (
    ConflictBlocked,
    ContentType,
    DependencyMissing,
    GameInstallationType,
    GameType,
    InvalidFormat,
    ManifestError,
    ManifestId,
    ResolutionState,
    ResolutionStrategy,
    VersionRange,
    validate,
)
from .generator import (
    generate_game_installation_id,
    generate_publisher_content_id,
    generate_release_id,
)
from .service import ManifestIdService, OperationResult

# Model and persisted form
from .models import ConflictRule, ContentDependency, ContentManifest, GameInstallation, PublisherInfo
from .serialization import dump_manifest, load_manifest, manifest_from_dict, manifest_to_dict

# Evaluators
from .activation import ActivationVerdict, evaluate_activation
from .conflicts import ConflictResolver, resolve_conflicts
from .dependencies import DependencyResolver, find_missing_dependencies, validate_dependencies

# Settings
from .config import ManifestSettings, configure, get_settings, load_settings

# Sources
from .pipeline import ManifestPipeline
from .registry import SourceRegistry
from .sources.base import ContentSource, InMemoryManifestCache, ManifestCache

__version__ = "0.1.0"

# Auto-discover and register all platforms
SourceRegistry.discover_platforms()

__all__ = [
    "ActivationVerdict",
    "ConflictBlocked",
    "ConflictResolver",
    "ConflictRule",
    "ContentDependency",
    "ContentManifest",
    "ContentSource",
    "ContentType",
    "DependencyMissing",
    "DependencyResolver",
    "GameInstallation",
    "GameInstallationType",
    "GameType",
    "InMemoryManifestCache",
    "InvalidFormat",
    "ManifestCache",
    "ManifestError",
    "ManifestId",
    "ManifestIdService",
    "ManifestPipeline",
    "ManifestSettings",
    "OperationResult",
    "PublisherInfo",
    "ResolutionState",
    "ResolutionStrategy",
    "SourceRegistry",
    "VersionRange",
    "configure",
    "dump_manifest",
    "evaluate_activation",
    "find_missing_dependencies",
    "generate_game_installation_id",
    "generate_publisher_content_id",
    "generate_release_id",
    "get_settings",
    "load_manifest",
    "load_settings",
    "manifest_from_dict",
    "manifest_to_dict",
    "resolve_conflicts",
    "validate",
    "validate_dependencies",
]
