"""Core identity utilities.

This package contains the identifier grammar, version handling, the
exception hierarchy, type definitions and schema validation used by every
other module.
"""

from .errors import (
    ConflictBlocked,
    DependencyMissing,
    EmptyNormalizedSegment,
    InvalidFormat,
    ManifestError,
    ManifestValidationError,
    MissingRequiredArgument,
    NegativeVersion,
    ResolutionStateError,
)
from .manifest_id import ManifestId, ValidationResult, is_valid_manifest_id, validate
from .types import (
    ConflictType,
    ContentManifestDict,
    ContentType,
    DependencyInstallBehavior,
    GameInstallationType,
    GameType,
    ResolutionState,
    ResolutionStrategy,
)
from .validator import validate_manifest_document, validate_manifest_with_error_details
from .versions import VersionRange, compare_versions, parse_version

__all__ = [
    "ConflictBlocked",
    "ConflictType",
    "ContentManifestDict",
    "ContentType",
    "DependencyInstallBehavior",
    "DependencyMissing",
    "EmptyNormalizedSegment",
    "GameInstallationType",
    "GameType",
    "InvalidFormat",
    "ManifestError",
    "ManifestId",
    "ManifestValidationError",
    "MissingRequiredArgument",
    "NegativeVersion",
    "ResolutionState",
    "ResolutionStateError",
    "ResolutionStrategy",
    "ValidationResult",
    "VersionRange",
    "compare_versions",
    "is_valid_manifest_id",
    "parse_version",
    "validate",
    "validate_manifest_document",
    "validate_manifest_with_error_details",
]
