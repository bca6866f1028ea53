"""Type definitions for game content manifests.

This module defines the enumerations shared by the identifier grammar,
the manifest model and the evaluators, plus TypedDict classes that mirror
the JSON schema structure defined in schemas/content_manifest.schema.json.
"""

from enum import Enum
from typing import TypedDict


class ContentType(Enum):
    """Kind of distributable content a manifest describes."""

    GameInstallation = "GameInstallation"
    GameClient = "GameClient"
    Mod = "Mod"
    Patch = "Patch"
    Addon = "Addon"
    MapPack = "MapPack"
    LanguagePack = "LanguagePack"
    ContentBundle = "ContentBundle"
    PublisherReferral = "PublisherReferral"
    ContentReferral = "ContentReferral"
    Mission = "Mission"
    Map = "Map"
    UnknownContentType = "UnknownContentType"


class GameType(Enum):
    """Base game a piece of content targets."""

    Generals = "Generals"
    ZeroHour = "ZeroHour"
    Unknown = "Unknown"


class GameInstallationType(Enum):
    """Where a detected game installation came from."""

    Steam = "Steam"
    EaApp = "EaApp"
    Origin = "Origin"
    TheFirstDecade = "TheFirstDecade"
    CDISO = "CDISO"
    Wine = "Wine"
    Lutris = "Lutris"
    Retail = "Retail"
    Unknown = "Unknown"


class DependencyInstallBehavior(Enum):
    """Whether and how a dependency has to be acquired."""

    RequireExisting = "RequireExisting"
    AutoInstall = "AutoInstall"
    Suggest = "Suggest"
    Optional = "Optional"


class ConflictType(Enum):
    """Classification of a conflict rule. Display and logging only."""

    HardConflict = "HardConflict"
    VersionConflict = "VersionConflict"
    FileConflict = "FileConflict"
    PublisherConflict = "PublisherConflict"
    FeatureConflict = "FeatureConflict"


class ResolutionStrategy(Enum):
    """What happens when a conflict rule is triggered."""

    Block = "Block"
    Warn = "Warn"
    PreferNewer = "PreferNewer"
    PreferExisting = "PreferExisting"
    UserChoice = "UserChoice"
    Merge = "Merge"


class ResolutionState(Enum):
    """State of a single activation/conflict resolution request."""

    Pending = "Pending"
    Evaluating = "Evaluating"
    Allowed = "Allowed"
    Blocked = "Blocked"
    Warned = "Warned"
    AwaitingUserChoice = "AwaitingUserChoice"
    FlaggedForMerge = "FlaggedForMerge"


# Literal segment used as the content type of every game installation id
GAME_INSTALLATION_TOKEN = "gameinstallation"

# Publisher segment accepted in installation ids used by type-based dependencies
ANY_INSTALLATION_TOKEN = "any"

CONTENT_TYPE_TOKENS: dict[ContentType, str] = {
    ContentType.GameInstallation: "gameinstallation",
    ContentType.GameClient: "gameclient",
    ContentType.Mod: "mod",
    ContentType.Patch: "patch",
    ContentType.Addon: "addon",
    ContentType.MapPack: "mappack",
    ContentType.LanguagePack: "languagepack",
    ContentType.ContentBundle: "contentbundle",
    ContentType.PublisherReferral: "publisherreferral",
    ContentType.ContentReferral: "contentreferral",
    ContentType.Mission: "mission",
    ContentType.Map: "map",
    ContentType.UnknownContentType: "unknown",
}

GAME_TYPE_TOKENS: dict[GameType, str] = {
    GameType.Generals: "generals",
    GameType.ZeroHour: "zerohour",
}

INSTALLATION_TYPE_TOKENS: dict[GameInstallationType, str] = {
    GameInstallationType.Steam: "steam",
    GameInstallationType.EaApp: "eaapp",
    GameInstallationType.Origin: "origin",
    GameInstallationType.TheFirstDecade: "thefirstdecade",
    GameInstallationType.CDISO: "cdiso",
    GameInstallationType.Wine: "wine",
    GameInstallationType.Lutris: "lutris",
    GameInstallationType.Retail: "retail",
    GameInstallationType.Unknown: "unknown",
}


def content_type_token(content_type: ContentType) -> str:
    """Return the identifier token for a content type.

    Raises:
        KeyError: If the content type has no mapping
    """
    return CONTENT_TYPE_TOKENS[content_type]


def game_type_token(game_type: GameType) -> str:
    """Return the identifier token for a game type.

    Raises:
        KeyError: If the game type has no identifier token (GameType.Unknown)
    """
    return GAME_TYPE_TOKENS[game_type]


def installation_type_token(installation_type: GameInstallationType) -> str:
    """Return the identifier token for an installation type."""
    return INSTALLATION_TYPE_TOKENS[installation_type]


# ---------------------------------------------------------------------------
# Persisted form
# ---------------------------------------------------------------------------


class PublisherInfoDict(TypedDict, total=False):
    """Publisher block of a persisted manifest."""

    name: str
    publisherType: str
    website: str
    supportUrl: str
    contactEmail: str


class VersionRangeDict(TypedDict, total=False):
    """Version range attached to a conflict rule."""

    minVersion: str
    maxVersion: str
    minInclusive: bool
    maxInclusive: bool
    exactVersion: str
    constraintExpression: str


class ContentDependencyDict(TypedDict, total=False):
    """Dependency entry of a persisted manifest."""

    id: str  # Manifest id string, validated on load
    name: str
    dependencyType: str
    publisherType: str
    strictPublisher: bool
    minVersion: str
    maxVersion: str
    exactVersion: str
    compatibleVersions: list[str]
    compatibleGameTypes: list[str]
    isExclusive: bool
    conflictsWith: list[str]  # Manifest id strings
    installBehavior: str
    isOptional: bool
    requiredPublisherTypes: list[str]
    incompatiblePublisherTypes: list[str]


class ConflictRuleDict(TypedDict, total=False):
    """Conflict rule entry of a persisted manifest."""

    conflictingContentId: str
    conflictType: str
    resolutionStrategy: str
    conflictVersionRange: VersionRangeDict
    reason: str
    resolutionMessage: str


class ManifestFileDict(TypedDict, total=False):
    """File entry of a persisted manifest."""

    relativePath: str
    size: int
    hash: str
    sourceType: str
    isExecutable: bool


class InstallationInstructionsDict(TypedDict, total=False):
    """Install instructions of a persisted manifest."""

    preInstallSteps: list[str]
    postInstallSteps: list[str]
    workspaceStrategy: str


class ContentManifestDict(TypedDict, total=False):
    """Complete persisted manifest."""

    manifestVersion: str
    id: str  # Manifest id string, validated on load
    name: str
    version: str
    contentType: str
    targetGame: str
    description: str
    tags: list[str]
    publisher: PublisherInfoDict
    dependencies: list[ContentDependencyDict]
    conflictRules: list[ConflictRuleDict]
    contentReferences: list[str]  # Manifest id strings
    files: list[ManifestFileDict]
    installationInstructions: InstallationInstructionsDict
