"""Manifest model.

Read-only records the dependency and conflict evaluators operate on. A
ContentManifest is built once per content package by a loader (a content
source through the pipeline, or the persisted-form reader) and never
mutated afterwards; rebuild() returns a modified copy.

Sequence fields are tuples so a loaded manifest is a true snapshot that
can be shared between threads.
"""

from dataclasses import dataclass, field, replace
from typing import Any

from .core.manifest_id import ManifestId
from .core.types import (
    ConflictType,
    ContentType,
    DependencyInstallBehavior,
    GameInstallationType,
    GameType,
    ResolutionStrategy,
)
from .core.versions import VersionRange


@dataclass(frozen=True)
class PublisherInfo:
    """Who published a piece of content."""

    name: str = ""
    publisher_type: str = ""  # Provenance token, e.g. 'steam', 'cnclabs', 'github'
    website: str = ""
    support_url: str = ""
    contact_email: str = ""


@dataclass(frozen=True)
class ManifestFile:
    """A file that belongs to a content package."""

    relative_path: str
    size: int = 0
    hash: str = ""
    source_type: str = ""
    is_executable: bool = False


@dataclass(frozen=True)
class InstallationInstructions:
    """Install steps. Interpreted by the workspace assembly, not by this library."""

    pre_install_steps: tuple[str, ...] = ()
    post_install_steps: tuple[str, ...] = ()
    workspace_strategy: str = ""


@dataclass(frozen=True)
class ContentDependency:
    """A requirement on another identity.

    Only dependencies with install_behavior RequireExisting that are not
    optional can fail dependency validation; everything else is advisory.
    """

    id: ManifestId
    name: str = ""
    dependency_type: ContentType = ContentType.UnknownContentType
    publisher_type: str | None = None
    strict_publisher: bool = False
    min_version: str | None = None
    max_version: str | None = None
    exact_version: str | None = None
    compatible_versions: tuple[str, ...] = ()
    compatible_game_types: tuple[GameType, ...] = ()
    is_exclusive: bool = False
    conflicts_with: tuple[ManifestId, ...] = ()
    install_behavior: DependencyInstallBehavior = DependencyInstallBehavior.RequireExisting
    is_optional: bool = False
    required_publisher_types: tuple[str, ...] = ()
    incompatible_publisher_types: tuple[str, ...] = ()

    @property
    def has_version_constraint(self) -> bool:
        return bool(
            self.min_version or self.max_version or self.exact_version or self.compatible_versions
        )

    @property
    def is_blocking(self) -> bool:
        """True when absence of this dependency fails validation."""
        return (
            self.install_behavior is DependencyInstallBehavior.RequireExisting
            and not self.is_optional
        )


@dataclass(frozen=True)
class ConflictRule:
    """A declared incompatibility owned by a manifest.

    A rule without conflict_version_range matches every version of the
    conflicting id.
    """

    conflicting_content_id: ManifestId
    conflict_type: ConflictType = ConflictType.HardConflict
    resolution_strategy: ResolutionStrategy = ResolutionStrategy.Block
    conflict_version_range: VersionRange | None = None
    reason: str = ""
    resolution_message: str = ""


@dataclass(frozen=True)
class ContentManifest:
    """The declared contract of one content package."""

    id: ManifestId
    name: str
    version: str = ""
    content_type: ContentType = ContentType.UnknownContentType
    target_game: GameType = GameType.Unknown
    publisher: PublisherInfo = field(default_factory=PublisherInfo)
    dependencies: tuple[ContentDependency, ...] = ()
    conflict_rules: tuple[ConflictRule, ...] = ()
    content_references: tuple[ManifestId, ...] = ()
    files: tuple[ManifestFile, ...] = ()
    installation: InstallationInstructions = field(default_factory=InstallationInstructions)
    manifest_version: str = "1.0"
    description: str = ""
    tags: tuple[str, ...] = ()

    def rebuild(self, **changes: Any) -> "ContentManifest":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


@dataclass(frozen=True)
class GameInstallation:
    """A detected game installation, as reported by an installation detector.

    Pure value; nothing here touches the filesystem.
    """

    installation_path: str
    installation_type: GameInstallationType = GameInstallationType.Unknown
    has_generals: bool = False
    has_zero_hour: bool = False
    generals_version: str | None = None
    zero_hour_version: str | None = None

    def game_types(self) -> list[GameType]:
        """Games present in this installation, Generals first."""
        games = []
        if self.has_generals:
            games.append(GameType.Generals)
        if self.has_zero_hour:
            games.append(GameType.ZeroHour)
        return games

    def version_for(self, game_type: GameType) -> str | None:
        if game_type is GameType.Generals:
            return self.generals_version
        if game_type is GameType.ZeroHour:
            return self.zero_hour_version
        return None
