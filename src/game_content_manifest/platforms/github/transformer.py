"""GitHub release transformer.

Converts release data into a ContentManifest whose id is derived from the
repository owner, repository name and release tag.
"""

from ...config import get_settings
from ...core.manifest_id import ManifestId
from ...core.types import ANY_INSTALLATION_TOKEN, GAME_INSTALLATION_TOKEN, ContentType, GameType, game_type_token
from ...generator import generate_release_id, normalize_version_string
from ...models import ContentDependency, ContentManifest, ManifestFile
from ...sources.base import ContentData, SourceContent
from ...transformers.base import Transformer
from .source import GitHubRelease


def game_installation_dependency(game_type: GameType, min_game_version: str | None = None) -> ContentDependency:
    """Dependency on any installation of a game, at least min_game_version."""
    min_version = min_game_version or "0"
    dependency_id = ManifestId(
        f"{get_settings().schema_version}.{normalize_version_string(min_version)}."
        f"{ANY_INSTALLATION_TOKEN}.{GAME_INSTALLATION_TOKEN}.{game_type_token(game_type)}"
    )
    return ContentDependency(
        id=dependency_id,
        name=f"{game_type.value} installation",
        dependency_type=ContentType.GameInstallation,
        min_version=min_version,
        compatible_game_types=(game_type,),
    )


class GitHubReleaseTransformer(Transformer):
    """Builds one manifest per release."""

    def transform(
        self,
        content: SourceContent,
        data: ContentData,
        min_game_version: str | None = None,
        **kwargs
    ) -> list[ContentManifest]:
        """Transform a release into a manifest.

        Args:
            content: The release
            data: Release data from GitHubReleaseSource
            min_game_version: Lowest game version the release supports
            **kwargs: Extra tags under 'tags'

        Returns:
            A single-element list with the release manifest
        """
        release = data.metadata.get("release", content)
        if not isinstance(release, GitHubRelease):
            raise ValueError(f"Expected GitHubRelease, got {type(release).__name__}")

        dependencies: tuple[ContentDependency, ...] = ()
        if release.target_game is not GameType.Unknown:
            dependencies = (game_installation_dependency(release.target_game, min_game_version),)

        manifest = ContentManifest(
            id=ManifestId(
                generate_release_id(release.owner, release.repository, release.tag, release.content_type)
            ),
            name=release.title,
            version=release.tag.lstrip("vV"),
            content_type=release.content_type,
            target_game=release.target_game,
            publisher=data.publisher,
            dependencies=dependencies,
            files=tuple(
                ManifestFile(
                    relative_path=f["relative_path"],
                    size=f.get("size", 0),
                    hash=f.get("hash", ""),
                    source_type="remote",
                )
                for f in data.files
            ),
            description=data.metadata.get("description", ""),
            tags=("github", *kwargs.get("tags", ())),
        )
        return [manifest]
