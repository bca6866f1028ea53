"""Game installation transformer.

Produces one GameInstallation manifest per game found in an installation.
"""

import logging

from ...core.manifest_id import ManifestId
from ...core.types import ContentType, GameType
from ...generator import generate_game_installation_id
from ...models import ContentManifest, GameInstallation
from ...sources.base import ContentData, SourceContent
from ...transformers.base import Transformer

logger = logging.getLogger(__name__)

GAME_DISPLAY_NAMES = {
    GameType.Generals: "Command & Conquer: Generals",
    GameType.ZeroHour: "Command & Conquer: Generals Zero Hour",
}


class GameInstallationTransformer(Transformer):
    """Builds manifests for the games present in an installation."""

    def transform(
        self,
        content: SourceContent,
        data: ContentData,
        **kwargs
    ) -> list[ContentManifest]:
        """Transform an installation into one manifest per game.

        The manifest version is the detected game version, or "0" when the
        detector could not tell.

        Raises:
            ValueError: If data carries no GameInstallation
        """
        installation = data.metadata.get("installation")
        if not isinstance(installation, GameInstallation):
            raise ValueError(f"Expected GameInstallation, got {type(installation).__name__}")

        manifests = []
        for game_type in installation.game_types():
            version = installation.version_for(game_type)
            manifest_id = ManifestId(generate_game_installation_id(installation, game_type, version))
            manifests.append(
                ContentManifest(
                    id=manifest_id,
                    name=f"{GAME_DISPLAY_NAMES[game_type]} ({data.publisher.name})",
                    version=version or "0",
                    content_type=ContentType.GameInstallation,
                    target_game=game_type,
                    publisher=data.publisher,
                    description=installation.installation_path,
                    tags=("gameinstallation",),
                )
            )

        if not manifests:
            logger.info("Installation at %s contains no known game", installation.installation_path)
        return manifests
