"""Game installation source.

Wraps GameInstallation values reported by an installation detector (Steam,
EA App, CD/ISO, Wine, ...) so the pipeline can turn them into manifests.
Detection itself happens elsewhere; this module never touches the disk.
"""

from dataclasses import dataclass

from ...core.types import installation_type_token
from ...models import GameInstallation, PublisherInfo
from ...sources.base import ContentData, ContentSource, SourceContent

# Publisher names for the installation origins
INSTALLATION_PUBLISHERS = {
    "steam": ("Steam", "https://store.steampowered.com"),
    "eaapp": ("EA App", "https://www.ea.com/ea-app"),
    "origin": ("Origin", "https://www.ea.com"),
    "thefirstdecade": ("The First Decade", ""),
    "cdiso": ("CD/ISO", ""),
    "wine": ("Wine", "https://www.winehq.org"),
    "lutris": ("Lutris", "https://lutris.net"),
    "retail": ("Retail", ""),
    "unknown": ("Unknown", ""),
}


@dataclass(frozen=True)
class InstallationContent:
    """SourceContent adapter for a detected installation."""

    installation: GameInstallation

    @property
    def uid(self) -> str:
        return self.installation.installation_path

    @property
    def title(self) -> str:
        return f"{self.installation.installation_type.value} installation"


class GameInstallationSource(ContentSource):
    """Content source over detected game installations.

    Example:
        >>> source = GameInstallationSource([GameInstallation("C:/Games/Generals", GameInstallationType.Steam,
        ...                                                   has_zero_hour=True, zero_hour_version="1.04")])
        >>> source.list_content()[0].title
        'Steam installation'
    """

    publisher_type = "gameinstallation"

    def __init__(self, installations: list[GameInstallation] | None = None):
        self.installations = list(installations or [])

    def list_content(self) -> list[SourceContent]:
        return [InstallationContent(installation) for installation in self.installations]

    def get_content(self, uid: str) -> SourceContent:
        for installation in self.installations:
            if installation.installation_path == uid:
                return InstallationContent(installation)
        raise KeyError(f"Installation not found: {uid}")

    def get_content_data(self, content: SourceContent) -> ContentData:
        """Package the installation for the transformer.

        Raises:
            ValueError: If content is not an InstallationContent
        """
        if not isinstance(content, InstallationContent):
            raise ValueError(f"Expected InstallationContent, got {type(content).__name__}")

        return ContentData(
            content=content,
            publisher=self.publisher_info(content),
            metadata={"installation": content.installation},
        )

    def publisher_info(self, content: SourceContent | None = None) -> PublisherInfo:
        """Publisher info named after the installation's origin.

        The publisher type is the installation token, matching the publisher
        segment of the generated ids.
        """
        if not isinstance(content, InstallationContent):
            return PublisherInfo(name="Game installation", publisher_type=self.publisher_type)

        token = installation_type_token(content.installation.installation_type)
        name, website = INSTALLATION_PUBLISHERS[token]
        return PublisherInfo(name=name, publisher_type=token, website=website)

    def get_transformer(self):
        from .transformer import GameInstallationTransformer

        return GameInstallationTransformer()
