"""Shared fixtures for the manifest tests."""

import pytest

from game_content_manifest.config import ManifestSettings, configure
from game_content_manifest.core.manifest_id import ManifestId
from game_content_manifest.core.types import ContentType, GameType
from game_content_manifest.models import ContentManifest, PublisherInfo


@pytest.fixture(autouse=True)
def default_settings():
    """Every test starts and ends with default settings."""
    configure(ManifestSettings())
    yield
    configure(ManifestSettings())


def make_manifest(
    manifest_id: str,
    version: str = "1.0",
    content_type: ContentType = ContentType.Mod,
    target_game: GameType = GameType.ZeroHour,
    publisher_type: str = "",
    **kwargs,
) -> ContentManifest:
    """Build a manifest with sensible defaults for tests."""
    return ContentManifest(
        id=ManifestId(manifest_id),
        name=kwargs.pop("name", manifest_id.split(".")[-1].title()),
        version=version,
        content_type=content_type,
        target_game=target_game,
        publisher=PublisherInfo(name=publisher_type or "Test", publisher_type=publisher_type),
        **kwargs,
    )


@pytest.fixture
def zero_hour_installation() -> ContentManifest:
    """Steam Zero Hour 1.04 installation manifest."""
    return make_manifest(
        "1.104.steam.gameinstallation.zerohour",
        version="1.04",
        content_type=ContentType.GameInstallation,
        publisher_type="steam",
    )


@pytest.fixture
def urban_chaos() -> ContentManifest:
    """A plain mod without dependencies or conflict rules."""
    return make_manifest("1.0.cnclabs.mod.urbanchaos", version="1.2", publisher_type="cnclabs")
