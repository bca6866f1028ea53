"""Tests for the registry, the pipeline and the bundled platforms."""

import pytest

from game_content_manifest.activation import evaluate_activation
from game_content_manifest.core.types import ContentType, GameInstallationType, GameType
from game_content_manifest.dependencies import DependencyResolver
from game_content_manifest.models import GameInstallation
from game_content_manifest.pipeline import ManifestPipeline
from game_content_manifest.platforms.github import (
    GitHubRelease,
    GitHubReleaseSource,
    GitHubReleaseTransformer,
    game_installation_dependency,
)
from game_content_manifest.platforms.installations import GameInstallationSource, InstallationContent
from game_content_manifest.registry import SourceRegistry


@pytest.fixture
def release() -> GitHubRelease:
    return GitHubRelease(
        owner="TheSuperHackers",
        repository="GeneralsGameCode",
        tag="weekly-2025-01-14",
        body="Weekly build",
        published_at="2025-01-14T10:00:00Z",
        content_type=ContentType.GameClient,
        assets=({"name": "generalsv.exe", "size": 4096, "sha256": "abc123"},),
    )


@pytest.fixture
def installation() -> GameInstallation:
    return GameInstallation(
        installation_path="C:/Games/Steam/steamapps/common/Command and Conquer Generals",
        installation_type=GameInstallationType.Steam,
        has_generals=True,
        has_zero_hour=True,
        generals_version="1.08",
        zero_hour_version="1.04",
    )


class TestSourceRegistry:
    """Test source registration and lookup."""

    def test_bundled_platforms_registered(self) -> None:
        """Test that importing the package registers the bundled platforms."""
        sources = SourceRegistry.list_sources()

        assert "github" in sources
        assert "installations" in sources

    def test_unknown_source(self) -> None:
        """Test that an unknown name lists what is available."""
        with pytest.raises(ValueError, match="Unknown source: 'moddb'"):
            SourceRegistry.create_source("moddb")

    def test_create_pipeline(self, release: GitHubRelease) -> None:
        """Test that factories receive the keyword arguments."""
        pipeline = SourceRegistry.create_pipeline("github", releases=[release])

        assert isinstance(pipeline, ManifestPipeline)
        assert isinstance(pipeline.source, GitHubReleaseSource)
        assert pipeline.source.list_content() == [release]


class TestGitHubPlatform:
    """Test the GitHub release source and transformer."""

    def test_release_properties(self, release: GitHubRelease) -> None:
        """Test uid, title and repository URL."""
        assert release.uid == "TheSuperHackers/GeneralsGameCode@weekly-2025-01-14"
        assert release.title == "GeneralsGameCode weekly-2025-01-14"
        assert release.repository_url == "https://github.com/TheSuperHackers/GeneralsGameCode"

    def test_get_content(self, release: GitHubRelease) -> None:
        """Test case-insensitive lookup by uid."""
        source = GitHubReleaseSource([release])

        assert source.get_content("thesuperhackers/generalsgamecode@WEEKLY-2025-01-14") is release
        with pytest.raises(KeyError, match="Release not found"):
            source.get_content("other/repo@v1")

    def test_get_content_data_rejects_foreign_content(self) -> None:
        """Test that only releases are accepted."""
        with pytest.raises(ValueError, match="Expected GitHubRelease"):
            GitHubReleaseSource().get_content_data(object())  # type: ignore[arg-type]

    def test_publisher_info(self, release: GitHubRelease) -> None:
        """Test publisher info derived from the owner."""
        publisher = GitHubReleaseSource().publisher_info(release)

        assert publisher.name == "TheSuperHackers"
        assert publisher.publisher_type == "github"
        assert publisher.support_url == "https://github.com/TheSuperHackers/GeneralsGameCode/issues"

    def test_transform(self, release: GitHubRelease) -> None:
        """Test the manifest built for a release."""
        source = GitHubReleaseSource([release])
        data = source.get_content_data(release)

        (manifest,) = GitHubReleaseTransformer().transform(release, data, min_game_version="1.04", tags=["weekly"])

        assert manifest.id == "1.20250114.thesuperhackers.gameclient.generalsgamecode"
        assert manifest.version == "weekly-2025-01-14"
        assert manifest.content_type is ContentType.GameClient
        assert manifest.dependencies == (game_installation_dependency(GameType.ZeroHour, "1.04"),)
        assert manifest.files[0].relative_path == "generalsv.exe"
        assert manifest.files[0].hash == "abc123"
        assert manifest.files[0].source_type == "remote"
        assert manifest.description == "Weekly build"
        assert manifest.tags == ("github", "weekly")

    def test_version_tag_prefix_stripped(self) -> None:
        """Test that a leading v is removed from the manifest version."""
        release = GitHubRelease("cnclabs", "urban-chaos", "v1.2")
        data = GitHubReleaseSource([release]).get_content_data(release)

        (manifest,) = GitHubReleaseTransformer().transform(release, data)

        assert manifest.id == "1.12.cnclabs.mod.urbanchaos"
        assert manifest.version == "1.2"

    def test_unknown_game_has_no_dependency(self) -> None:
        """Test that releases for no particular game get no installation dependency."""
        release = GitHubRelease("cnclabs", "tools", "v1", content_type=ContentType.Addon, target_game=GameType.Unknown)
        data = GitHubReleaseSource([release]).get_content_data(release)

        (manifest,) = GitHubReleaseTransformer().transform(release, data)

        assert manifest.dependencies == ()

    def test_game_installation_dependency(self) -> None:
        """Test the any-installation dependency."""
        dependency = game_installation_dependency(GameType.Generals)

        assert dependency.id == "1.0.any.gameinstallation.generals"
        assert dependency.min_version == "0"
        assert dependency.dependency_type is ContentType.GameInstallation
        assert dependency.compatible_game_types == (GameType.Generals,)


class TestInstallationsPlatform:
    """Test the game installation source and transformer."""

    def test_one_manifest_per_game(self, installation: GameInstallation) -> None:
        """Test that every detected game gets a manifest."""
        pipeline = SourceRegistry.create_pipeline("installations", installations=[installation])

        manifests = list(pipeline.generate_manifests())

        assert [str(m.id) for m in manifests] == [
            "1.108.steam.gameinstallation.generals",
            "1.104.steam.gameinstallation.zerohour",
        ]
        assert manifests[1].name == "Command & Conquer: Generals Zero Hour (Steam)"
        assert manifests[1].version == "1.04"
        assert manifests[1].publisher.publisher_type == "steam"

    def test_unknown_version(self) -> None:
        """Test that an undetected version becomes "0"."""
        installation = GameInstallation("/opt/generals", GameInstallationType.Wine, has_zero_hour=True)
        content = InstallationContent(installation)
        pipeline = ManifestPipeline(GameInstallationSource([installation]))

        (manifest,) = pipeline.generate_manifests_for_content(content)

        assert manifest.id == "1.0.wine.gameinstallation.zerohour"
        assert manifest.version == "0"

    def test_installation_without_games(self) -> None:
        """Test that an empty installation yields nothing."""
        installation = GameInstallation("/opt/empty", GameInstallationType.Retail)
        pipeline = ManifestPipeline(GameInstallationSource([installation]))

        assert list(pipeline.generate_manifests()) == []

    def test_get_content(self, installation: GameInstallation) -> None:
        """Test lookup by installation path."""
        source = GameInstallationSource([installation])

        assert source.get_content(installation.installation_path).title == "Steam installation"
        with pytest.raises(KeyError):
            source.get_content("/nowhere")


class TestManifestPipeline:
    """Test the platform-agnostic pipeline."""

    def test_filter_and_limit(self, installation: GameInstallation) -> None:
        """Test that items can be filtered and capped."""
        other = GameInstallation("/opt/generals", GameInstallationType.Wine, has_generals=True)
        pipeline = ManifestPipeline(GameInstallationSource([installation, other]))

        wine_only = list(pipeline.generate_manifests(filter_fn=lambda c: c.uid == "/opt/generals"))
        first_only = list(pipeline.generate_manifests(limit=1))

        assert [str(m.id) for m in wine_only] == ["1.0.wine.gameinstallation.generals"]
        assert len(first_only) == 2

    def test_build_cache(self, installation: GameInstallation) -> None:
        """Test that manifests are loaded into a cache keyed by id."""
        cache = ManifestPipeline(GameInstallationSource([installation])).build_cache()

        assert len(cache) == 2
        assert cache.get("1.104.STEAM.gameinstallation.zerohour").target_game is GameType.ZeroHour

    def test_build_cache_replaces_duplicates(self, installation: GameInstallation, caplog) -> None:
        """Test that a repeated id replaces the earlier manifest."""
        cache = ManifestPipeline(GameInstallationSource([installation, installation])).build_cache()

        assert len(cache) == 2
        assert "Duplicate manifest id" in caplog.text


class TestEndToEnd:
    """Test platforms feeding dependency checks."""

    def test_release_activates_against_installation(self, release: GitHubRelease, installation: GameInstallation) -> None:
        """Test that a detected installation satisfies a release's game dependency."""
        installed = ManifestPipeline(GameInstallationSource([installation])).build_cache()
        (client,) = ManifestPipeline(GitHubReleaseSource([release])).generate_manifests(min_game_version="1.04")

        verdict = evaluate_activation([client], available=installed.as_mapping())

        assert verdict.allowed
        assert verdict.manifests == [client]

    def test_release_blocked_without_installation(self, release: GitHubRelease) -> None:
        """Test that the game dependency blocks when no installation is known."""
        (client,) = ManifestPipeline(GitHubReleaseSource([release])).generate_manifests(min_game_version="1.04")

        verdict = evaluate_activation([client])

        assert not verdict.allowed
        assert verdict.missing_ids == ["1.104.any.gameinstallation.zerohour"]

    def test_resolver_skips_type_based_dependency(self, release: GitHubRelease) -> None:
        """Test that the resolver does not look up any-installation dependencies."""
        cache = ManifestPipeline(GitHubReleaseSource([release])).build_cache()

        result = DependencyResolver(cache).resolve(["1.20250114.thesuperhackers.gameclient.generalsgamecode"])

        assert result.success
        assert len(result.resolved_manifests) == 1
