"""Tests for the result-returning id service."""

import pytest

from game_content_manifest.core.manifest_id import ManifestId
from game_content_manifest.core.types import ContentType, GameInstallationType, GameType
from game_content_manifest.models import GameInstallation
from game_content_manifest.service import ManifestIdService, OperationResult


@pytest.fixture
def service() -> ManifestIdService:
    return ManifestIdService()


@pytest.fixture
def steam_installation() -> GameInstallation:
    return GameInstallation(
        installation_path="C:/Games/Steam/steamapps/common/Command and Conquer Generals Zero Hour",
        installation_type=GameInstallationType.Steam,
        has_zero_hour=True,
        zero_hour_version="1.04",
    )


class TestOperationResult:
    """Test the result container."""

    def test_ok(self) -> None:
        """Test a successful result."""
        result = OperationResult.ok(42)

        assert result.success
        assert result.data == 42
        assert result.first_error is None

    def test_failed(self) -> None:
        """Test a failed result."""
        result = OperationResult.failed("first", "second")

        assert not result.success
        assert result.data is None
        assert result.errors == ("first", "second")
        assert result.first_error == "first"


class TestManifestIdService:
    """Test that every operation reports failures instead of raising."""

    def test_publisher_content_id(self, service: ManifestIdService) -> None:
        """Test a successful publisher id."""
        result = service.generate_publisher_content_id("cnclabs", ContentType.Mod, "urban-chaos")

        assert result.success
        assert isinstance(result.data, ManifestId)
        assert result.data == "1.0.cnclabs.mod.urbanchaos"

    @pytest.mark.parametrize(
        "publisher,name,version,message",
        [
            ("", "content", 0, "publisher_id cannot be null or whitespace"),
            ("cnclabs", "!!!", 0, "content_name results in empty string"),
            ("cnclabs", "content", -1, "non-negative"),
        ],
    )
    def test_publisher_content_id_failures(
        self, service: ManifestIdService, publisher: str, name: str, version: int, message: str
    ) -> None:
        """Test that generator errors become failed results."""
        result = service.generate_publisher_content_id(publisher, ContentType.Mod, name, version)

        assert not result.success
        assert message in result.first_error

    def test_unknown_content_type(self, service: ManifestIdService) -> None:
        """Test that a value outside the enum is reported, not raised."""
        result = service.generate_publisher_content_id("cnclabs", "Mod", "content")  # type: ignore[arg-type]

        assert not result.success
        assert result.first_error.startswith("Invalid argument")

    def test_game_installation_id(self, service: ManifestIdService, steam_installation) -> None:
        """Test a successful installation id."""
        result = service.generate_game_installation_id(steam_installation, GameType.ZeroHour, "1.04")

        assert result.data == "1.104.steam.gameinstallation.zerohour"

    def test_game_installation_id_without_installation(self, service: ManifestIdService) -> None:
        """Test that a missing installation is reported."""
        result = service.generate_game_installation_id(None, GameType.ZeroHour)

        assert result.first_error == "Installation cannot be null"

    def test_game_installation_id_unknown_game(self, service: ManifestIdService, steam_installation) -> None:
        """Test that GameType.Unknown is reported."""
        result = service.generate_game_installation_id(steam_installation, GameType.Unknown)

        assert not result.success
        assert "has no identifier token" in result.first_error

    def test_game_installation_id_bad_object(self, service: ManifestIdService) -> None:
        """Test that an object without installation_type is reported."""
        result = service.generate_game_installation_id(object(), GameType.ZeroHour)

        assert not result.success
        assert result.first_error.startswith("Invalid argument")

    def test_release_id(self, service: ManifestIdService) -> None:
        """Test a successful release id."""
        result = service.generate_release_id("TheSuperHackers", "GeneralsGameCode", "weekly-2025-01-14")

        assert result.data == "1.20250114.thesuperhackers.mod.generalsgamecode"

    def test_release_id_blank_owner(self, service: ManifestIdService) -> None:
        """Test that a blank owner is reported."""
        assert not service.generate_release_id(" ", "repo", "v1").success

    def test_release_id_non_ascii_tag_digits(self, service: ManifestIdService) -> None:
        """Test that only 0-9 in a tag contribute to the release version."""
        result = service.generate_release_id("owner", "repo", "v2²")

        assert result.success
        assert result.data == "1.2.owner.mod.repo"

    @pytest.mark.parametrize("version", ["1.0²", "²", "1.٠٤"])
    def test_game_installation_id_non_ascii_version(
        self, service: ManifestIdService, steam_installation, version: str
    ) -> None:
        """Test that digit-like version characters fail without raising."""
        result = service.generate_game_installation_id(steam_installation, GameType.ZeroHour, version)

        assert not result.success
        assert "numeric and non-negative" in result.first_error

    def test_validate_and_create(self, service: ManifestIdService) -> None:
        """Test wrapping a valid candidate."""
        result = service.validate_and_create_manifest_id("1.0.GENHUB.MOD.CONTENT")

        assert result.success
        assert result.data == "1.0.genhub.mod.content"

    @pytest.mark.parametrize("candidate", [None, 5])
    def test_validate_non_string(self, service: ManifestIdService, candidate) -> None:
        """Test that null or non-string candidates fail."""
        result = service.validate_and_create_manifest_id(candidate)

        assert result.first_error == "Manifest ID cannot be null or empty"

    def test_validate_invalid(self, service: ManifestIdService) -> None:
        """Test that a grammar violation fails."""
        result = service.validate_and_create_manifest_id("dep1")

        assert not result.success

    def test_validate_legacy_opt_in(self, service: ManifestIdService) -> None:
        """Test that legacy ids pass when explicitly allowed."""
        with pytest.warns(DeprecationWarning):
            result = service.validate_and_create_manifest_id("dep1", allow_legacy=True)

        assert result.success
        assert result.data.is_legacy
