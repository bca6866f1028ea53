"""Tests for the persisted manifest form."""

import json
from pathlib import Path
from typing import Any

import pytest

from conftest import make_manifest
from game_content_manifest.core.errors import InvalidFormat, ManifestValidationError
from game_content_manifest.core.manifest_id import ManifestId
from game_content_manifest.core.types import (
    ContentType,
    DependencyInstallBehavior,
    GameType,
    ResolutionStrategy,
)
from game_content_manifest.core.validator import validate_manifest_with_error_details
from game_content_manifest.core.versions import VersionRange
from game_content_manifest.models import ConflictRule, ContentDependency
from game_content_manifest.serialization import (
    dump_manifest,
    load_manifest,
    manifest_from_dict,
    manifest_to_dict,
)


@pytest.fixture
def document() -> dict[str, Any]:
    """A minimal valid manifest document."""
    return {
        "id": "1.0.cnclabs.mod.urbanchaos",
        "name": "Urban Chaos",
        "version": "1.2",
        "contentType": "Mod",
        "targetGame": "ZeroHour",
    }


class TestManifestFromDict:
    """Test reading the persisted form."""

    def test_minimal_document(self, document: dict[str, Any]) -> None:
        """Test that optional sections fall back to defaults."""
        manifest = manifest_from_dict(document)

        assert manifest.id == "1.0.cnclabs.mod.urbanchaos"
        assert manifest.content_type is ContentType.Mod
        assert manifest.target_game is GameType.ZeroHour
        assert manifest.dependencies == ()
        assert manifest.manifest_version == "1.0"

    def test_dependencies_and_rules(self, document: dict[str, Any]) -> None:
        """Test that nested ids, enums and ranges are converted."""
        document["dependencies"] = [
            {
                "id": "1.104.any.gameinstallation.zerohour",
                "dependencyType": "GameInstallation",
                "minVersion": "1.04",
                "compatibleGameTypes": ["ZeroHour"],
                "installBehavior": "Suggest",
            }
        ]
        document["conflictRules"] = [
            {
                "conflictingContentId": "1.0.cnclabs.mod.rival",
                "resolutionStrategy": "Warn",
                "conflictVersionRange": {"maxVersion": "2.0", "maxInclusive": False},
            }
        ]

        manifest = manifest_from_dict(document)

        dependency = manifest.dependencies[0]
        assert isinstance(dependency.id, ManifestId)
        assert dependency.dependency_type is ContentType.GameInstallation
        assert dependency.compatible_game_types == (GameType.ZeroHour,)
        assert dependency.install_behavior is DependencyInstallBehavior.Suggest
        rule = manifest.conflict_rules[0]
        assert rule.resolution_strategy is ResolutionStrategy.Warn
        assert rule.conflict_version_range == VersionRange(max_version="2.0", max_inclusive=False)

    def test_invalid_dependency_id_names_field(self, document: dict[str, Any]) -> None:
        """Test that a bad nested id reports where it was found."""
        document["dependencies"] = [{"id": "1.0.pub.mod"}]

        with pytest.raises(InvalidFormat, match=r"dependencies\[0\]\.id"):
            manifest_from_dict(document)

    def test_missing_required_field(self, document: dict[str, Any]) -> None:
        """Test that schema violations are reported with their path."""
        del document["name"]

        with pytest.raises(ManifestValidationError, match="'name' is a required property"):
            manifest_from_dict(document)

    def test_unknown_property_rejected(self, document: dict[str, Any]) -> None:
        """Test that unknown top-level properties are rejected."""
        document["rating"] = 5

        with pytest.raises(ManifestValidationError, match="rating"):
            manifest_from_dict(document)

    def test_unknown_enum_value_rejected(self, document: dict[str, Any]) -> None:
        """Test that enum names are checked by the schema."""
        document["targetGame"] = "RedAlert"

        with pytest.raises(ManifestValidationError) as exc_info:
            manifest_from_dict(document)
        assert exc_info.value.path == "targetGame"

    def test_legacy_id_is_opt_in(self, document: dict[str, Any]) -> None:
        """Test that simple ids are only accepted on the legacy path."""
        document["dependencies"] = [{"id": "dep1"}]

        with pytest.raises(InvalidFormat):
            manifest_from_dict(document)

        with pytest.warns(DeprecationWarning):
            manifest = manifest_from_dict(document, allow_legacy=True)
        assert manifest.dependencies[0].id.is_legacy


class TestManifestToDict:
    """Test writing the persisted form."""

    def test_round_trip(self) -> None:
        """Test that a fully populated manifest survives writing and reading."""
        manifest = make_manifest(
            "1.0.cnclabs.mod.shockwave",
            publisher_type="cnclabs",
            dependencies=(
                ContentDependency(
                    id=ManifestId("1.104.any.gameinstallation.zerohour"),
                    dependency_type=ContentType.GameInstallation,
                    min_version="1.04",
                    compatible_game_types=(GameType.ZeroHour,),
                ),
            ),
            conflict_rules=(
                ConflictRule(
                    conflicting_content_id=ManifestId("1.0.cnclabs.mod.rival"),
                    conflict_version_range=VersionRange.at_least("2.0"),
                    reason="Same INI files",
                ),
            ),
            tags=("mod", "zerohour"),
        )

        assert manifest_from_dict(manifest_to_dict(manifest)) == manifest

    def test_ids_written_as_strings(self, urban_chaos) -> None:
        """Test that ids are plain strings in the persisted form."""
        data = manifest_to_dict(urban_chaos)

        assert data["id"] == "1.0.cnclabs.mod.urbanchaos"
        assert type(data["id"]) is str

    def test_optional_scalars_omitted(self) -> None:
        """Test that unset dependency versions are not written as null."""
        manifest = make_manifest(
            "1.0.pub.mod.a", dependencies=(ContentDependency(id=ManifestId("1.0.pub.mod.b")),)
        )

        dependency = manifest_to_dict(manifest)["dependencies"][0]

        assert "minVersion" not in dependency
        assert "publisherType" not in dependency


class TestManifestFiles:
    """Test reading and writing manifest files."""

    def test_dump_and_load(self, tmp_path: Path, urban_chaos) -> None:
        """Test that a dumped file loads back to the same manifest."""
        path = tmp_path / "urbanchaos.json"

        dump_manifest(urban_chaos, path)

        assert json.loads(path.read_text(encoding="utf-8"))["name"] == "Urbanchaos"
        assert load_manifest(path) == urban_chaos

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_manifest(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Test that malformed JSON raises JSONDecodeError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(json.JSONDecodeError):
            load_manifest(path)


class TestValidationDetails:
    """Test the error-detail wrapper."""

    def test_valid_document(self, document: dict[str, Any]) -> None:
        """Test that a valid document reports no error."""
        assert validate_manifest_with_error_details(document) == (True, None)

    def test_invalid_document(self, document: dict[str, Any]) -> None:
        """Test that the message includes the path and the offending value."""
        document["version"] = 12

        is_valid, message = validate_manifest_with_error_details(document)

        assert not is_valid
        assert "Validation error at version" in message
        assert "Invalid value: 12" in message
