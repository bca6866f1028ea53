"""Tests for the command-line interface."""

import json
from pathlib import Path

import pytest

from conftest import make_manifest
from game_content_manifest.cli import EXIT_AWAITING_CHOICE, EXIT_BLOCKED, EXIT_OK, main
from game_content_manifest.core.manifest_id import ManifestId
from game_content_manifest.core.types import ContentType, GameType, ResolutionStrategy
from game_content_manifest.models import ConflictRule, ContentDependency
from game_content_manifest.serialization import dump_manifest


@pytest.fixture
def run(tmp_path: Path):
    """Run the CLI with a config file that does not exist."""
    config = tmp_path / "none.yaml"

    def _run(*argv: str) -> int:
        return main(["--config", str(config), *argv])

    return _run


def write(tmp_path: Path, manifest) -> str:
    path = tmp_path / f"{manifest.id.content_name}.json"
    dump_manifest(manifest, path)
    return str(path)


class TestGenerate:
    """Test the generate subcommands."""

    def test_publisher(self, run, capsys: pytest.CaptureFixture[str]) -> None:
        """Test generating a publisher content id."""
        assert run("generate", "publisher", "--publisher", "cnclabs", "--type", "mod", "--name", "Urban Chaos") == EXIT_OK
        assert capsys.readouterr().out.strip() == "1.0.cnclabs.mod.urbanchaos"

    def test_installation(self, run, capsys: pytest.CaptureFixture[str]) -> None:
        """Test generating a game installation id."""
        exit_code = run(
            "generate", "installation", "--installation-type", "steam", "--game", "zerohour", "--version", "1.04"
        )

        assert exit_code == EXIT_OK
        assert capsys.readouterr().out.strip() == "1.104.steam.gameinstallation.zerohour"

    def test_release(self, run, capsys: pytest.CaptureFixture[str]) -> None:
        """Test generating a release id."""
        exit_code = run(
            "generate", "release", "--owner", "TheSuperHackers", "--repo", "GeneralsGameCode",
            "--tag", "weekly-2025-01-14", "--type", "gameclient",
        )

        assert exit_code == EXIT_OK
        assert capsys.readouterr().out.strip() == "1.20250114.thesuperhackers.gameclient.generalsgamecode"

    def test_generator_error(self, run, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that generator errors are reported on stderr."""
        assert run("generate", "publisher", "--publisher", "!!!", "--type", "mod", "--name", "x") == EXIT_BLOCKED
        assert "Error: publisher_id results in empty string" in capsys.readouterr().err

    def test_schema_version_from_config(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that settings from --config are applied."""
        config = tmp_path / "config.yaml"
        config.write_text("manifest:\n  schema_version: 2\n", encoding="utf-8")

        main(["--config", str(config), "generate", "publisher", "--publisher", "p", "--type", "map", "--name", "n"])

        assert capsys.readouterr().out.strip() == "2.0.p.map.n"

    def test_bad_config(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that invalid settings abort before running the command."""
        config = tmp_path / "config.yaml"
        config.write_text("manifest:\n  max_release_version_digits: 0\n", encoding="utf-8")

        assert main(["--config", str(config), "validate", "1.0.p.mod.n"]) == EXIT_BLOCKED
        assert "Failed to load settings" in capsys.readouterr().err


class TestValidate:
    """Test the validate subcommand."""

    def test_all_valid(self, run, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that valid ids exit with 0."""
        assert run("validate", "1.0.cnclabs.mod.urbanchaos", "1.104.steam.gameinstallation.zerohour") == EXIT_OK
        assert capsys.readouterr().out.splitlines() == [
            "1.0.cnclabs.mod.urbanchaos: valid",
            "1.104.steam.gameinstallation.zerohour: valid",
        ]

    def test_invalid(self, run, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that one invalid id fails the command."""
        assert run("validate", "1.0.cnclabs.mod.urbanchaos", "dep1") == EXIT_BLOCKED
        assert "dep1: invalid (" in capsys.readouterr().out

    def test_allow_legacy(self, run, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that --allow-legacy accepts simple ids."""
        with pytest.warns(DeprecationWarning):
            assert run("validate", "--allow-legacy", "dep1") == EXIT_OK
        assert capsys.readouterr().out.strip() == "dep1: valid"


class TestCheck:
    """Test the check subcommand."""

    def test_allowed(self, run, tmp_path: Path, capsys: pytest.CaptureFixture[str], zero_hour_installation) -> None:
        """Test an allowed set with an external installation."""
        mod = make_manifest(
            "1.0.cnclabs.mod.shockwave",
            dependencies=(
                ContentDependency(
                    id=ManifestId("1.104.any.gameinstallation.zerohour"),
                    dependency_type=ContentType.GameInstallation,
                    min_version="1.04",
                    compatible_game_types=(GameType.ZeroHour,),
                ),
            ),
        )

        exit_code = run("check", write(tmp_path, mod), "--available", write(tmp_path, zero_hour_installation))

        captured = capsys.readouterr()
        assert exit_code == EXIT_OK
        assert json.loads(captured.out)["state"] == "Allowed"
        assert "Activation allowed" in captured.err

    def test_blocked(self, run, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that a Block rule exits with 1."""
        a = make_manifest(
            "1.0.pub.mod.a",
            conflict_rules=(ConflictRule(conflicting_content_id=ManifestId("1.0.pub.mod.b"), reason="Same files"),),
        )
        b = make_manifest("1.0.pub.mod.b")

        exit_code = run("check", write(tmp_path, a), write(tmp_path, b))

        captured = capsys.readouterr()
        assert exit_code == EXIT_BLOCKED
        assert json.loads(captured.out)["state"] == "Blocked"
        assert "Same files" in captured.err

    def test_awaiting_choice(self, run, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that a pending user choice exits with 2."""
        a = make_manifest(
            "1.0.pub.mod.a",
            conflict_rules=(
                ConflictRule(
                    conflicting_content_id=ManifestId("1.0.pub.mod.b"),
                    resolution_strategy=ResolutionStrategy.UserChoice,
                ),
            ),
        )
        b = make_manifest("1.0.pub.mod.b")

        exit_code = run("check", write(tmp_path, a), write(tmp_path, b))

        assert exit_code == EXIT_AWAITING_CHOICE
        assert json.loads(capsys.readouterr().out)["decisionRequest"]["options"] == [
            "1.0.pub.mod.a",
            "1.0.pub.mod.b",
        ]

    def test_existing_ids(self, run, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that --existing feeds PreferExisting rules."""
        a = make_manifest(
            "1.0.pub.mod.a",
            version="2.0",
            conflict_rules=(
                ConflictRule(
                    conflicting_content_id=ManifestId("1.0.pub.mod.b"),
                    resolution_strategy=ResolutionStrategy.PreferExisting,
                ),
            ),
        )
        b = make_manifest("1.0.pub.mod.b", version="1.0")

        exit_code = run("check", write(tmp_path, a), write(tmp_path, b), "--existing", "1.0.pub.mod.a")

        assert exit_code == EXIT_OK
        assert json.loads(capsys.readouterr().out)["manifests"] == ["1.0.pub.mod.a"]

    def test_missing_file(self, run, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that an unreadable manifest file exits with 1."""
        assert run("check", str(tmp_path / "missing.json")) == EXIT_BLOCKED
        assert "Error:" in capsys.readouterr().err

    def test_invalid_manifest(self, run, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that a schema violation exits with 1."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"id": "1.0.pub.mod.a"}), encoding="utf-8")

        assert run("check", str(path)) == EXIT_BLOCKED
        assert "required property" in capsys.readouterr().err
