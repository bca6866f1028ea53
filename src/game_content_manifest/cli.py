"""Command-line interface for manifest ids and activation checks.

Status messages go to stderr; ids and JSON verdicts go to stdout so the
output can be piped.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

from .activation import evaluate_activation
from .config import configure, get_settings, load_settings
from .core.errors import ManifestError
from .core.manifest_id import validate
from .core.types import (
    CONTENT_TYPE_TOKENS,
    GAME_TYPE_TOKENS,
    INSTALLATION_TYPE_TOKENS,
    ResolutionState,
)
from .generator import generate_game_installation_id, generate_publisher_content_id, generate_release_id
from .models import GameInstallation
from .serialization import load_manifest

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BLOCKED = 1
EXIT_AWAITING_CHOICE = 2

_CONTENT_TYPES = {token: member for member, token in CONTENT_TYPE_TOKENS.items()}
_GAME_TYPES = {token: member for member, token in GAME_TYPE_TOKENS.items()}
_INSTALLATION_TYPES = {token: member for member, token in INSTALLATION_TYPE_TOKENS.items()}


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level, logging.WARNING)
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")


def _cmd_generate(args: argparse.Namespace) -> int:
    if args.kind == "publisher":
        manifest_id = generate_publisher_content_id(
            args.publisher, _CONTENT_TYPES[args.type], args.name, args.version
        )
    elif args.kind == "installation":
        installation = GameInstallation(
            installation_path="",
            installation_type=_INSTALLATION_TYPES[args.installation_type],
        )
        manifest_id = generate_game_installation_id(installation, _GAME_TYPES[args.game], args.version)
    else:
        manifest_id = generate_release_id(args.owner, args.repo, args.tag, _CONTENT_TYPES[args.type])

    print(manifest_id)
    return EXIT_OK


def _cmd_validate(args: argparse.Namespace) -> int:
    exit_code = EXIT_OK
    for candidate in args.ids:
        result = validate(candidate, allow_legacy=args.allow_legacy or None)
        if result.is_valid:
            print(f"{candidate}: valid")
        else:
            print(f"{candidate}: invalid ({result.reason})")
            exit_code = EXIT_BLOCKED
    return exit_code


def _cmd_check(args: argparse.Namespace) -> int:
    print(f"Loading {len(args.manifests)} manifest(s)...", file=sys.stderr)
    manifests = [load_manifest(Path(p)) for p in args.manifests]
    available = [load_manifest(Path(p)) for p in args.available]

    verdict = evaluate_activation(manifests, available, args.existing)

    json.dump(verdict.to_dict(), sys.stdout, indent=2)
    print()  # Add newline at end

    if verdict.state is ResolutionState.AwaitingUserChoice:
        print("Activation needs a user decision", file=sys.stderr)
        return EXIT_AWAITING_CHOICE
    if not verdict.allowed:
        print("Activation blocked:", file=sys.stderr)
        for error in verdict.errors:
            print(f"  {error}", file=sys.stderr)
        return EXIT_BLOCKED

    print(f"Activation allowed ({verdict.state.value})", file=sys.stderr)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="game-content-manifest",
        description="Generate and validate content manifest ids and check activation sets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Publisher content id
  game-content-manifest generate publisher --publisher cnclabs --type mod --name "Urban Chaos"

  # Installation id
  game-content-manifest generate installation --installation-type steam --game zerohour --version 1.04

  # Check whether manifests can be activated together
  game-content-manifest check mod.json patch.json --available zerohour.json
        """,
    )
    parser.add_argument("--config", type=Path, help="YAML settings file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", help="Generate a manifest id")
    kinds = generate.add_subparsers(dest="kind", required=True)

    publisher = kinds.add_parser("publisher", help="Id for publisher-provided content")
    publisher.add_argument("--publisher", required=True, help="Publisher identifier")
    publisher.add_argument("--type", required=True, choices=sorted(_CONTENT_TYPES), help="Content type")
    publisher.add_argument("--name", required=True, help="Content name")
    publisher.add_argument("--version", type=int, default=0, help="User version (non-negative integer)")

    installation = kinds.add_parser("installation", help="Id for a game installation")
    installation.add_argument(
        "--installation-type", required=True, choices=sorted(_INSTALLATION_TYPES), help="Installation origin"
    )
    installation.add_argument("--game", required=True, choices=sorted(_GAME_TYPES), help="Game type")
    installation.add_argument("--version", help="Game version, e.g. 1.04 or 1.08")

    release = kinds.add_parser("release", help="Id for a hosted release")
    release.add_argument("--owner", required=True, help="Repository owner")
    release.add_argument("--repo", required=True, help="Repository name")
    release.add_argument("--tag", default="", help="Release tag")
    release.add_argument("--type", default="mod", choices=sorted(_CONTENT_TYPES), help="Content type")

    validate_cmd = commands.add_parser("validate", help="Validate manifest ids")
    validate_cmd.add_argument("ids", nargs="+", help="Ids to validate")
    validate_cmd.add_argument("--allow-legacy", action="store_true", help="Accept legacy simple ids")

    check = commands.add_parser("check", help="Evaluate an activation set")
    check.add_argument("manifests", nargs="+", help="Manifest JSON files to activate, in priority order")
    check.add_argument("--available", nargs="*", default=[], help="Manifest JSON files that may satisfy dependencies")
    check.add_argument("--existing", nargs="*", default=[], help="Ids that are already installed")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the command-line tool."""
    args = build_parser().parse_args(argv)

    try:
        configure(load_settings(args.config))
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: Failed to load settings: {e}", file=sys.stderr)
        return EXIT_BLOCKED

    _configure_logging(args.verbose)

    handlers = {"generate": _cmd_generate, "validate": _cmd_validate, "check": _cmd_check}
    try:
        return handlers[args.command](args)
    except (ManifestError, OSError, json.JSONDecodeError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BLOCKED


if __name__ == "__main__":
    sys.exit(main())
