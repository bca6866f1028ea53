"""Deterministic manifest id generation.

All ids produced here follow the five-segment grammar in
core.manifest_id and always re-validate:

    generate_publisher_content_id("cnclabs", ContentType.Mod, "urban-chaos")
        -> "1.0.cnclabs.mod.urbanchaos"
    generate_game_installation_id(installation, GameType.ZeroHour, "1.04")
        -> "1.104.steam.gameinstallation.zerohour"
    generate_release_id("thesuperhackers", "GeneralsGameCode", "weekly-2025-01-14")
        -> "1.20250114.thesuperhackers.mod.generalsgamecode"

Normalization policy: publisher and content names are lowercased and every
non-alphanumeric character is stripped ("Urban-Chaos 2!" -> "urbanchaos2").

These are plain functions over their arguments and the read-only settings,
so they are safe to call from any thread.
"""

import logging
import re
from typing import Any

from .config import get_settings
from .core.errors import EmptyNormalizedSegment, InvalidFormat, MissingRequiredArgument, NegativeVersion
from .core.manifest_id import check_manifest_id
from .core.types import (
    GAME_INSTALLATION_TOKEN,
    ContentType,
    GameType,
    content_type_token,
    game_type_token,
    installation_type_token,
)

logger = logging.getLogger(__name__)

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")
_ASCII_DIGITS = re.compile(r"[0-9]+")
_NON_DIGITS = re.compile(r"[^0-9]")

# Tags that carry no version information
_UNVERSIONED_TAGS = {"latest"}


def normalize_segment(value: str | None, argument: str) -> str:
    """Normalize a publisher or content name into an id token.

    Args:
        value: Raw input
        argument: Argument name used in error messages

    Returns:
        Lowercase alphanumeric token

    Raises:
        MissingRequiredArgument: If value is None, empty or whitespace
        EmptyNormalizedSegment: If nothing alphanumeric is left
    """
    if value is None or not str(value).strip():
        raise MissingRequiredArgument(argument)

    normalized = _NON_ALPHANUMERIC.sub("", str(value).strip().lower())
    if not normalized:
        raise EmptyNormalizedSegment(argument, str(value))
    return normalized


def normalize_version_string(version: Any) -> str:
    """Normalize a user-supplied version into the user-version segment.

    Examples: 5 -> "5", "1.08" -> "108", "1.8" -> "108", "2.0" -> "200",
    None -> "0". Minor versions are always padded to two digits.

    Raises:
        NegativeVersion: If the version (or either dotted part) is negative
        InvalidFormat: If the version is not an integer or 'major.minor'
    """
    if version is None:
        return "0"
    if isinstance(version, bool):
        raise InvalidFormat(f"Version must be numeric: {version}", value=str(version))
    if isinstance(version, int):
        if version < 0:
            raise NegativeVersion(version)
        return str(version)

    version_str = str(version).strip()
    if not version_str:
        return "0"

    if "." in version_str:
        parts = version_str.split(".")
        if len(parts) != 2:
            raise InvalidFormat(
                f"Version must be in format 'major.minor' or a single number: {version}",
                value=version_str,
            )
        major, minor = (_parse_version_part(part, version) for part in parts)
        return f"{major}{minor:02d}"

    return str(_parse_version_part(version_str, version))


def _parse_version_part(part: str, original: Any) -> int:
    part = part.strip()
    if part.startswith("-") and _ASCII_DIGITS.fullmatch(part[1:]):
        raise NegativeVersion(original)
    if not _ASCII_DIGITS.fullmatch(part):
        raise InvalidFormat(f"Version must be numeric and non-negative: {original}", value=str(original))
    return int(part)


def _schema_prefix(user_version: str) -> str:
    return f"{get_settings().schema_version}.{user_version}"


def generate_publisher_content_id(
    publisher_id: str,
    content_type: ContentType,
    content_name: str,
    user_version: int = 0,
) -> str:
    """Generate a manifest id for publisher-provided content.

    Args:
        publisher_id: Publisher identifier, e.g. 'cnclabs' or 'moddb-westwood'
        content_type: Type of content (fourth segment)
        content_name: Human-readable content name (fifth segment)
        user_version: Version number for the second segment, >= 0

    Returns:
        Id in the form 'schemaVersion.userVersion.publisher.contentType.contentName'

    Raises:
        MissingRequiredArgument: If publisher_id or content_name is blank
        EmptyNormalizedSegment: If either normalizes to nothing
        NegativeVersion: If user_version is negative
        InvalidFormat: If the id would not validate, e.g. a GameInstallation
                       content type with a publisher that is no installation type
    """
    if isinstance(user_version, bool) or not isinstance(user_version, int):
        raise InvalidFormat(f"User version must be an integer: {user_version!r}", value=str(user_version))
    if user_version < 0:
        raise NegativeVersion(user_version)

    publisher = normalize_segment(publisher_id, "publisher_id")
    name = normalize_segment(content_name, "content_name")
    type_token = content_type_token(content_type)

    manifest_id = f"{_schema_prefix(str(user_version))}.{publisher}.{type_token}.{name}"

    # A gameinstallation id must name a known installation type and game
    reason, _ = check_manifest_id(manifest_id)
    if reason:
        raise InvalidFormat(reason, value=manifest_id)
    return manifest_id


def generate_game_installation_id(
    installation: Any,
    game_type: GameType,
    user_version: Any = None,
) -> str:
    """Generate a manifest id for a detected game installation.

    Args:
        installation: Object with an installation_type (e.g. models.GameInstallation)
        game_type: Game the id refers to
        user_version: Version such as "1.08", "1.04", 2 or None (-> "0")

    Returns:
        Id in the form 'schemaVersion.userVersion.installationType.gameinstallation.gameType'

    Raises:
        MissingRequiredArgument: If installation is None
        NegativeVersion: If the version is negative
        InvalidFormat: If the version is malformed or game_type has no token
    """
    if installation is None:
        raise MissingRequiredArgument("installation", "Installation cannot be null")

    normalized_version = normalize_version_string(user_version)
    install_token = installation_type_token(installation.installation_type)

    try:
        game_token = game_type_token(game_type)
    except KeyError:
        raise InvalidFormat(f"Game type {game_type} has no identifier token") from None

    return f"{_schema_prefix(normalized_version)}.{install_token}.{GAME_INSTALLATION_TOKEN}.{game_token}"


def extract_release_version(tag: str | None, max_digits: int | None = None) -> int:
    """Derive a user version from a release tag.

    All digit characters of the tag are concatenated and capped to
    max_digits (default from settings, 9) so the result fits in an int32.
    'latest', blank tags and tags without digits yield 0.

    Example:
        >>> extract_release_version("v1.2.3")
        123
    """
    if tag is None or not tag.strip() or tag.strip().lower() in _UNVERSIONED_TAGS:
        return 0

    if max_digits is None:
        max_digits = get_settings().max_release_version_digits

    digits = _NON_DIGITS.sub("", tag)
    if not digits:
        return 0
    if len(digits) > max_digits:
        logger.debug("Truncating release version digits of tag %r to %d", tag, max_digits)
        digits = digits[:max_digits]
    return int(digits)


def generate_release_id(
    owner: str,
    repository: str,
    tag: str | None,
    content_type: ContentType = ContentType.Mod,
) -> str:
    """Generate a manifest id for an externally hosted release.

    Args:
        owner: Hosting account, used as the publisher
        repository: Repository name, used as the content name
        tag: Release tag the user version is derived from
        content_type: Type of content the release provides

    Returns:
        Id built by generate_publisher_content_id
    """
    return generate_publisher_content_id(
        owner, content_type, repository, extract_release_version(tag)
    )
