"""Manifest identifier grammar and validation.

Every manifest id has exactly five dot-separated segments:

    schemaVersion.userVersion.publisher.contentType.contentName
    schemaVersion.userVersion.installationType.gameinstallation.gameType

The first two segments are non-negative integers, the others lowercase
alphanumeric tokens that may contain inner dashes. Ids are matched
case-insensitively and keep the spelling they were created with.

Short "simple" ids of one to four tokens predate the five-segment grammar.
They are only accepted on the legacy read path (allow_legacy=True or the
allow_legacy_ids setting) and are reported as deprecated.
"""

import logging
import re
import warnings
from typing import Any, NamedTuple

from ..config import get_settings
from .errors import InvalidFormat
from .types import (
    ANY_INSTALLATION_TOKEN,
    GAME_INSTALLATION_TOKEN,
    GAME_TYPE_TOKENS,
    INSTALLATION_TYPE_TOKENS,
)

logger = logging.getLogger(__name__)

SEGMENT_COUNT = 5
MAX_LEGACY_SEGMENTS = 4

_TOKEN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
_DIGITS = re.compile(r"^[0-9]+$")
_ALLOWED_CHARACTERS = re.compile(r"[^a-z0-9.\-]")

KNOWN_INSTALLATION_TOKENS = frozenset(INSTALLATION_TYPE_TOKENS.values()) | {ANY_INSTALLATION_TOKEN}
KNOWN_GAME_TOKENS = frozenset(GAME_TYPE_TOKENS.values())


class ManifestIdSegments(NamedTuple):
    """The five segments of a canonical manifest id (lowercase)."""

    schema_version: int
    user_version: int
    publisher: str
    content_type: str
    content_name: str


def _invalid(value: str, rule: str) -> str:
    return f"Invalid manifest ID '{value}': {rule}"


def check_manifest_id(value: Any, allow_legacy: bool = False) -> tuple[str, bool]:
    """Check a candidate string against the grammar.

    Args:
        value: Candidate id
        allow_legacy: Accept 1-4 segment simple ids

    Returns:
        Tuple of (reason, is_legacy). reason is empty when the value is valid.
    """
    if not isinstance(value, str) or not value.strip():
        return "Manifest ID cannot be null or empty", False

    lowered = value.lower()
    bad = sorted(set(_ALLOWED_CHARACTERS.findall(lowered)))
    if bad:
        shown = "".join(bad)
        return _invalid(value, f"disallowed characters {shown!r}"), False

    segments = lowered.split(".")
    if any(not segment for segment in segments):
        return _invalid(value, "empty segment"), False

    if len(segments) != SEGMENT_COUNT:
        if allow_legacy and len(segments) <= MAX_LEGACY_SEGMENTS:
            for segment in segments:
                if not _TOKEN.match(segment):
                    return _invalid(value, f"segment {segment!r} is not an alphanumeric-dash token"), False
            return "", True
        return (
            _invalid(value, f"expected {SEGMENT_COUNT} dot-separated segments, found {len(segments)}"),
            False,
        )

    schema_version, user_version, publisher, content_type, content_name = segments
    if not _DIGITS.match(schema_version):
        return _invalid(value, f"schema version {schema_version!r} must be a non-negative integer"), False
    if not _DIGITS.match(user_version):
        return _invalid(value, f"user version {user_version!r} must be a non-negative integer"), False

    for segment in (publisher, content_type, content_name):
        if not _TOKEN.match(segment):
            return (
                _invalid(
                    value,
                    f"segment {segment!r} must be lowercase alphanumeric with inner dashes only",
                ),
                False,
            )

    if content_type == GAME_INSTALLATION_TOKEN:
        if publisher not in KNOWN_INSTALLATION_TOKENS:
            return _invalid(value, f"unknown installation type {publisher!r}"), False
        if content_name not in KNOWN_GAME_TOKENS:
            return _invalid(value, f"unknown game type {content_name!r}"), False

    return "", False


class ManifestId:
    """Immutable, case-insensitive manifest identifier.

    A ManifestId is always grammar-valid: construction raises InvalidFormat
    for anything else. Instances compare equal to each other and to plain
    strings ignoring case.

    Example:
        >>> ManifestId("1.0.CNCLabs.mod.urbanchaos") == "1.0.cnclabs.mod.urbanchaos"
        True
    """

    __slots__ = ("_value", "_key", "_is_legacy")

    def __init__(self, value: str, *, allow_legacy: bool | None = None) -> None:
        if allow_legacy is None:
            allow_legacy = get_settings().allow_legacy_ids

        reason, is_legacy = check_manifest_id(value, allow_legacy)
        if reason:
            raise InvalidFormat(reason, value=value if isinstance(value, str) else None)

        if is_legacy:
            logger.debug("Accepted legacy manifest id %r", value)
            warnings.warn(
                f"Manifest id {value!r} uses the deprecated simple-id format",
                DeprecationWarning,
                stacklevel=2,
            )

        object.__setattr__(self, "_value", value)
        object.__setattr__(self, "_key", value.lower())
        object.__setattr__(self, "_is_legacy", is_legacy)

    @classmethod
    def create(cls, value: "str | ManifestId", *, allow_legacy: bool | None = None) -> "ManifestId":
        """Create a ManifestId, passing existing instances through unchanged.

        Raises:
            InvalidFormat: If value is not a valid identifier
        """
        if isinstance(value, ManifestId):
            return value
        return cls(value, allow_legacy=allow_legacy)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("ManifestId is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("ManifestId is immutable")

    def __reduce__(self) -> tuple[Any, ...]:
        return (_restore_manifest_id, (self._value, self._is_legacy))

    def __copy__(self) -> "ManifestId":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "ManifestId":
        return self

    @property
    def value(self) -> str:
        """The id exactly as it was created."""
        return self._value

    @property
    def normalized(self) -> str:
        """Lowercase form used for equality and hashing."""
        return self._key

    @property
    def is_legacy(self) -> bool:
        return self._is_legacy

    def segments(self) -> ManifestIdSegments:
        """Split a canonical id into its five segments.

        Raises:
            InvalidFormat: For legacy simple ids, which have no segment structure
        """
        if self._is_legacy:
            raise InvalidFormat(
                _invalid(self._value, "legacy simple ids have no segment structure"),
                value=self._value,
            )
        schema_version, user_version, publisher, content_type, content_name = self._key.split(".")
        return ManifestIdSegments(
            int(schema_version), int(user_version), publisher, content_type, content_name
        )

    @property
    def publisher(self) -> str | None:
        return None if self._is_legacy else self._key.split(".")[2]

    @property
    def content_type(self) -> str | None:
        return None if self._is_legacy else self._key.split(".")[3]

    @property
    def content_name(self) -> str | None:
        return None if self._is_legacy else self._key.split(".")[4]

    @property
    def is_game_installation(self) -> bool:
        return self.content_type == GAME_INSTALLATION_TOKEN

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ManifestId):
            return self._key == other._key
        if isinstance(other, str):
            return self._key == other.lower()
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __lt__(self, other: "ManifestId") -> bool:
        if not isinstance(other, ManifestId):
            return NotImplemented
        return self._key < other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"ManifestId({self._value!r})"


class ValidationResult(NamedTuple):
    """Outcome of validate(): pass/fail, the violated rule, and the id on success."""

    is_valid: bool
    reason: str
    manifest_id: ManifestId | None


def validate(candidate: Any, *, allow_legacy: bool | None = None) -> ValidationResult:
    """Validate a candidate string against the manifest id grammar.

    Never raises. On success reason is empty and manifest_id is set; on
    failure reason names the rule that was violated.

    Example:
        >>> validate("1.0.steam.gameinstallation.redalert").reason
        "Invalid manifest ID '1.0.steam.gameinstallation.redalert': unknown game type 'redalert'"
    """
    try:
        manifest_id = ManifestId(candidate, allow_legacy=allow_legacy)
    except InvalidFormat as e:
        return ValidationResult(False, e.reason, None)
    return ValidationResult(True, "", manifest_id)


def is_valid_manifest_id(candidate: Any, *, allow_legacy: bool | None = None) -> bool:
    """Return True if candidate is a valid manifest id."""
    if allow_legacy is None:
        allow_legacy = get_settings().allow_legacy_ids
    reason, _ = check_manifest_id(candidate, allow_legacy)
    return not reason


def _restore_manifest_id(value: str, is_legacy: bool) -> ManifestId:
    return ManifestId(value, allow_legacy=is_legacy)
