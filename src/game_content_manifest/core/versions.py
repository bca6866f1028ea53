"""Version helpers used by dependency matching and conflict rules.

Versions published for game content are loosely formatted ("1.04", "v2.0.1",
"2025-01-14", "20251226"). Range checks and comparisons normalise them into
tuples of integers; anything without a leading numeric part is malformed.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime

from .errors import InvalidFormat

_LEADING_VERSION = re.compile(r"^[vV]?([0-9]+(?:\.[0-9]+)*)")
_DOTTED_VERSION = re.compile(r"^[vV]?[0-9]+(?:\.[0-9]+)*$")
_NON_DIGITS = re.compile(r"[^0-9]")

# Publishers whose versions are release dates (YYYY-MM-DD)
DATE_VERSIONED_PUBLISHERS = frozenset({"communityoutpost"})

# Publishers whose versions are a single build number (e.g. "20251226")
NUMERIC_VERSIONED_PUBLISHERS = frozenset({"thesuperhackers", "generalsonline"})


def parse_version(version: str) -> tuple[int, ...]:
    """Parse the leading numeric part of a version string.

    Args:
        version: Version such as "1.04", "v2.0.1" or "1.08-beta"

    Returns:
        Tuple of integer components, e.g. (1, 4)

    Raises:
        InvalidFormat: If the string has no leading numeric component
    """
    match = _LEADING_VERSION.match(version.strip()) if version else None
    if match is None:
        raise InvalidFormat(f"Unparseable version string: {version!r}", value=version)
    return tuple(int(part) for part in match.group(1).split("."))


def _padded(a: tuple[int, ...], b: tuple[int, ...]) -> tuple[tuple[int, ...], tuple[int, ...]]:
    width = max(len(a), len(b))
    return a + (0,) * (width - len(a)), b + (0,) * (width - len(b))


def _cmp(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


def compare_parsed(a: tuple[int, ...], b: tuple[int, ...]) -> int:
    """Compare two parsed versions, treating missing components as zero."""
    left, right = _padded(a, b)
    return _cmp(left, right)


def versions_equal(a: str, b: str) -> bool:
    """Return True when two version strings denote the same version.

    Raises:
        InvalidFormat: If either version is unparseable
    """
    return compare_parsed(parse_version(a), parse_version(b)) == 0


def _parse_date(value: str) -> date | None:
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def _digits(value: str) -> int | None:
    digits = _NON_DIGITS.sub("", value)
    return int(digits) if digits else None


def compare_versions(
    version1: str | None,
    version2: str | None,
    publisher_type: str | None = None,
) -> int:
    """Compare two version strings, using the publisher's version format.

    Args:
        version1: First version (may be None or blank)
        version2: Second version (may be None or blank)
        publisher_type: Publisher whose versioning scheme applies, if known

    Returns:
        Negative, zero or positive like a classic cmp(). A blank version
        sorts before any non-blank one. Unrecognised formats fall back to
        ordinal string comparison so the result is always deterministic.
    """
    first = (version1 or "").strip()
    second = (version2 or "").strip()
    if not first and not second:
        return 0
    if not first:
        return -1
    if not second:
        return 1

    publisher = (publisher_type or "").lower()

    if publisher in DATE_VERSIONED_PUBLISHERS:
        date1, date2 = _parse_date(first), _parse_date(second)
        if date1 is not None and date2 is not None:
            return _cmp(date1, date2)

    if publisher in DATE_VERSIONED_PUBLISHERS or publisher in NUMERIC_VERSIONED_PUBLISHERS:
        num1, num2 = _digits(first), _digits(second)
        if num1 is not None and num2 is not None:
            return _cmp(num1, num2)

    if _DOTTED_VERSION.match(first) and _DOTTED_VERSION.match(second):
        return compare_parsed(parse_version(first), parse_version(second))

    return _cmp(first, second)


@dataclass(frozen=True)
class VersionRange:
    """A version constraint.

    Exact version wins over a constraint expression, which wins over the
    min/max bounds. A range with no fields set accepts any version.

    Constraint expressions support >=, >, <=, <, =, ^ (same major) and
    ~ (same major.minor); space-separated terms are AND-ed and "||"
    separates alternatives.
    """

    min_version: str | None = None
    max_version: str | None = None
    min_inclusive: bool = True
    max_inclusive: bool = True
    exact_version: str | None = None
    constraint_expression: str | None = None

    @classmethod
    def at_least(cls, min_version: str) -> "VersionRange":
        return cls(min_version=min_version)

    @classmethod
    def exact(cls, version: str) -> "VersionRange":
        return cls(exact_version=version)

    @classmethod
    def between(cls, min_version: str, max_version: str) -> "VersionRange":
        return cls(min_version=min_version, max_version=max_version)

    @classmethod
    def any(cls) -> "VersionRange":
        return cls()

    def is_satisfied_by(self, version: str | None) -> bool:
        """Check if a version satisfies this range.

        Args:
            version: Candidate version. None or blank never satisfies.

        Raises:
            InvalidFormat: If the candidate or a bound is unparseable
        """
        if not version or not version.strip():
            return False

        parsed = parse_version(version)

        if self.exact_version:
            return compare_parsed(parsed, parse_version(self.exact_version)) == 0

        if self.constraint_expression:
            return _evaluate_expression(parsed, self.constraint_expression)

        if self.min_version:
            order = compare_parsed(parsed, parse_version(self.min_version))
            if order < 0 or (order == 0 and not self.min_inclusive):
                return False

        if self.max_version:
            order = compare_parsed(parsed, parse_version(self.max_version))
            if order > 0 or (order == 0 and not self.max_inclusive):
                return False

        return True

    def describe(self) -> str:
        """Human-readable form used in conflict messages."""
        if self.exact_version:
            return f"={self.exact_version}"
        if self.constraint_expression:
            return self.constraint_expression
        terms = []
        if self.min_version:
            terms.append(f"{'>=' if self.min_inclusive else '>'}{self.min_version}")
        if self.max_version:
            terms.append(f"{'<=' if self.max_inclusive else '<'}{self.max_version}")
        return " ".join(terms) or "*"


def _evaluate_expression(version: tuple[int, ...], expression: str) -> bool:
    for alternative in expression.split("||"):
        terms = alternative.split()
        if terms and all(_evaluate_term(version, term) for term in terms):
            return True
    return False


def _evaluate_term(version: tuple[int, ...], term: str) -> bool:
    if term.startswith("^"):
        target = parse_version(term[1:])
        return version[0] == target[0] and compare_parsed(version, target) >= 0

    if term.startswith("~"):
        target = parse_version(term[1:])
        left, right = _padded(version, target)
        return left[:2] == right[:2] and compare_parsed(version, target) >= 0

    for operator in (">=", "<=", ">", "<", "="):
        if term.startswith(operator):
            order = compare_parsed(version, parse_version(term[len(operator):]))
            return {
                ">=": order >= 0,
                "<=": order <= 0,
                ">": order > 0,
                "<": order < 0,
                "=": order == 0,
            }[operator]

    # Plain version: exact match
    return compare_parsed(version, parse_version(term)) == 0
