"""Exception hierarchy for manifest identity, dependency and conflict errors."""

from collections.abc import Iterable, Mapping
from typing import Any


class ManifestError(Exception):
    """Base exception for the manifest core."""

    context: dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = dict(context) if context is not None else {}

    def to_json_error(self) -> dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class InvalidFormat(ManifestError, ValueError):
    """Raised when a string does not match the manifest id grammar or a version is malformed."""

    def __init__(
        self,
        reason: str,
        *,
        value: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if value is not None:
            ctx.setdefault("value", value)
        super().__init__(reason, context=ctx)
        self.reason = reason
        self.value = value


class EmptyNormalizedSegment(ManifestError, ValueError):
    """Raised when normalization collapses an input to nothing."""

    def __init__(self, argument: str, value: str) -> None:
        super().__init__(
            f"{argument} results in empty string after normalization: {value!r}",
            context={"argument": argument, "value": value},
        )
        self.argument = argument


class NegativeVersion(ManifestError, ValueError):
    """Raised when a user version is negative."""

    def __init__(self, value: object) -> None:
        super().__init__(
            f"Version must be numeric and non-negative: {value}",
            context={"value": str(value)},
        )


class MissingRequiredArgument(ManifestError, ValueError):
    """Raised for a null/blank publisher, content name or installation."""

    def __init__(self, argument: str, message: str | None = None) -> None:
        super().__init__(
            message or f"{argument} cannot be null or whitespace",
            context={"argument": argument},
        )
        self.argument = argument


class ManifestValidationError(ManifestError, ValueError):
    """Raised when a persisted manifest does not conform to the JSON schema."""

    def __init__(self, message: str, *, path: str = "root") -> None:
        super().__init__(message, context={"path": path})
        self.path = path


class DependencyMissing(ManifestError):
    """Raised when required dependencies are absent from the available set."""

    def __init__(self, missing_ids: Iterable[object], *, manifest_id: object | None = None) -> None:
        self.missing_ids = [str(m) for m in missing_ids]
        owner = f" for {manifest_id}" if manifest_id is not None else ""
        super().__init__(
            f"Missing required dependencies{owner}: {', '.join(self.missing_ids)}",
            context={"missing": self.missing_ids, "manifest": str(manifest_id) if manifest_id else None},
        )


class ConflictBlocked(ManifestError):
    """Raised when a hard conflict under the Block strategy prevents activation."""

    def __init__(self, first_id: object, second_id: object, reason: str = "") -> None:
        message = f"Content {first_id} conflicts with {second_id}"
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            context={"first": str(first_id), "second": str(second_id), "reason": reason},
        )
        self.first_id = str(first_id)
        self.second_id = str(second_id)
        self.reason = reason


class ResolutionStateError(ManifestError, RuntimeError):
    """Raised for an illegal transition of a resolution request."""
