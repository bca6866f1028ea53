"""Result-type facade over the identifier generator and validator.

Callers that cannot deal with exceptions (UI layers, remote endpoints) use
ManifestIdService: every method returns an OperationResult and never raises.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

from . import generator
from .core.errors import ManifestError
from .core.manifest_id import ManifestId
from .core.types import ContentType, GameType

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Success flag plus either data or error messages."""

    success: bool
    data: T | None = None
    errors: tuple[str, ...] = field(default=())

    @property
    def first_error(self) -> str | None:
        return self.errors[0] if self.errors else None

    @classmethod
    def ok(cls, data: T) -> "OperationResult[T]":
        return cls(True, data)

    @classmethod
    def failed(cls, *errors: str) -> "OperationResult[T]":
        return cls(False, None, tuple(errors))


class ManifestIdService:
    """Generates and validates manifest ids without raising.

    Example:
        >>> result = ManifestIdService().generate_publisher_content_id("cnclabs", ContentType.Mod, "urban-chaos")
        >>> result.success, str(result.data)
        (True, '1.0.cnclabs.mod.urbanchaos')
    """

    def generate_publisher_content_id(
        self,
        publisher_id: str,
        content_type: ContentType,
        content_name: str,
        user_version: int = 0,
    ) -> OperationResult[ManifestId]:
        return self._generate(
            generator.generate_publisher_content_id, publisher_id, content_type, content_name, user_version
        )

    def generate_game_installation_id(
        self,
        installation: Any,
        game_type: GameType,
        user_version: Any = None,
    ) -> OperationResult[ManifestId]:
        return self._generate(generator.generate_game_installation_id, installation, game_type, user_version)

    def generate_release_id(
        self,
        owner: str,
        repository: str,
        tag: str | None,
        content_type: ContentType = ContentType.Mod,
    ) -> OperationResult[ManifestId]:
        return self._generate(generator.generate_release_id, owner, repository, tag, content_type)

    def validate_and_create_manifest_id(
        self, candidate: Any, *, allow_legacy: bool | None = None
    ) -> OperationResult[ManifestId]:
        """Validate a candidate string and wrap it as a ManifestId."""
        if not isinstance(candidate, str):
            return OperationResult.failed("Manifest ID cannot be null or empty")
        try:
            return OperationResult.ok(ManifestId(candidate, allow_legacy=allow_legacy))
        except ManifestError as e:
            return OperationResult.failed(str(e))

    @staticmethod
    def _generate(fn: Callable[..., str], *args: Any) -> OperationResult[ManifestId]:
        try:
            return OperationResult.ok(ManifestId(fn(*args)))
        except ManifestError as e:
            logger.debug("%s failed: %s", fn.__name__, e)
            return OperationResult.failed(str(e))
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            # Arguments of the wrong type or shape, e.g. objects without installation_type
            logger.debug("%s failed: %r", fn.__name__, e)
            return OperationResult.failed(f"Invalid argument: {e}")
