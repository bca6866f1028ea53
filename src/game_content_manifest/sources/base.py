"""Base abstractions for manifest caches and content sources.

This module defines the interfaces the core consumes from its collaborators:
a manifest cache keyed by manifest id, and content sources that describe
installable content and the publisher it comes from.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from ..core.manifest_id import ManifestId
from ..models import ContentManifest, PublisherInfo

if TYPE_CHECKING:
    from ..transformers.base import Transformer


@runtime_checkable
class ManifestCache(Protocol):
    """Lookup of already-loaded manifests by id."""

    def get(self, manifest_id: ManifestId) -> ContentManifest | None:
        """Return the manifest for an id, or None if it is unknown."""
        ...


class InMemoryManifestCache:
    """Dict-backed ManifestCache.

    Keys are ManifestId instances, so lookups are case-insensitive. The
    cache is filled once by a loader and then only read.
    """

    def __init__(self, manifests: Iterable[ContentManifest] = ()):
        self._manifests: dict[ManifestId, ContentManifest] = {}
        for manifest in manifests:
            self.add(manifest)

    def add(self, manifest: ContentManifest) -> None:
        """Add or replace a manifest."""
        self._manifests[manifest.id] = manifest

    def get(self, manifest_id: ManifestId | str) -> ContentManifest | None:
        return self._manifests.get(ManifestId.create(manifest_id))

    def as_mapping(self) -> dict[ManifestId, ContentManifest]:
        """Snapshot usable as the available set for dependency validation."""
        return dict(self._manifests)

    def __contains__(self, manifest_id: object) -> bool:
        if isinstance(manifest_id, str):
            return any(key == manifest_id for key in self._manifests)
        return manifest_id in self._manifests

    def __iter__(self) -> Iterator[ContentManifest]:
        return iter(self._manifests.values())

    def __len__(self) -> int:
        return len(self._manifests)


@runtime_checkable
class SourceContent(Protocol):
    """Protocol for content items from any source.

    Any object with a uid and title can act as a SourceContent. This allows
    hosted releases, detected installations, etc. to all be treated
    uniformly by the pipeline.

    Attributes:
        uid: Unique identifier of the item within its source
        title: Human-readable name/title
    """

    uid: str
    title: str


@dataclass
class ContentData:
    """Container for raw data retrieved from a source.

    This holds the raw information that will be transformed into one or more
    content manifests. The structure is flexible to accommodate different
    source types.

    Attributes:
        content: The source item this data belongs to
        publisher: Publisher info for the item's provenance
        metadata: Source-specific values the transformer needs
        files: File entries, when the source knows them
    """

    content: SourceContent
    publisher: PublisherInfo
    metadata: dict[str, Any] = field(default_factory=dict)
    files: list[dict[str, Any]] = field(default_factory=list)


class ContentSource(ABC):
    """Abstract base class for all content sources.

    Implementations provide platform-specific logic for describing content
    and its publisher, while adhering to this common interface. Sources work
    on data handed to them; fetching that data is up to the caller.
    """

    #: Provenance token written into PublisherInfo.publisher_type
    publisher_type: str = ""

    @abstractmethod
    def list_content(self) -> list[SourceContent]:
        """List all content items available from this source."""
        pass

    @abstractmethod
    def get_content(self, uid: str) -> SourceContent:
        """Retrieve a specific content item by UID.

        Raises:
            KeyError: If the item is not found
        """
        pass

    @abstractmethod
    def get_content_data(self, content: SourceContent) -> ContentData:
        """Get raw data for transformation."""
        pass

    @abstractmethod
    def publisher_info(self, content: SourceContent | None = None) -> PublisherInfo:
        """Publisher info for this source, optionally specific to one item."""
        pass

    @abstractmethod
    def get_transformer(self) -> "Transformer":
        """Return the transformer that turns this source's data into manifests."""
        pass
