"""Manifest pipeline.

Turns the items of a content source into ContentManifest instances and
loads them into a manifest cache. The pipeline is platform-agnostic and
delegates to the source's transformer.
"""

import logging
from collections.abc import Iterator
from typing import Callable

from .models import ContentManifest
from .sources.base import ContentSource, InMemoryManifestCache, SourceContent

logger = logging.getLogger(__name__)


class ManifestPipeline:
    """Builds manifests from any ContentSource.

    Example:
        >>> pipeline = SourceRegistry.create_pipeline('installations', installations=detected)
        >>> cache = pipeline.build_cache()
        >>> cache.get("1.104.steam.gameinstallation.zerohour")
    """

    def __init__(self, source: ContentSource):
        self.source = source

    def generate_manifests(
        self,
        filter_fn: Callable[[SourceContent], bool] | None = None,
        limit: int | None = None,
        **kwargs,
    ) -> Iterator[ContentManifest]:
        """Generate manifests for the source's content.

        Args:
            filter_fn: Optional predicate selecting which items to process
            limit: Optional cap on the number of items processed
            **kwargs: Additional parameters passed to the transformer

        Yields:
            ContentManifest instances, in source order
        """
        items = self.source.list_content()

        if filter_fn:
            items = [item for item in items if filter_fn(item)]

        if limit:
            items = items[:limit]

        for item in items:
            yield from self.generate_manifests_for_content(item, **kwargs)

    def generate_manifests_for_content(self, content: SourceContent, **kwargs) -> list[ContentManifest]:
        """Generate the manifests for a single source item."""
        data = self.source.get_content_data(content)
        transformer = self.source.get_transformer()
        manifests = transformer.transform(content, data, **kwargs)
        logger.debug("Source item %s produced %d manifest(s)", content.uid, len(manifests))
        return manifests

    def build_cache(self, cache: InMemoryManifestCache | None = None, **kwargs) -> InMemoryManifestCache:
        """Load every manifest of the source into a cache.

        Later manifests with the same id replace earlier ones.
        """
        if cache is None:
            cache = InMemoryManifestCache()
        for manifest in self.generate_manifests(**kwargs):
            if manifest.id in cache:
                logger.warning("Duplicate manifest id %s from source item; replacing", manifest.id)
            cache.add(manifest)
        return cache
