"""Base transformer class for converting source data to manifests.

This module defines the base interface for transformers that convert
source-specific data into ContentManifest instances with generated ids.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import ContentManifest
    from ..sources.base import ContentData, SourceContent


class Transformer(ABC):
    """Abstract base class for data transformers.

    Transformers convert source-specific data (ContentData) into content
    manifests whose ids come from the identifier generator.
    """

    @abstractmethod
    def transform(
        self,
        content: "SourceContent",
        data: "ContentData",
        **kwargs
    ) -> list["ContentManifest"]:
        """Transform source data into manifests.

        Args:
            content: The source item being transformed
            data: Raw data from the source
            **kwargs: Additional transformation parameters

        Returns:
            Manifests for the item (a detected installation can yield one per game)

        Raises:
            Exception: If transformation fails
        """
        pass
