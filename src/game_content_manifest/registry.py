"""Registry of content source factories.

Platforms register a factory under a name when their package is imported;
SourceRegistry.discover_platforms() imports every package under platforms/
so callers can build a pipeline by name without importing platform code.
"""

import importlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .pipeline import ManifestPipeline
    from .sources.base import ContentSource

logger = logging.getLogger(__name__)


class SourceRegistry:
    """Central registry for content source factories.

    Registration happens at import time only; afterwards the registry is
    read-only.
    """

    _factories: dict[str, Callable[..., "ContentSource"]] = {}

    @classmethod
    def register_factory(cls, name: str, factory: Callable[..., "ContentSource"]) -> None:
        """Register a factory function for creating sources.

        Args:
            name: Name of the source (e.g., 'github', 'installations')
            factory: Callable that creates a ContentSource instance

        Example:
            >>> SourceRegistry.register_factory('github', GitHubReleaseSource)
        """
        cls._factories[name] = factory

    @classmethod
    def create_source(cls, source_name: str, **kwargs) -> "ContentSource":
        """Create a source from a registered factory.

        Raises:
            ValueError: If source_name is not registered
        """
        if source_name not in cls._factories:
            available = ", ".join(cls._factories.keys()) or "none"
            raise ValueError(f"Unknown source: '{source_name}'. Available sources: {available}")
        return cls._factories[source_name](**kwargs)

    @classmethod
    def create_pipeline(cls, source_name: str, **kwargs) -> "ManifestPipeline":
        """Create a pipeline around a registered source.

        Args:
            source_name: Name of the registered source
            **kwargs: Arguments passed to the source factory

        Returns:
            ManifestPipeline configured with the requested source

        Raises:
            ValueError: If source_name is not registered

        Example:
            >>> pipeline = SourceRegistry.create_pipeline('installations', installations=detected)
        """
        # Import here to avoid circular dependency
        from .pipeline import ManifestPipeline

        return ManifestPipeline(cls.create_source(source_name, **kwargs))

    @classmethod
    def list_sources(cls) -> list[str]:
        """List all registered source names."""
        return list(cls._factories.keys())

    @classmethod
    def discover_platforms(cls) -> None:
        """Import every platform package so it can register itself.

        Platforms whose dependencies are not installed are skipped.
        """
        platforms_dir = Path(__file__).parent / "platforms"

        if not platforms_dir.exists():
            return

        for platform_path in sorted(platforms_dir.iterdir()):
            if not platform_path.is_dir() or not (platform_path / "__init__.py").exists():
                continue

            try:
                importlib.import_module(f".platforms.{platform_path.name}", package=__package__)
            except ImportError as e:
                logger.debug("Skipping platform %s: %s", platform_path.name, e)
