"""Collaborator interfaces for the manifest core.

This package contains the manifest cache protocol and the base classes for
content sources. Platform-specific sources live in the platforms/ directory.
"""

from .base import ContentData, ContentSource, InMemoryManifestCache, ManifestCache, SourceContent

__all__ = ["ContentSource", "SourceContent", "ContentData", "ManifestCache", "InMemoryManifestCache"]
