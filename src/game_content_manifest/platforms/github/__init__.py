"""GitHub release platform.

Turns tagged releases of community projects into content manifests.
"""

from .source import GitHubRelease, GitHubReleaseSource
from .transformer import GitHubReleaseTransformer, game_installation_dependency

# Auto-register with the registry
from ...registry import SourceRegistry


def _create_github_source(releases: list[GitHubRelease] | None = None, **kwargs) -> GitHubReleaseSource:
    """Factory function for creating GitHub release sources."""
    return GitHubReleaseSource(releases)


SourceRegistry.register_factory("github", _create_github_source)

__all__ = [
    "GitHubRelease",
    "GitHubReleaseSource",
    "GitHubReleaseTransformer",
    "game_installation_dependency",
]
