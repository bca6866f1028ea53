"""Game installation platform.

Turns detected game installations into GameInstallation manifests that
type-based dependencies (e.g. "any Zero Hour installation") can match.
"""

from ...models import GameInstallation
from .source import GameInstallationSource, InstallationContent
from .transformer import GameInstallationTransformer

# Auto-register with the registry
from ...registry import SourceRegistry


def _create_installation_source(
    installations: list[GameInstallation] | None = None, **kwargs
) -> GameInstallationSource:
    """Factory function for creating installation sources."""
    return GameInstallationSource(installations)


SourceRegistry.register_factory("installations", _create_installation_source)

__all__ = ["GameInstallationSource", "GameInstallationTransformer", "InstallationContent"]
