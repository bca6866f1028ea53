"""Content source platforms.

Each platform package provides a source and transformer pair and registers
its factory with the SourceRegistry when imported.
"""

# Platform modules are imported dynamically by SourceRegistry.discover_platforms()
