"""Sort photos and videos into a dated, deduplicated archive tree."""

__version__ = "0.1.0"
