"""annobatch — parallel batch importer for annotation files."""

from annobatch.version import __version__

__all__ = ["__version__"]
