# src/importers/importer_factory.py — v1
"""Factory: resolve the configured importer class.

Importers are looked up by registry name or by fully qualified class path,
so external importer plugins can be used without registering them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from annobatch.config.settings import Settings
from annobatch.core.models import ImporterArguments
from annobatch.importers.base_importer import BaseImporter

logger = logging.getLogger(__name__)

ImporterFactory = Callable[[ImporterArguments], BaseImporter]

_IMPORTER_REGISTRY: dict[str, str] = {
    "manifest": "annobatch.importers.manifest_importer.ManifestImporter",
}


class UnsupportedImporterError(ValueError):
    """Raised when an importer name is neither registered nor importable."""


def create_importer_factory(settings: Settings | None = None) -> ImporterFactory:
    """Return a callable building a configured importer for one job.

    Args:
        settings: Application settings. Uses IMPORTER; defaults to "manifest".
    """
    name = "manifest" if settings is None else settings.importer
    cls = resolve_importer_class(name)
    logger.debug("Using importer %s", cls.__qualname__)
    return cls.configure


def resolve_importer_class(name: str) -> type[BaseImporter]:
    """Resolve a registry name or a dotted class path to an importer class."""
    class_path = _IMPORTER_REGISTRY.get(name, name)
    if "." not in class_path:
        raise UnsupportedImporterError(
            f"Unsupported importer: {name!r}. "
            f"Available: {', '.join(sorted(_IMPORTER_REGISTRY))}"
        )
    try:
        cls = _import_class(class_path)
    except (ImportError, AttributeError) as e:
        raise UnsupportedImporterError(f"Cannot import importer {class_path!r}: {e}") from e
    if not (isinstance(cls, type) and issubclass(cls, BaseImporter)):
        raise UnsupportedImporterError(f"{class_path!r} is not a BaseImporter subclass")
    return cls


def register_importer(name: str, class_path: str) -> None:
    """Register a custom importer under a short name."""
    _IMPORTER_REGISTRY[name] = class_path


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    import importlib
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
