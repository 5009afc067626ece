"""Backend registry — select a source-control implementation by name."""

from __future__ import annotations

from tfsassets.models.errors import UnsupportedConfigurationError
from tfsassets.settings import Settings
from tfsassets.source.base import SourceBackend
from tfsassets.source.connection import ConnectionFactory


class SourceRegistry:
    """Registry for source-control backends."""

    _backends: dict[str, type[SourceBackend]] = {}

    @classmethod
    def register(cls, backend_class: type[SourceBackend]) -> type[SourceBackend]:
        """Register a backend class under its ``name``. Can be used as a decorator."""
        cls._backends[backend_class.name] = backend_class
        return backend_class

    @classmethod
    def get(cls, name: str) -> type[SourceBackend]:
        """Get the backend class registered as *name*."""
        if name not in cls._backends:
            raise UnsupportedConfigurationError("backend type", name, available=cls.available())
        return cls._backends[name]

    @classmethod
    def create(cls, settings: Settings, connection: ConnectionFactory) -> SourceBackend:
        """Instantiate the backend selected by ``settings.tfs_type``."""
        return cls.get(settings.tfs_type).from_settings(settings, connection)

    @classmethod
    def available(cls) -> list[str]:
        """List registered backend names."""
        return sorted(cls._backends.keys())
