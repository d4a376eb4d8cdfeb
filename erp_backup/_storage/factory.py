"""Storage factory for centralized document store creation."""

from typing import Callable, Dict, Type

from ..base import BaseDocumentStore


class StorageFactory:
    """Factory for creating document stores with validation and registration."""

    _backends: Dict[str, Callable[[], Type[BaseDocumentStore]]] = {}

    ALLOWED_BACKENDS = {"json", "redis"}

    @classmethod
    def register(cls, name: str, backend_loader: Callable[[], Type[BaseDocumentStore]]) -> None:
        """Register a document store backend.

        Args:
            name: Backend name (must be in ALLOWED_BACKENDS)
            backend_loader: Function that returns the store class

        Raises:
            ValueError: If backend name not in allowed list
        """
        if name not in cls.ALLOWED_BACKENDS:
            raise ValueError(f"Backend {name} not in allowed backends: {cls.ALLOWED_BACKENDS}")
        cls._backends[name] = backend_loader

    @classmethod
    def create_store(
        cls,
        backend: str,
        namespace: str,
        global_config: dict,
    ) -> BaseDocumentStore:
        """Create a document store instance.

        Args:
            backend: Backend name
            namespace: Store namespace
            global_config: Backend configuration dict

        Returns:
            Document store instance

        Raises:
            ValueError: If backend not registered
        """
        if backend not in cls._backends:
            _register_backends()
            if backend not in cls._backends:
                raise ValueError(f"Unknown store backend: {backend}. Available: {list(cls._backends.keys())}")

        backend_class = cls._backends[backend]()
        return backend_class(namespace=namespace, global_config=global_config)


def _get_json_store():
    """Lazy loader for the JSON file store."""
    from .ds_json import JsonDocumentStore
    return JsonDocumentStore


def _get_redis_store():
    """Lazy loader for the Redis store."""
    from .ds_redis import RedisDocumentStore
    return RedisDocumentStore


def _register_backends():
    """Register built-in backends."""
    StorageFactory.register("json", _get_json_store)
    StorageFactory.register("redis", _get_redis_store)
