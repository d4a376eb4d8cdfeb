"""Storage module with lazy loading support."""

from typing import TYPE_CHECKING

from .factory import StorageFactory, _register_backends

if TYPE_CHECKING:
    from .ds_json import JsonDocumentStore
    from .ds_redis import RedisDocumentStore


def __getattr__(name):
    """Lazy import store backends."""
    if name == "JsonDocumentStore":
        from .ds_json import JsonDocumentStore
        return JsonDocumentStore
    elif name == "RedisDocumentStore":
        from .ds_redis import RedisDocumentStore
        return RedisDocumentStore
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "StorageFactory",
    "_register_backends",
    "JsonDocumentStore",
    "RedisDocumentStore",
]
