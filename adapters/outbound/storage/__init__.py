# Adaptadores de storage durable por conversación

from config.settings import settings
from adapters.outbound.storage.memory_storage import MemoryStorage, MemoryStorageBackend

BACKENDS = ("memory", "redis")


def create_storage_backend(backend: str = None):
    """Crea el backend configurado (memory o redis)"""
    backend = backend or settings.storage.backend

    if backend == "memory":
        return MemoryStorageBackend()
    if backend == "redis":
        from adapters.outbound.storage.redis_storage import RedisStorageBackend

        return RedisStorageBackend()

    available = ", ".join(BACKENDS)
    raise ValueError(f"Storage '{backend}' no soportado. Usa: {available}")


__all__ = ["MemoryStorage", "MemoryStorageBackend", "create_storage_backend"]
