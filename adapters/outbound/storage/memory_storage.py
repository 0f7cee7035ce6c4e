# Storage en memoria del proceso (tests y despliegues de una sola instancia)

import json
import logging
from typing import Any, Dict, Optional

from core.domain.errors import StorageError
from core.ports.storage_port import StoragePort

logger = logging.getLogger(__name__)


class MemoryStorage(StoragePort):
    """Valores guardados como JSON para no compartir referencias mutables"""

    def __init__(self, data: Dict[str, str]):
        self._data = data

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    async def put(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for '{key}' is not serializable: {e}", key=key) from e


class MemoryStorageBackend:
    def __init__(self):
        self._conversations: Dict[str, Dict[str, str]] = {}
        logger.info("Storage en memoria (no durable)")

    def for_conversation(self, conversation_id: str) -> MemoryStorage:
        return MemoryStorage(self._conversations.setdefault(conversation_id, {}))

    def raw(self, conversation_id: str) -> Dict[str, str]:
        """Acceso directo a los valores serializados de una conversación"""
        return self._conversations.setdefault(conversation_id, {})

    async def is_connected(self) -> bool:
        return True

    async def close(self):
        pass
