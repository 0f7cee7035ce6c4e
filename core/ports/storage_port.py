# Puerto de Storage
# Define la interfaz del almacenamiento durable por conversación

from abc import ABC, abstractmethod
from typing import Optional, Any


class StoragePort(ABC):
    """
    Almacenamiento clave/valor con alcance de una sola conversación.
    Lecturas ven las escrituras previas de la misma instancia.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Obtiene valor o None si la clave no existe"""
        pass

    @abstractmethod
    async def put(self, key: str, value: Any) -> None:
        """Guarda valor (debe ser serializable a JSON)"""
        pass
