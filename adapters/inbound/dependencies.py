# Inyección de dependencias para FastAPI

import logging
from typing import Optional

from adapters.factory import DependencyContainer, create_chat_service
from core.services.chat_service import ChatService

logger = logging.getLogger(__name__)


class AppDependencies:
    """
    Contenedor de dependencias de la aplicación.
    Singleton que se inicializa una vez y provee dependencias a los endpoints.
    """

    _instance: Optional["AppDependencies"] = None

    def __init__(self):
        self._container = DependencyContainer()
        self._chat_service: Optional[ChatService] = None

    @classmethod
    def get_instance(cls) -> "AppDependencies":
        """Obtiene la instancia singleton"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset para testing"""
        cls._instance = None

    # Propiedades con lazy loading

    @property
    def storage(self):
        return self._container.storage

    @property
    def chat_service(self) -> ChatService:
        if self._chat_service is None:
            self._chat_service = create_chat_service(self._container)
        return self._chat_service

    def initialize_all(self) -> None:
        """Pre-carga todas las dependencias (para startup)"""
        _ = self.storage
        _ = self.chat_service
        logger.info("Todas las dependencias inicializadas")

    async def shutdown(self) -> None:
        """Cierra conexiones del storage"""
        await self._container.close()


# Funciones para FastAPI Depends()

def get_deps() -> AppDependencies:
    """Obtiene el contenedor de dependencias"""
    return AppDependencies.get_instance()


def get_chat_service_dep() -> ChatService:
    """Dependencia: ChatService"""
    return get_deps().chat_service
