# Fábrica - Crea el ChatService con todas las dependencias inyectadas

from typing import Optional

from config.settings import settings
from adapters.outbound.llm.llm_factory import get_llm
from adapters.outbound.storage import create_storage_backend

from core.domain.session import SamplingParams
from core.ports.llm_port import LLMPort
from core.services.chat_service import ChatService
from core.services.session_manager import ConversationRegistry


class DependencyContainer:
    """Contenedor de dependencias. Crea e inyecta todas las dependencias concretas."""

    def __init__(self, storage_backend: Optional[str] = None, llm: Optional[LLMPort] = None):
        self.storage_backend = storage_backend or settings.storage.backend
        self._llm = llm
        self._storage = None
        self._registry = None

    @property
    def llm(self) -> LLMPort:
        if self._llm is None:
            self._llm = get_llm()
        return self._llm

    @property
    def storage(self):
        if self._storage is None:
            self._storage = create_storage_backend(self.storage_backend)
        return self._storage

    @property
    def registry(self) -> ConversationRegistry:
        if self._registry is None:
            self._registry = ConversationRegistry(
                self.storage.for_conversation,
                max_history=settings.conversation.max_history,
                context_window=settings.conversation.context_window,
            )
        return self._registry

    async def close(self):
        if self._storage is not None:
            await self._storage.close()


def create_chat_service(container: Optional[DependencyContainer] = None) -> ChatService:
    """Factory function que crea el ChatService con todas las dependencias."""
    container = container or DependencyContainer()

    return ChatService(
        registry=container.registry,
        llm=container.llm,
        sampling=SamplingParams(
            max_tokens=settings.ai.max_tokens,
            temperature=settings.ai.temperature,
            top_p=settings.ai.top_p,
        ),
        system_prompt=settings.ai.system_prompt,
        fallback_response=settings.ai.fallback_response,
    )
