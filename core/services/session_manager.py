# Gestor de sesiones: un estado serializado por conversación sobre un storage durable

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Any

from pydantic import ValidationError as PydanticValidationError

from config.settings import settings
from core.domain.errors import StorageError, ValidationError
from core.domain.session import Message, SessionMetadata, ROLES, now_ms
from core.ports.storage_port import StoragePort
from utils.metrics import get_metrics

logger = logging.getLogger(__name__)

MESSAGES_KEY = "messages"
METADATA_KEY = "metadata"


class ConversationState:
    """
    Historial y metadatos de una sola conversación.

    Todas las operaciones corren bajo un asyncio.Lock propio, así que dos
    operaciones sobre la misma conversación nunca se intercalan (orden FIFO)
    mientras que conversaciones distintas avanzan en paralelo.

    La primera operación carga el estado desde el storage (UNINITIALIZED ->
    READY); las siguientes trabajan en memoria y persisten tras cada mutación.
    Las dos escrituras (messages, metadata) no son transaccionales.
    """

    def __init__(
        self,
        conversation_id: str,
        storage: StoragePort,
        max_history: int = 50,
        context_window: int = 10,
        clock: Callable[[], int] = now_ms,
    ):
        self.conversation_id = conversation_id
        self.max_history = max_history
        self.context_window = context_window
        self._storage = storage
        self._clock = clock
        self._lock = asyncio.Lock()
        self._ready = False
        self._messages: List[Message] = []
        self._metadata: Optional[SessionMetadata] = None

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def _ensure_ready(self):
        if self._ready:
            return

        try:
            stored_messages = await self._storage.get(MESSAGES_KEY)
            stored_metadata = await self._storage.get(METADATA_KEY)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to load conversation state: {e}") from e

        try:
            messages = (
                [Message.model_validate(m) for m in stored_messages]
                if stored_messages is not None
                else []
            )
            metadata = (
                SessionMetadata.model_validate(stored_metadata)
                if stored_metadata is not None
                else SessionMetadata.fresh(self._clock())
            )
        except (PydanticValidationError, TypeError) as e:
            raise StorageError(f"Malformed stored conversation state: {e}") from e

        self._messages = messages
        self._metadata = metadata
        self._ready = True
        logger.debug(
            f"Conversación '{self.conversation_id}' cargada ({len(messages)} mensajes)"
        )

    async def _persist(self):
        try:
            await self._storage.put(
                MESSAGES_KEY, [m.model_dump() for m in self._messages]
            )
            await self._storage.put(METADATA_KEY, self._metadata.to_dict())
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to persist conversation state: {e}") from e

    # Agrega un mensaje; trunca a los últimos max_history (FIFO)
    async def add_message(
        self, role: str, content: str, user_id: Optional[str] = None
    ) -> Dict[str, Any]:
        if not role or not content or not isinstance(role, str) or not isinstance(content, str):
            raise ValidationError("Missing role or content", field="role/content")
        if role not in ROLES:
            raise ValidationError(f"Invalid role '{role}'", field="role")

        async with self._lock:
            await self._ensure_ready()
            now = self._clock()

            # El primer userId gana, nunca se sobrescribe
            if user_id and not self._metadata.user_id:
                self._metadata.user_id = user_id

            self._messages.append(Message(role=role, content=content, timestamp=now))
            self._metadata.touch(now)

            if len(self._messages) > self.max_history:
                self._messages = self._messages[-self.max_history :]

            await self._persist()
            return {"success": True, "messageCount": len(self._messages)}

    # Retorna los últimos `limit` mensajes con metadatos
    async def get_history(self, limit: int = 20) -> Dict[str, Any]:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise ValidationError("Limit must be a non-negative integer", field="limit")

        async with self._lock:
            await self._ensure_ready()
            recent = self._messages[-limit:] if limit > 0 else []
            return {
                "messages": [m.model_dump() for m in recent],
                "metadata": self._metadata.to_dict(),
                "totalMessages": len(self._messages),
            }

    # Contexto condensado para el prompt (sin timestamps)
    async def get_context(self) -> Dict[str, Any]:
        async with self._lock:
            await self._ensure_ready()
            recent = self._messages[-self.context_window :]
            return {
                "context": [m.to_context() for m in recent],
                "messageCount": len(self._messages),
            }

    # Vacía el historial; userId y createdAt se conservan
    async def clear_history(self) -> Dict[str, Any]:
        async with self._lock:
            await self._ensure_ready()
            self._messages = []
            self._metadata.touch(self._clock())
            await self._persist()
            logger.debug(f"Historial borrado: {self.conversation_id}")
            return {"success": True}


class ConversationRegistry:
    """
    Mapa conversación -> ConversationState, creado bajo demanda.
    Las instancias viven mientras viva el proceso (sin expiración).
    """

    def __init__(
        self,
        storage_factory: Callable[[str], StoragePort],
        max_history: int = None,
        context_window: int = None,
        clock: Callable[[], int] = now_ms,
    ):
        self._storage_factory = storage_factory
        self.max_history = max_history or settings.conversation.max_history
        self.context_window = context_window or settings.conversation.context_window
        self._clock = clock
        self._states: Dict[str, ConversationState] = {}

    # Sin await entre la búsqueda y la inserción: atómico en el event loop
    def get(self, conversation_id: str) -> ConversationState:
        state = self._states.get(conversation_id)
        if state is None:
            state = ConversationState(
                conversation_id,
                self._storage_factory(conversation_id),
                max_history=self.max_history,
                context_window=self.context_window,
                clock=self._clock,
            )
            self._states[conversation_id] = state
            get_metrics().set_active_conversations(len(self._states))
            logger.debug(f"Nueva conversación: '{conversation_id}'")
        return state

    def __contains__(self, conversation_id: str) -> bool:
        return conversation_id in self._states

    def __len__(self) -> int:
        return len(self._states)
