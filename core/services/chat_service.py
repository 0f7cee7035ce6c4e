# ChatService - Orquestador del flujo contexto -> LLM -> historial

import time
import logging
from typing import Any, Dict, Optional

from config.settings import settings
from core.domain.errors import ValidationError
from core.domain.session import SamplingParams, now_ms
from core.ports.llm_port import LLMPort
from core.services.session_manager import ConversationRegistry
from utils.metrics import get_metrics

logger = logging.getLogger(__name__)

MESSAGE_REQUIRED = "Message is required and must be a string"


class ChatService:
    """
    Orquestador del router de chat.
    Recibe sus dependencias por constructor (Dependency Injection).

    Flujo de chat:
    1. Resuelve la conversación en el registry
    2. Obtiene contexto condensado (últimos 10 turnos)
    3. Construye el prompt: system + contexto + mensaje nuevo
    4. Invoca el LLM con parámetros de muestreo fijos
    5. Agrega el turno del usuario y luego el del asistente

    Los dos appends no son transaccionales: si el segundo falla, el primero
    ya quedó aplicado y el error se propaga.
    """

    def __init__(
        self,
        registry: ConversationRegistry,
        llm: LLMPort,
        sampling: Optional[SamplingParams] = None,
        system_prompt: Optional[str] = None,
        fallback_response: Optional[str] = None,
    ):
        self.registry = registry
        self.llm = llm
        self.sampling = sampling or SamplingParams(
            max_tokens=settings.ai.max_tokens,
            temperature=settings.ai.temperature,
            top_p=settings.ai.top_p,
        )
        self.system_prompt = system_prompt or settings.ai.system_prompt
        self.fallback_response = fallback_response or settings.ai.fallback_response

    def build_prompt(
        self, context: list, message: str, system_prompt: Optional[str] = None
    ) -> list:
        """Prompt ordenado: system, turnos previos, mensaje del usuario"""
        return [
            {"role": "system", "content": system_prompt or self.system_prompt},
            *context,
            {"role": "user", "content": message},
        ]

    async def chat(
        self,
        message: Any,
        conversation_id: Optional[str] = None,
        user_id: Optional[str] = None,
        system_prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not message or not isinstance(message, str):
            raise ValidationError(MESSAGE_REQUIRED, field="message")

        if conversation_id is None:
            conversation_id = settings.conversation.default_conversation_id
        if user_id is None:
            user_id = settings.conversation.default_user_id

        conversation = self.registry.get(conversation_id)
        context = (await conversation.get_context())["context"]
        prompt = self.build_prompt(context, message, system_prompt)

        start = time.time()
        result = await self.llm.ainvoke(prompt, self.sampling)
        get_metrics().record_llm_call(
            self.llm.get_model_name(), (time.time() - start) * 1000
        )

        assistant_message = (result or {}).get("response") or self.fallback_response

        await conversation.add_message("user", message, user_id)
        await conversation.add_message("assistant", assistant_message, user_id)
        get_metrics().record_chat()

        logger.info(
            f"Chat '{conversation_id}': {len(prompt)} mensajes en prompt, "
            f"{len(assistant_message)} chars de respuesta"
        )
        return {
            "response": assistant_message,
            "conversationId": conversation_id,
            "timestamp": now_ms(),
        }

    async def get_history(
        self, conversation_id: Optional[str] = None, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        if conversation_id is None:
            conversation_id = settings.conversation.default_conversation_id
        if limit is None:
            limit = settings.conversation.default_history_limit
        return await self.registry.get(conversation_id).get_history(limit)

    async def clear_history(self, conversation_id: Optional[str] = None) -> Dict[str, Any]:
        if conversation_id is None:
            conversation_id = settings.conversation.default_conversation_id
        result = await self.registry.get(conversation_id).clear_history()
        logger.info(f"Historial borrado: '{conversation_id}'")
        return result

    def health(self) -> Dict[str, Any]:
        return {"status": "healthy", "timestamp": now_ms()}
