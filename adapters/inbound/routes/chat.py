# Rutas de chat - /api/chat

import logging
from typing import Any, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from adapters.inbound.dependencies import get_chat_service_dep
from core.domain.errors import InternalError, ValidationError
from core.services.chat_service import ChatService
from utils.metrics import RequestTimer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


# Modelos de transferencia de datos
class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Any: el tipo se valida en el servicio para responder con el error estable
    message: Any = Field(None, description="Mensaje del usuario")
    conversation_id: Optional[str] = Field(
        None, alias="conversationId", description="ID de conversación (default: 'default')"
    )
    user_id: Optional[str] = Field(
        None, alias="userId", description="ID de usuario (default: 'anonymous')"
    )
    system_prompt: Optional[str] = Field(
        None, alias="systemPrompt", description="Prompt de sistema personalizado"
    )


class ChatResponse(BaseModel):
    response: str
    conversationId: str
    timestamp: int


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: Optional[ChatRequest] = None,
    service: ChatService = Depends(get_chat_service_dep),
):
    """Envía un mensaje al LLM con el contexto de la conversación"""
    # Sin body: mismo error estable que un mensaje ausente
    request = request or ChatRequest()
    with RequestTimer("/api/chat"):
        try:
            return await service.chat(
                request.message,
                conversation_id=request.conversation_id,
                user_id=request.user_id,
                system_prompt=request.system_prompt,
            )
        except ValidationError:
            raise
        except Exception as e:
            logger.error(f"Chat error: {e}")
            raise InternalError("Failed to process chat request", details=str(e)) from e
