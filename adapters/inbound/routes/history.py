# Rutas de historial - /api/history, /api/clear

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from adapters.inbound.dependencies import get_chat_service_dep
from core.domain.errors import InternalError, ValidationError
from core.services.chat_service import ChatService
from utils.metrics import RequestTimer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["History"])


class ClearRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conversation_id: Optional[str] = Field(None, alias="conversationId")


@router.get("/history")
async def get_history(
    conversation_id: Optional[str] = Query(None, alias="conversationId"),
    limit: Optional[int] = Query(None, ge=0, description="Últimos N mensajes (default 20)"),
    service: ChatService = Depends(get_chat_service_dep),
):
    """Historial de la conversación con metadatos"""
    with RequestTimer("/api/history"):
        try:
            return await service.get_history(conversation_id, limit)
        except ValidationError:
            raise
        except Exception as e:
            logger.error(f"History error: {e}")
            raise InternalError("Failed to retrieve history", details=str(e)) from e


@router.post("/clear")
async def clear_history(
    request: Optional[ClearRequest] = None,
    service: ChatService = Depends(get_chat_service_dep),
):
    """Borra los mensajes de la conversación (los metadatos se conservan)"""
    conversation_id = request.conversation_id if request else None
    with RequestTimer("/api/clear"):
        try:
            return await service.clear_history(conversation_id)
        except Exception as e:
            logger.error(f"Clear error: {e}")
            raise InternalError("Failed to clear history", details=str(e)) from e
