# Servicios del núcleo
from core.services.session_manager import ConversationState, ConversationRegistry
from core.services.chat_service import ChatService

__all__ = [
    "ConversationState",
    "ConversationRegistry",
    "ChatService",
]
