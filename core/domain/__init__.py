# Core Domain - Entidades de conversación y errores

from core.domain.session import (
    Message,
    SessionMetadata,
    SamplingParams,
    Role,
    ROLES,
    now_ms,
)
from core.domain.errors import (
    ChatRouterError,
    ValidationError,
    NotFoundError,
    InternalError,
    StorageError,
    LLMError,
)

__all__ = [
    # Entidades
    "Message",
    "SessionMetadata",
    "SamplingParams",
    "Role",
    "ROLES",
    "now_ms",
    # Errores
    "ChatRouterError",
    "ValidationError",
    "NotFoundError",
    "InternalError",
    "StorageError",
    "LLMError",
]
