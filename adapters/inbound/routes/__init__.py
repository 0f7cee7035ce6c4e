# Paquete de rutas - Módulos APIRouter

from adapters.inbound.routes.chat import router as chat_router
from adapters.inbound.routes.history import router as history_router
from adapters.inbound.routes.health import router as health_router

__all__ = ["chat_router", "history_router", "health_router"]
