# Configuración central de pytest y fixtures compartidos

import pytest
import pytest_asyncio
import os
import sys
from unittest.mock import AsyncMock, MagicMock, patch

# Asegurar que el directorio raíz esté en el path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


# MARKERS PERSONALIZADOS

def pytest_configure(config):
    """Registrar markers personalizados"""
    config.addinivalue_line(
        "markers", "unit: Tests unitarios rápidos (sin servicios externos)"
    )
    config.addinivalue_line(
        "markers", "integration: Tests de integración (requieren Redis)"
    )


# RELOJ CONTROLABLE

class FakeClock:
    """Reloj en milisegundos que solo avanza cuando el test lo pide"""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


# FIXTURES DE STORAGE Y SESIONES

@pytest.fixture
def memory_backend():
    """Backend en memoria compartido por todas las conversaciones del test"""
    from adapters.outbound.storage import MemoryStorageBackend

    return MemoryStorageBackend()


@pytest.fixture
def registry(memory_backend, clock):
    from core.services.session_manager import ConversationRegistry

    return ConversationRegistry(
        memory_backend.for_conversation, max_history=50, context_window=10, clock=clock
    )


@pytest.fixture
def conversation(registry):
    """ConversationState de la conversación 'default'"""
    return registry.get("default")


@pytest.fixture(autouse=True)
def reset_metrics():
    from utils.logging import token_counter
    from utils.metrics import get_metrics

    get_metrics().reset()
    token_counter.reset()
    yield


# FIXTURES DE MOCK PARA TESTS UNITARIOS

@pytest.fixture
def mock_llm():
    """Mock del LLM para evitar llamadas reales (costosas y lentas)"""
    mock = MagicMock()
    mock.ainvoke = AsyncMock(return_value={"response": "hello"})
    mock.get_model_name.return_value = "mock/llm"
    return mock


@pytest.fixture
def chat_service(registry, mock_llm):
    from core.domain.session import SamplingParams
    from core.services.chat_service import ChatService

    return ChatService(
        registry=registry,
        llm=mock_llm,
        sampling=SamplingParams(max_tokens=1024, temperature=0.7, top_p=0.9),
        system_prompt="You are a test assistant.",
        fallback_response="I apologize, but I could not generate a response.",
    )


@pytest.fixture
def mock_deps(chat_service):
    """AppDependencies con un ChatService real sobre storage en memoria"""
    mock = MagicMock()
    mock.chat_service = chat_service
    return mock


# FIXTURES PARA TESTS DE API

@pytest.fixture
def api_client(mock_deps):
    """Cliente de API con dependencias mockeadas"""
    from fastapi.testclient import TestClient

    with patch("adapters.inbound.dependencies.AppDependencies") as MockDeps:
        MockDeps.get_instance.return_value = mock_deps

        from adapters.inbound.api import app
        yield TestClient(app)


# FIXTURES DE INTEGRACIÓN

@pytest_asyncio.fixture
async def redis_backend():
    """Backend Redis real con un prefijo aislado; se limpia al terminar"""
    import uuid
    from adapters.outbound.storage.redis_storage import RedisStorageBackend

    backend = RedisStorageBackend(prefix=f"test-{uuid.uuid4().hex[:8]}")
    if not await backend.is_connected():
        await backend.close()
        pytest.skip("Redis no disponible")

    yield backend

    async for key in backend.client.scan_iter(match=f"{backend.prefix}:*"):
        await backend.client.delete(key)
    await backend.close()
