# Tests de adaptadores outbound: storage (memoria/Redis) y wrapper de LLM
# Ejecutar con: pytest tests/test_adapters.py -v
# Integración con Redis: pytest tests/test_adapters.py -v -m integration

import pytest
from unittest.mock import AsyncMock, MagicMock

from core.domain.errors import LLMError, StorageError
from core.domain.session import SamplingParams


# TESTS DE STORAGE EN MEMORIA

@pytest.mark.unit
class TestMemoryStorage:
    """Tests para MemoryStorageBackend"""

    @pytest.mark.asyncio
    async def test_absent_key_is_none(self, memory_backend):
        storage = memory_backend.for_conversation("x")
        assert await storage.get("messages") is None

    @pytest.mark.asyncio
    async def test_values_are_copied(self, memory_backend):
        storage = memory_backend.for_conversation("x")
        value = [{"role": "user", "content": "a", "timestamp": 1}]
        await storage.put("messages", value)
        value.append({"role": "user", "content": "b", "timestamp": 2})

        assert len(await storage.get("messages")) == 1

    @pytest.mark.asyncio
    async def test_conversations_are_scoped(self, memory_backend):
        await memory_backend.for_conversation("a").put("messages", [1])
        assert await memory_backend.for_conversation("b").get("messages") is None
        assert await memory_backend.for_conversation("a").get("messages") == [1]

    @pytest.mark.asyncio
    async def test_unserializable_value(self, memory_backend):
        storage = memory_backend.for_conversation("x")
        with pytest.raises(StorageError):
            await storage.put("metadata", {"bad": object()})

    def test_factory_rejects_unknown_backend(self):
        from adapters.outbound.storage import create_storage_backend

        with pytest.raises(ValueError):
            create_storage_backend("sqlite")


# TESTS DE STORAGE REDIS (cliente mockeado)

@pytest.mark.unit
class TestRedisStorageUnit:
    """RedisStorage con cliente asíncrono mockeado"""

    def _backend(self, client):
        from adapters.outbound.storage.redis_storage import RedisStorageBackend

        return RedisStorageBackend(url="redis://unused", prefix="conv", client=client)

    @pytest.mark.asyncio
    async def test_uses_one_hash_per_conversation(self):
        client = MagicMock()
        client.hset = AsyncMock()
        storage = self._backend(client).for_conversation("a:b")

        await storage.put("messages", [])
        client.hset.assert_awaited_once_with("conv:a:b", "messages", "[]")

    @pytest.mark.asyncio
    async def test_get_decodes_json(self):
        client = MagicMock()
        client.hget = AsyncMock(return_value='{"userId": "u"}')
        storage = self._backend(client).for_conversation("x")

        assert await storage.get("metadata") == {"userId": "u"}

    @pytest.mark.asyncio
    async def test_connection_error_raises_storage_error(self):
        client = MagicMock()
        client.hget = AsyncMock(side_effect=ConnectionError("refused"))
        client.hset = AsyncMock(side_effect=ConnectionError("refused"))
        storage = self._backend(client).for_conversation("x")

        with pytest.raises(StorageError):
            await storage.get("messages")
        with pytest.raises(StorageError):
            await storage.put("messages", [])

    @pytest.mark.asyncio
    async def test_invalid_json_raises_storage_error(self):
        client = MagicMock()
        client.hget = AsyncMock(return_value="{no json")
        storage = self._backend(client).for_conversation("x")

        with pytest.raises(StorageError):
            await storage.get("messages")


# TESTS DEL WRAPPER DE LLM

@pytest.mark.unit
class TestLLMWrapper:
    """LLMWrapper sobre un chat model falso de langchain"""

    @pytest.mark.asyncio
    async def test_returns_response_text(self):
        from langchain_core.language_models.fake_chat_models import FakeListChatModel
        from adapters.outbound.llm.llm_factory import LLMWrapper

        wrapper = LLMWrapper(FakeListChatModel(responses=["hola!"]), "fake", "list")
        result = await wrapper.ainvoke(
            [
                {"role": "system", "content": "sys"},
                {"role": "user", "content": "hi"},
            ],
            SamplingParams(),
        )
        assert result == {"response": "hola!"}
        assert wrapper.get_model_name() == "fake/list"

    @pytest.mark.asyncio
    async def test_binds_sampling_params(self):
        from adapters.outbound.llm.llm_factory import LLMWrapper

        llm = MagicMock()
        bound = MagicMock()
        bound.ainvoke = AsyncMock(return_value=MagicMock(content="ok"))
        llm.bind.return_value = bound

        wrapper = LLMWrapper(llm, "mock", "m")
        await wrapper.ainvoke(
            [{"role": "user", "content": "hi"}],
            SamplingParams(max_tokens=1024, temperature=0.7, top_p=0.9),
        )
        llm.bind.assert_called_once_with(max_tokens=1024, temperature=0.7, top_p=0.9)

    @pytest.mark.asyncio
    async def test_ollama_options(self):
        from adapters.outbound.llm.llm_factory import LLMWrapper, ollama_options

        llm = MagicMock()
        bound = MagicMock()
        bound.ainvoke = AsyncMock(return_value=MagicMock(content="ok"))
        llm.bind.return_value = bound

        wrapper = LLMWrapper(llm, "ollama", "m", sampling_kwargs=ollama_options)
        await wrapper.ainvoke([{"role": "user", "content": "hi"}], SamplingParams())
        llm.bind.assert_called_once_with(
            options={"num_predict": 1024, "temperature": 0.7, "top_p": 0.9}
        )

    def test_converts_roles(self):
        from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
        from adapters.outbound.llm.llm_factory import to_langchain_messages

        converted = to_langchain_messages(
            [
                {"role": "system", "content": "s"},
                {"role": "user", "content": "u"},
                {"role": "assistant", "content": "a"},
            ]
        )
        assert [type(m) for m in converted] == [SystemMessage, HumanMessage, AIMessage]

    @pytest.mark.asyncio
    async def test_failure_raises_llm_error(self):
        from adapters.outbound.llm.llm_factory import LLMWrapper

        llm = MagicMock()
        bound = MagicMock()
        bound.ainvoke = AsyncMock(side_effect=TimeoutError("upstream timeout"))
        llm.bind.return_value = bound

        wrapper = LLMWrapper(llm, "mock", "m")
        with pytest.raises(LLMError) as exc:
            await wrapper.ainvoke([{"role": "user", "content": "hi"}], SamplingParams())
        assert "upstream timeout" in exc.value.message

    def test_unknown_provider(self):
        from adapters.outbound.llm.llm_factory import get_llm

        with pytest.raises(ValueError):
            get_llm("no-existe")


# TESTS DE INTEGRACIÓN CON REDIS

@pytest.mark.integration
class TestRedisIntegration:
    """Tests de integración con Redis real"""

    @pytest.mark.asyncio
    async def test_round_trip_through_conversation_state(self, redis_backend, clock):
        from core.services.session_manager import ConversationRegistry

        registry = ConversationRegistry(redis_backend.for_conversation, clock=clock)
        await registry.get("it").add_message("user", "persistido en redis", user_id="u1")

        fresh = ConversationRegistry(redis_backend.for_conversation, clock=clock)
        history = await fresh.get("it").get_history()
        assert history["messages"][0]["content"] == "persistido en redis"
        assert history["metadata"]["userId"] == "u1"
