# Fábrica de LLM - Soporte multi-proveedor
# Proveedores: workers_ai, openai, deepseek, ollama

import logging
from functools import lru_cache
from typing import Any, Callable, Dict, List

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from config.settings import settings
from core.domain.errors import LLMError
from core.domain.session import SamplingParams
from core.ports.llm_port import LLMPort
from utils.logging import token_counter

logger = logging.getLogger(__name__)

MESSAGE_TYPES = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def to_langchain_messages(messages: List[Dict[str, str]]) -> List[BaseMessage]:
    """Convierte [{role, content}] a mensajes de langchain"""
    converted = []
    for m in messages:
        message_cls = MESSAGE_TYPES.get(m["role"])
        if message_cls is None:
            raise LLMError(f"Unsupported role '{m['role']}' in prompt")
        converted.append(message_cls(content=m["content"]))
    return converted


def ollama_options(sampling: SamplingParams) -> Dict[str, Any]:
    # Ollama usa num_predict en lugar de max_tokens
    return {
        "options": {
            "num_predict": sampling.max_tokens,
            "temperature": sampling.temperature,
            "top_p": sampling.top_p,
        }
    }


class LLMWrapper(LLMPort):
    """Wrapper de LLM con conteo de tokens - Implementa LLMPort"""

    def __init__(
        self,
        llm,
        provider: str,
        model: str,
        sampling_kwargs: Callable[[SamplingParams], Dict[str, Any]] = None,
    ):
        self.llm = llm
        self.provider = provider
        self.model = model
        self.sampling_kwargs = sampling_kwargs or (lambda s: s.to_kwargs())

    async def ainvoke(
        self, messages: List[Dict[str, str]], sampling: SamplingParams
    ) -> Dict[str, Any]:
        """Invocación asíncrona con parámetros de muestreo por llamada"""
        lc_messages = to_langchain_messages(messages)
        input_text = " ".join(m["content"] for m in messages)

        try:
            bound = self.llm.bind(**self.sampling_kwargs(sampling))
            response = await bound.ainvoke(lc_messages)
        except Exception as e:
            logger.error(f"Error LLM ({self.get_model_name()}): {e}")
            raise LLMError(f"Inference call failed: {e}", provider=self.provider) from e

        output_text = response.content if isinstance(response.content, str) else ""
        token_counter.track(input_text, output_text, self.get_model_name())
        return {"response": output_text}

    def get_model_name(self) -> str:
        """Retorna nombre del modelo"""
        return f"{self.provider}/{self.model}"


def _get_workers_ai() -> LLMWrapper:
    from langchain_openai import ChatOpenAI

    if not settings.ai.cloudflare_account_id:
        raise ValueError("CLOUDFLARE_ACCOUNT_ID requerido para workers_ai")

    model = settings.ai.llm_model or settings.ai.workers_ai_model
    base_url = (
        "https://api.cloudflare.com/client/v4/accounts/"
        f"{settings.ai.cloudflare_account_id}/ai/v1"
    )
    llm = ChatOpenAI(
        model=model,
        base_url=base_url,
        api_key=settings.ai.cloudflare_api_token,
    )
    logger.info(f"LLM: Workers AI ({model})")
    return LLMWrapper(llm, "workers_ai", model)


def _get_openai() -> LLMWrapper:
    from langchain_openai import ChatOpenAI

    model = settings.ai.llm_model or settings.ai.openai_model
    llm = ChatOpenAI(
        model=model,
        api_key=settings.ai.openai_api_key,
    )
    logger.info(f"LLM: OpenAI ({model})")
    return LLMWrapper(llm, "openai", model)


def _get_deepseek() -> LLMWrapper:
    from langchain_openai import ChatOpenAI

    model = settings.ai.llm_model or settings.ai.deepseek_model
    llm = ChatOpenAI(
        model=model,
        base_url="https://api.deepseek.com/v1",
        api_key=settings.ai.deepseek_api_key,
    )
    logger.info(f"LLM: Deepseek ({model})")
    return LLMWrapper(llm, "deepseek", model)


def _get_ollama() -> LLMWrapper:
    try:
        from langchain_ollama import ChatOllama
    except ImportError:
        raise ImportError("Instala langchain-ollama: pip install langchain-ollama")

    model = settings.ai.llm_model or settings.ai.ollama_model
    llm = ChatOllama(
        model=model,
        base_url=settings.ai.ollama_base_url,
    )
    logger.info(f"LLM: Ollama ({model}) - Local")
    return LLMWrapper(llm, "ollama", model, sampling_kwargs=ollama_options)


PROVIDERS = {
    "workers_ai": _get_workers_ai,
    "openai": _get_openai,
    "deepseek": _get_deepseek,
    "ollama": _get_ollama,
}


@lru_cache(maxsize=None)
def get_llm(provider: str = None) -> LLMWrapper:
    """Retorna el LLM configurado según el proveedor"""
    provider = provider or settings.ai.llm_provider

    if provider not in PROVIDERS:
        available = ", ".join(PROVIDERS.keys())
        raise ValueError(f"Proveedor '{provider}' no soportado. Usa: {available}")

    try:
        return PROVIDERS[provider]()
    except Exception as e:
        logger.error(f"Error inicializando {provider}: {e}")
        raise
