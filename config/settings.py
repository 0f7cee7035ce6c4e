"""Configuración del proyecto."""

import os
from pathlib import Path
from typing import List
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful, friendly, and intelligent AI assistant. "
    "You have access to conversation history and can provide contextual responses. "
    "Be concise but informative. If you don't know something, admit it honestly."
)


class AISettings(BaseSettings):
    # Proveedores: workers_ai, openai, deepseek, ollama
    llm_provider: str = os.getenv("LLM_PROVIDER", "workers_ai")
    llm_model: str = os.getenv("LLM_MODEL", "")

    cloudflare_account_id: str = os.getenv("CLOUDFLARE_ACCOUNT_ID", "")
    cloudflare_api_token: str = os.getenv("CLOUDFLARE_API_TOKEN", "")
    workers_ai_model: str = "@cf/meta/llama-3.3-70b-instruct-fp8-fast"

    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_model: str = "gpt-4o-mini"

    deepseek_api_key: str = os.getenv("DEEPSEEK_API_KEY", "")
    deepseek_model: str = "deepseek-chat"

    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = "llama3.1"

    # Parámetros de muestreo fijos por llamada
    max_tokens: int = 1024
    temperature: float = 0.7
    top_p: float = 0.9

    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    fallback_response: str = "I apologize, but I could not generate a response."


class StorageSettings(BaseSettings):
    # "memory" (un proceso) o "redis" (durable)
    backend: str = os.getenv("STORAGE_BACKEND", "memory")
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    key_prefix: str = os.getenv("STORAGE_KEY_PREFIX", "conversation")


class ConversationSettings(BaseSettings):
    max_history: int = 50
    context_window: int = 10
    default_history_limit: int = 20
    default_conversation_id: str = "default"
    default_user_id: str = "anonymous"


class CORSSettings(BaseSettings):
    allowed_origins: str = os.getenv("ALLOWED_ORIGINS", "*")

    @property
    def origins(self) -> List[str]:
        values = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        return values or ["*"]


class LogSettings(BaseSettings):
    level: str = os.getenv("LOG_LEVEL", "INFO")


class Settings(BaseSettings):
    app_name: str = "Chat Router"
    debug: bool = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))
    ai: AISettings = AISettings()
    storage: StorageSettings = StorageSettings()
    conversation: ConversationSettings = ConversationSettings()
    cors: CORSSettings = CORSSettings()
    logs: LogSettings = LogSettings()


settings = Settings()
