# Logging de la aplicación y conteo de tokens del LLM

import logging
from threading import Lock
from typing import Dict

import tiktoken
from config.settings import settings


def setup_logging():
    level = logging.DEBUG if settings.debug else settings.logs.level
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        if settings.debug
        else "%(asctime)s - %(levelname)s - %(message)s",
    )
    for noisy in ["httpx", "httpcore", "openai", "urllib3", "asyncio", "redis"]:
        logging.getLogger(noisy).setLevel(logging.WARNING)


class TokenCounter:
    """Acumula tokens de entrada/salida por modelo (expuesto en /api/metrics)"""

    def __init__(self, encoding: str = "cl100k_base"):
        try:
            self.encoder = tiktoken.get_encoding(encoding)
        except Exception as e:
            # Sin encoder (p.ej. sin red para descargar el BPE): estimación por caracteres
            logging.getLogger(__name__).warning(f"tiktoken no disponible: {e}")
            self.encoder = None
        self._lock = Lock()
        self.reset()

    def count(self, text: str) -> int:
        if not text:
            return 0
        if not self.encoder:
            return max(1, len(text) // 4)
        return len(self.encoder.encode(text))

    def track(self, input_text: str, output_text: str, model: str) -> int:
        input_tokens = self.count(input_text)
        output_tokens = self.count(output_text)

        with self._lock:
            self.calls += 1
            self.input_tokens += input_tokens
            self.output_tokens += output_tokens
            self.by_model[model] = self.by_model.get(model, 0) + input_tokens + output_tokens

        logging.getLogger(__name__).debug(f"Tokens ({model}): {input_tokens}→{output_tokens}")
        return input_tokens + output_tokens

    def get_summary(self) -> Dict:
        with self._lock:
            return {
                "total_tokens": self.input_tokens + self.output_tokens,
                "input_tokens": self.input_tokens,
                "output_tokens": self.output_tokens,
                "total_calls": self.calls,
                "by_model": dict(self.by_model),
            }

    def reset(self):
        with self._lock:
            self.calls = 0
            self.input_tokens = 0
            self.output_tokens = 0
            self.by_model: Dict[str, int] = {}


token_counter = TokenCounter()
