# Puertos del núcleo - Interfaces para dependencias externas

from core.ports.storage_port import StoragePort
from core.ports.llm_port import LLMPort

__all__ = ["StoragePort", "LLMPort"]
