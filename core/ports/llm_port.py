# Puerto de LLM

from abc import ABC, abstractmethod
from typing import List, Dict, Any

from core.domain.session import SamplingParams


class LLMPort(ABC):
    """Puerto para acceso a LLM - Interface abstracta"""

    @abstractmethod
    async def ainvoke(
        self, messages: List[Dict[str, str]], sampling: SamplingParams
    ) -> Dict[str, Any]:
        """
        Invoca el LLM de forma asíncrona.

        Args:
            messages: Lista ordenada de {role, content}
            sampling: max_tokens, temperature y top_p

        Returns:
            dict con la clave "response" (puede faltar si no hubo texto)

        Raises:
            LLMError si la llamada falla
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """Retorna nombre del modelo en uso"""
        pass
