# Entidades de conversación

import time
from typing import Literal, Dict, Any
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Role = Literal["system", "user", "assistant"]
ROLES = ("system", "user", "assistant")


def now_ms() -> int:
    """Epoch actual en milisegundos"""
    return int(time.time() * 1000)


class Message(BaseModel):
    """Mensaje de la conversación, inmutable una vez agregado"""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    timestamp: int

    def to_context(self) -> Dict[str, str]:
        """Proyección sin timestamp para construir el prompt"""
        return {"role": self.role, "content": self.content}


class SessionMetadata(BaseModel):
    """Metadatos de la sesión (camelCase en JSON)"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = ""
    created_at: int
    last_activity_at: int

    @classmethod
    def fresh(cls, now: int) -> "SessionMetadata":
        return cls(user_id="", created_at=now, last_activity_at=now)

    def touch(self, now: int):
        # lastActivityAt nunca retrocede aunque el reloj lo haga
        self.last_activity_at = max(now, self.last_activity_at, self.created_at)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class SamplingParams(BaseModel):
    """Parámetros de muestreo enviados al LLM"""

    max_tokens: int = Field(1024, gt=0)
    temperature: float = 0.7
    top_p: float = 0.9

    def to_kwargs(self) -> Dict[str, Any]:
        return self.model_dump()
