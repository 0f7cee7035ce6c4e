# Excepciones del router de chat

from typing import Optional


class ChatRouterError(Exception):
    """Excepción base del router"""

    status_code = 500

    def __init__(self, message: str, code: str, details: Optional[str] = None):
        self.message = message
        self.code = code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Cuerpo JSON expuesto al cliente: resumen estable + detalle"""
        return {"error": self.message, "details": self.details or self.message}


class ValidationError(ChatRouterError):
    """Campo requerido ausente o mal formado (error del cliente)"""

    status_code = 400

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details=f"Invalid field: {field}" if field else None,
        )


class NotFoundError(ChatRouterError):
    """Ruta o recurso desconocido"""

    status_code = 404

    def __init__(self, message: str = "Not found", path: str = None):
        super().__init__(message=message, code="NOT_FOUND", details=path)


class InternalError(ChatRouterError):
    """Fallo interno: storage, LLM o excepción inesperada"""

    status_code = 500

    def __init__(self, message: str, details: str = None, code: str = "INTERNAL_ERROR"):
        super().__init__(message=message, code=code, details=details)


class StorageError(InternalError):
    """Fallo de lectura/escritura en el storage o payload corrupto"""

    def __init__(self, message: str, key: str = None):
        self.key = key
        super().__init__(message=message, details=message, code="STORAGE_ERROR")


class LLMError(InternalError):
    """Fallo de la llamada de inferencia"""

    def __init__(self, message: str, provider: str = None):
        self.provider = provider
        super().__init__(message=message, details=message, code="LLM_ERROR")
