# API Adapter - FastAPI entry point

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import settings
from adapters.inbound.dependencies import get_deps
from adapters.inbound.routes import chat_router, history_router, health_router
from core.domain.errors import ChatRouterError, InternalError, NotFoundError
from utils.logging import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

CORS_METHODS = "GET, POST, OPTIONS"
CORS_HEADERS = "Content-Type"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Inicializa componentes al startup"""
    logger.info(f"Iniciando {settings.app_name}...")
    deps = get_deps()
    deps.initialize_all()
    yield
    logger.info("Cerrando API...")
    await deps.shutdown()


app = FastAPI(
    title="Chat Router API",
    description="Chat con LLM e historial acotado por conversación",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def allowed_origin(request: Request) -> str:
    """Valor de Access-Control-Allow-Origin según la lista permitida"""
    origins = settings.cors.origins
    if "*" in origins:
        return "*"
    origin = request.headers.get("origin")
    # Un origen fuera de la lista nunca se refleja
    return origin if origin in origins else origins[0]


# Preflight: cualquier OPTIONS responde 204 con cabeceras CORS
@app.middleware("http")
async def cors_headers(request: Request, call_next):
    if request.method == "OPTIONS":
        response = Response(status_code=204)
    else:
        response = await call_next(request)
    # La lista se lee en cada request y prevalece sobre CORSMiddleware
    origin = allowed_origin(request)
    response.headers["Access-Control-Allow-Origin"] = origin
    if origin != "*":
        response.headers["Vary"] = "Origin"
    response.headers.setdefault("Access-Control-Allow-Methods", CORS_METHODS)
    response.headers.setdefault("Access-Control-Allow-Headers", CORS_HEADERS)
    return response


# Traducción de errores a {error, details}

@app.exception_handler(ChatRouterError)
async def chat_router_error_handler(request: Request, exc: ChatRouterError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.code} - {exc.details}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg', '')}"
        for e in exc.errors()
    )
    return JSONResponse(
        status_code=400, content={"error": "Invalid request", "details": details}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Ruta o método desconocido -> 404 uniforme
    if exc.status_code in (404, 405):
        error = NotFoundError(path=request.url.path)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "details": str(exc.detail)},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Error no controlado en {request.url.path}")
    error = InternalError("Internal error", details=str(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


app.include_router(chat_router, prefix="/api")
app.include_router(history_router, prefix="/api")
app.include_router(health_router, prefix="/api")
