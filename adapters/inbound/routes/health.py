# Rutas de salud - /api/health, /api/metrics

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from adapters.inbound.dependencies import get_chat_service_dep
from core.services.chat_service import ChatService
from utils.logging import token_counter
from utils.metrics import get_metrics

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(service: ChatService = Depends(get_chat_service_dep)):
    """Liveness: no depende del storage ni del LLM"""
    return service.health()


@router.get("/metrics")
async def metrics_json():
    """Métricas en formato JSON, incluido el consumo de tokens"""
    return {**get_metrics().get_metrics(), "tokens": token_counter.get_summary()}


@router.get("/metrics/prometheus", response_class=PlainTextResponse)
async def metrics_prometheus():
    """Métricas en formato Prometheus"""
    tokens = token_counter.get_summary()
    lines = [
        get_metrics().get_prometheus_format(),
        f'chatrouter_tokens_input_total {tokens["input_tokens"]}',
        f'chatrouter_tokens_output_total {tokens["output_tokens"]}',
    ]
    for model, total in tokens["by_model"].items():
        lines.append(f'chatrouter_tokens_total{{model="{model}"}} {total}')
    return "\n".join(lines)
