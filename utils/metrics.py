# Métricas y Observabilidad para el router de chat

import time
import logging
from typing import Dict
from dataclasses import dataclass, field
from collections import defaultdict
from threading import Lock

logger = logging.getLogger(__name__)


@dataclass
class MetricCounter:
    """Contador simple para métricas"""

    value: int = 0
    _lock: Lock = field(default_factory=Lock)

    def inc(self, amount: int = 1):
        with self._lock:
            self.value += amount

    def get(self) -> int:
        return self.value


@dataclass
class MetricHistogram:
    """Histograma para latencias"""

    values: list = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock)

    def observe(self, value: float):
        with self._lock:
            self.values.append(value)
            # Mantener solo últimas 1000 observaciones
            if len(self.values) > 1000:
                self.values = self.values[-1000:]

    def get_stats(self) -> Dict:
        if not self.values:
            return {"count": 0, "avg": 0, "min": 0, "max": 0, "p50": 0, "p95": 0}

        sorted_vals = sorted(self.values)
        count = len(sorted_vals)

        return {
            "count": count,
            "avg": sum(sorted_vals) / count,
            "min": sorted_vals[0],
            "max": sorted_vals[-1],
            "p50": sorted_vals[int(count * 0.5)],
            "p95": sorted_vals[int(count * 0.95)] if count > 20 else sorted_vals[-1],
        }


class MetricsCollector:
    """
    Colector de métricas del router.
    Compatible con formato Prometheus.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self.reset()
        self._initialized = True

    def reset(self):
        """Reinicia todos los valores (útil en tests)"""
        # Contadores
        self.requests_total = defaultdict(MetricCounter)  # por endpoint
        self.errors_total = defaultdict(MetricCounter)  # por endpoint
        self.chats_total = MetricCounter()
        self.llm_calls = defaultdict(MetricCounter)  # por modelo

        # Histogramas de latencia
        self.request_duration = defaultdict(MetricHistogram)  # por endpoint
        self.llm_duration = MetricHistogram()

        # Gauges
        self.active_conversations = 0

    def record_request(self, endpoint: str, duration_ms: float, success: bool):
        """Registra una request"""
        self.requests_total[endpoint].inc()
        self.request_duration[endpoint].observe(duration_ms)
        if not success:
            self.errors_total[endpoint].inc()

    def record_chat(self):
        """Registra un intercambio completo usuario/asistente"""
        self.chats_total.inc()

    def record_llm_call(self, model: str, duration_ms: float):
        """Registra llamada a LLM"""
        self.llm_calls[model].inc()
        self.llm_duration.observe(duration_ms)

    def set_active_conversations(self, count: int):
        """Actualiza número de conversaciones en memoria"""
        self.active_conversations = count

    def get_metrics(self) -> Dict:
        """Retorna todas las métricas en formato dict"""
        return {
            "counters": {
                "requests_total": {k: v.get() for k, v in self.requests_total.items()},
                "errors_total": {k: v.get() for k, v in self.errors_total.items()},
                "chats_total": self.chats_total.get(),
                "llm_calls": {k: v.get() for k, v in self.llm_calls.items()},
            },
            "histograms": {
                "request_duration_ms": {
                    k: v.get_stats() for k, v in self.request_duration.items()
                },
                "llm_duration_ms": self.llm_duration.get_stats(),
            },
            "gauges": {
                "active_conversations": self.active_conversations,
            },
        }

    def get_prometheus_format(self) -> str:
        """Retorna métricas en formato Prometheus"""
        lines = []
        metrics = self.get_metrics()

        for endpoint, count in metrics["counters"]["requests_total"].items():
            lines.append(f'chatrouter_requests_total{{endpoint="{endpoint}"}} {count}')

        for endpoint, count in metrics["counters"]["errors_total"].items():
            lines.append(f'chatrouter_errors_total{{endpoint="{endpoint}"}} {count}')

        lines.append(f'chatrouter_chats_total {metrics["counters"]["chats_total"]}')

        for model, count in metrics["counters"]["llm_calls"].items():
            lines.append(f'chatrouter_llm_calls_total{{model="{model}"}} {count}')

        lines.append(
            f'chatrouter_active_conversations {metrics["gauges"]["active_conversations"]}'
        )

        # Histogramas (solo avg y p95)
        llm_stats = metrics["histograms"]["llm_duration_ms"]
        lines.append(f'chatrouter_llm_duration_avg_ms {llm_stats["avg"]:.2f}')
        lines.append(f'chatrouter_llm_duration_p95_ms {llm_stats["p95"]:.2f}')

        return "\n".join(lines)


def get_metrics() -> MetricsCollector:
    """Obtiene la instancia singleton de métricas"""
    return MetricsCollector()


class RequestTimer:
    """Context manager que registra duración y éxito de un endpoint"""

    def __init__(self, endpoint: str):
        self.endpoint = endpoint
        self.start = 0.0

    def __enter__(self) -> "RequestTimer":
        self.start = time.time()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        duration_ms = (time.time() - self.start) * 1000
        get_metrics().record_request(self.endpoint, duration_ms, success=exc_type is None)
        logger.debug(f"{self.endpoint} ejecutado en {duration_ms:.2f}ms")
        return False
