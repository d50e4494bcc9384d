"""
Prometheus metrics for the Kamioun backend

All metrics live in a dedicated registry so the exposition endpoint only
publishes what this service defines (plus process/platform collectors).
"""
import time

from fastapi import Request
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    GCCollector,
    generate_latest,
    CONTENT_TYPE_LATEST,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from kamioun.core.config import settings


registry = CollectorRegistry()
ProcessCollector(registry=registry)
PlatformCollector(registry=registry)
GCCollector(registry=registry)


http_request_duration_ms = Histogram(
    "http_request_duration_ms",
    "Duration of HTTP requests in ms",
    ["method", "route", "code"],
    buckets=[0.1, 5, 15, 50, 100, 500],
    registry=registry,
)

http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "route", "code"],
    registry=registry,
)

user_logins_total = Counter(
    "user_logins_total",
    "Total number of user logins (success and fail)",
    ["result"],
    registry=registry,
)

order_processing_duration = Histogram(
    "order_processing_duration_seconds",
    "Duration of order processing in seconds",
    ["route"],
    buckets=[0.1, 1, 5, 15, 60, 300],  # 100ms, 1s, 5s, 15s, 1min, 5min
    registry=registry,
)

product_stock_gauge = Gauge(
    "product_stock_quantity",
    "Current stock per product and source",
    ["product_id", "source_id"],
    registry=registry,
)

stock_operation_total = Counter(
    "stock_operation_total",
    "Total number of stock operations",
    ["operation", "result", "route", "product_id", "source_id"],
    registry=registry,
)

stock_update_duration = Histogram(
    "stock_update_duration_seconds",
    "Duration of stock updates in seconds",
    ["route", "product_id", "source_id", "result"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1, 2, 5],
    registry=registry,
)


def render_metrics() -> Response:
    """Prometheus text exposition of the registry"""
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Records http_requests_total and http_request_duration_ms for every
    request, labelled with the matched route template (not the raw path).
    """

    async def dispatch(self, request: Request, call_next):
        if request.url.path == settings.PROMETHEUS_ENDPOINT or request.method == "OPTIONS":
            return await call_next(request)

        start = time.perf_counter()
        code = 500
        try:
            response = await call_next(request)
            code = response.status_code
            return response
        finally:
            route = request.scope.get("route")
            route_label = getattr(route, "path", None) or "unmatched"
            labels = {"method": request.method, "route": route_label, "code": str(code)}
            http_requests_total.labels(**labels).inc()
            http_request_duration_ms.labels(**labels).observe((time.perf_counter() - start) * 1000)
