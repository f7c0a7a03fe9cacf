"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes:
    - llm_latency_ms{model, outcome}
    - llm_errors_total{model, reason}
    - store_requests_total{op, outcome}
    - extraction_batches_total{path, outcome}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
