"""Prometheus metrics for outbound calls and extraction batches."""

from prometheus_client import Counter, Histogram

llm_latency_ms = Histogram(
    "llm_latency_ms",
    "Generation call latency in milliseconds",
    ["model", "outcome"],
    buckets=[100, 250, 500, 1000, 2000, 4000, 8000, 16000, 32000, 64000],
)

llm_errors_total = Counter(
    "llm_errors_total",
    "Total generation call errors",
    ["model", "reason"],
)

store_requests_total = Counter(
    "store_requests_total",
    "Total document store requests",
    ["op", "outcome"],
)

extraction_batches_total = Counter(
    "extraction_batches_total",
    "Total extraction batches processed",
    ["path", "outcome"],
)


class PrometheusCanvasMetrics:
    """Prometheus-based metrics for the LLM client, store and pipeline."""

    def record_llm_latency(self, model: str, outcome: str, latency_ms: float) -> None:
        """Record generation call latency."""
        llm_latency_ms.labels(model=model, outcome=outcome).observe(latency_ms)

    def inc_llm_error(self, model: str, reason: str) -> None:
        """Increment generation error counter."""
        llm_errors_total.labels(model=model, reason=reason).inc()

    def inc_store_request(self, op: str, outcome: str) -> None:
        """Increment document store request counter."""
        store_requests_total.labels(op=op, outcome=outcome).inc()

    def inc_batch(self, path: str, outcome: str) -> None:
        """Increment extraction batch counter."""
        extraction_batches_total.labels(path=path, outcome=outcome).inc()


metrics = PrometheusCanvasMetrics()
