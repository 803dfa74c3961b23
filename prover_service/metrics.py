"""
Prometheus metrics for the prover service.

Proof requests dominate latency (seconds to minutes) while everything else is
sub-millisecond, so HTTP histograms use wide buckets and the prover gets its
own series:

    prover_http_requests_total{method,route,status}
    prover_http_request_seconds{method,route}
    prove_requests_total{bb_version,outcome}    outcome: ok|rejected|failed|timeout
    prove_duration_seconds{bb_version}
    prove_inflight
    witness_encodings_total{outcome}            outcome: ok|rejected

Each app owns a private CollectorRegistry, so apps built side by side (tests)
never collide on metric names.
"""

from __future__ import annotations

import time
from typing import Optional

from fastapi import FastAPI
from prometheus_client import (CONTENT_TYPE_LATEST, CollectorRegistry, Counter,
                               Gauge, Histogram, generate_latest)
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

HTTP_BUCKETS = (0.005, 0.05, 0.25, 1.0, 5.0, 30.0, 120.0, 600.0)
PROVE_BUCKETS = (1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0, 1200.0)


class Metrics:
    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry or CollectorRegistry()
        r = self.registry

        self.http_requests = Counter(
            "prover_http_requests_total", "HTTP requests served", ["method", "route", "status"], registry=r
        )
        self.http_seconds = Histogram(
            "prover_http_request_seconds", "HTTP request latency", ["method", "route"], buckets=HTTP_BUCKETS, registry=r
        )

        self.prove_requests_total = Counter(
            "prove_requests_total", "Proof requests by prover version and outcome", ["bb_version", "outcome"], registry=r
        )
        self.prove_duration_seconds = Histogram(
            "prove_duration_seconds", "Time spent inside the prover binary", ["bb_version"], buckets=PROVE_BUCKETS, registry=r
        )
        self.prove_inflight = Gauge("prove_inflight", "Prover processes currently running", registry=r)
        self.witness_encodings_total = Counter(
            "witness_encodings_total", "Witness map encodings by outcome", ["outcome"], registry=r
        )

    def observe_http(self, method: str, route: str, status: int, seconds: float) -> None:
        self.http_requests.labels(method, route, str(status)).inc()
        self.http_seconds.labels(method, route).observe(seconds)

    def exposition(self) -> bytes:
        return generate_latest(self.registry)


def _route_label(scope: Scope) -> str:
    # Templated path once routing matched; unmatched paths collapse into one label
    route = scope.get("route")
    path = getattr(route, "path", None)
    return path if isinstance(path, str) and path else "<unmatched>"


class HttpMetricsMiddleware:
    """ASGI middleware timing every HTTP request."""

    def __init__(self, app: ASGIApp, metrics: Metrics) -> None:
        self.app = app
        self.metrics = metrics

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        status = 500
        started = time.perf_counter()

        async def capture_status(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, capture_status)
        finally:
            self.metrics.observe_http(
                scope.get("method", "GET"), _route_label(scope), status, time.perf_counter() - started
            )


def setup_metrics(app: FastAPI, *, path: str = "/metrics") -> Metrics:
    """Attach metrics to ``app``: middleware, ``app.state.metrics`` and the scrape route."""
    metrics = Metrics()
    app.state.metrics = metrics
    app.add_middleware(HttpMetricsMiddleware, metrics=metrics)

    def scrape(_: Request) -> Response:
        return Response(metrics.exposition(), media_type=CONTENT_TYPE_LATEST)

    app.add_route(path, scrape, methods=["GET"], include_in_schema=False)
    return metrics


__all__ = ["Metrics", "HttpMetricsMiddleware", "setup_metrics"]
