from __future__ import annotations

import asyncio
import contextlib

import structlog
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    GCCollector,
    Gauge,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)


DEFAULT_METRICS_INTERVAL_MS = 5000
DURATION_BUCKETS = (0.1, 0.5, 1, 2, 5)

METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST

_REGISTRY = CollectorRegistry()

# Process-wide defaults: CPU, memory, fds, GC and interpreter info.
ProcessCollector(registry=_REGISTRY)
PlatformCollector(registry=_REGISTRY)
GCCollector(registry=_REGISTRY)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    labelnames=("method", "route", "status_code"),
    buckets=DURATION_BUCKETS,
    registry=_REGISTRY,
)

EVENT_LOOP_LAG = Gauge(
    "process_event_loop_lag_seconds",
    "Lag of the asyncio event loop in seconds",
    registry=_REGISTRY,
)

ASYNCIO_TASKS = Gauge(
    "process_asyncio_tasks",
    "Number of live asyncio tasks",
    registry=_REGISTRY,
)


def get_registry() -> CollectorRegistry:
    return _REGISTRY


def observe_http_request(*, method: str, route: str, status_code: int, elapsed_seconds: float) -> None:
    HTTP_REQUEST_DURATION.labels(method, route, str(status_code)).observe(elapsed_seconds)


def render_metrics(registry: CollectorRegistry | None = None) -> bytes:
    """Serialize the registry in the Prometheus text exposition format."""

    return generate_latest(registry or _REGISTRY)


def reset_metrics() -> None:
    """Drop every recorded request sample (used by tests)."""

    HTTP_REQUEST_DURATION.clear()


class RuntimeSampler:
    """Samples event-loop runtime stats on a fixed interval."""

    def __init__(self, interval_ms: int = DEFAULT_METRICS_INTERVAL_MS) -> None:
        self.interval_ms = interval_ms
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sample_once(self) -> float:
        loop = asyncio.get_running_loop()
        start = loop.time()
        await asyncio.sleep(0)
        lag = max(0.0, loop.time() - start)

        EVENT_LOOP_LAG.set(lag)
        ASYNCIO_TASKS.set(len(asyncio.all_tasks(loop)))
        return lag

    async def _run(self) -> None:
        interval = self.interval_ms / 1000.0
        while True:
            await self.sample_once()
            await asyncio.sleep(interval)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="runtime-metrics-sampler")
        structlog.get_logger("metrics").info("runtime_sampler_started", interval_ms=self.interval_ms)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
