from prometheus_client.parser import text_string_to_metric_families

from devops_demo.observability.metrics import DEFAULT_METRICS_INTERVAL_MS, RuntimeSampler, get_registry


def _samples(text: str, name: str) -> list:
    return [
        sample
        for family in text_string_to_metric_families(text)
        for sample in family.samples
        if sample.name == name
    ]


async def test_metrics_endpoint_uses_exposition_content_type(api_client) -> None:
    resp = await api_client.get("/metrics")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert "version=" in resp.headers["content-type"]


async def test_metrics_include_prior_request_duration(api_client) -> None:
    assert (await api_client.get("/")).status_code == 200

    resp = await api_client.get("/metrics")
    counts = _samples(resp.text, "http_request_duration_seconds_count")
    labels = [s.labels for s in counts]
    assert {"method": "GET", "route": "/", "status_code": "200"} in labels


async def test_histogram_uses_configured_buckets(api_client) -> None:
    await api_client.get("/ready")

    resp = await api_client.get("/metrics")
    buckets = {
        s.labels["le"]
        for s in _samples(resp.text, "http_request_duration_seconds_bucket")
        if s.labels["route"] == "/ready"
    }
    assert buckets == {"0.1", "0.5", "1.0", "2.0", "5.0", "+Inf"}


async def test_unmatched_requests_are_labelled_with_raw_path(api_client) -> None:
    await api_client.get("/does/not/exist")

    resp = await api_client.get("/metrics")
    labels = [s.labels for s in _samples(resp.text, "http_request_duration_seconds_count")]
    assert {"method": "GET", "route": "/does/not/exist", "status_code": "404"} in labels


async def test_metrics_include_default_process_metrics(api_client) -> None:
    resp = await api_client.get("/metrics")
    names = {family.name for family in text_string_to_metric_families(resp.text)}
    assert "python_info" in names
    assert "process_event_loop_lag_seconds" in names
    assert "process_asyncio_tasks" in names


async def test_metrics_render_failure_returns_raw_error(api_client, monkeypatch) -> None:
    from devops_demo.api import metrics as metrics_api

    def _boom() -> bytes:
        raise RuntimeError("collector exploded")

    monkeypatch.setattr(metrics_api, "render_metrics", _boom)

    resp = await api_client.get("/metrics")
    assert resp.status_code == 500
    assert resp.text == "collector exploded"


async def test_runtime_sampler_updates_gauges() -> None:
    sampler = RuntimeSampler()
    assert sampler.interval_ms == DEFAULT_METRICS_INTERVAL_MS == 5000

    lag = await sampler.sample_once()
    assert lag >= 0
    assert get_registry().get_sample_value("process_asyncio_tasks") >= 1
    assert get_registry().get_sample_value("process_event_loop_lag_seconds") == lag


async def test_runtime_sampler_start_and_stop() -> None:
    sampler = RuntimeSampler(interval_ms=10)
    sampler.start()
    assert sampler.running

    await sampler.stop()
    assert not sampler.running
