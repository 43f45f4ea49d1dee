"""
Tests for the health, version and metrics endpoints
"""

from unittest.mock import patch

from fastapi.testclient import TestClient

from token_orchestrator.main import create_app
from token_orchestrator.services.prometheus_metrics import PrometheusMetrics, prometheus_metrics


def test_healthz(client):
    client.post("/keys")
    response = client.get("/healthz")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["keys"]["total"] == 1
    assert data["reaper"] == "stopped"


def test_reaper_runs_with_app_lifespan(store):
    app = create_app(store=store, reaper_enabled=True, reaper_interval=60)
    with TestClient(app) as client:
        assert client.get("/healthz").json()["reaper"] == "running"
    assert not app.state.reaper.running


def test_version(client):
    response = client.get("/version")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["name"] == "token-orchestrator"
    assert "version" in data


def test_prometheus_metrics_endpoint(client):
    key_id = client.post("/keys").json()["keyId"]
    client.put(f"/keys/{key_id}/alive")
    client.get("/keys/missing")

    response = client.get("/metrics/prometheus")
    assert response.status_code == 200
    body = response.text
    assert "token_orchestrator_keys_issued_total" in body
    assert "token_orchestrator_keepalives_total" in body
    assert 'token_orchestrator_key_rejections_total{operation="fetch",reason="not_found"}' in body
    assert "token_orchestrator_reaper_sweep_seconds" in body


def test_prometheus_metrics_unavailable(client):
    with patch.object(prometheus_metrics, "get_metrics", side_effect=RuntimeError("down")):
        response = client.get("/metrics/prometheus")
    assert response.status_code == 200
    assert response.text == "# Metrics temporarily unavailable\n"


class TestPrometheusMetrics:
    """Test the PrometheusMetrics class."""

    def test_increment_requests(self):
        metrics = PrometheusMetrics()
        metrics.increment_requests(201, "/keys")
        metrics.increment_requests(404, "/keys/abc/info")
        metrics.increment_requests(403, "/keys/abc/alive")
        metrics.increment_requests(500, "/healthz")
        metrics.increment_requests(100)

    def test_lifecycle_counters(self):
        metrics = PrometheusMetrics()
        metrics.increment_keys_issued()
        metrics.increment_keys_deleted()
        metrics.increment_keys_reaped(4)
        metrics.increment_keepalives()
        metrics.increment_block_change(True)
        metrics.increment_block_change(False)
        metrics.increment_rejection("keep_alive", "forbidden")
        metrics.set_keys_active(7)
        metrics.observe_reaper_sweep(0.002)
        assert metrics.get_content_type().startswith("text/plain")
