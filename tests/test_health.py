import pytest

from app.core.config import settings

BASE_URL = "http://test/api"


@pytest.fixture(autouse=True)
def no_redis_check(monkeypatch):
    monkeypatch.setattr(settings, "redis_health_check", False)


async def test_health_live(client):
    resp = await client.get(f"{BASE_URL}/health/live")
    assert resp.status_code == 200
    assert resp.json()["status"] == "alive"


async def test_health_ready(client):
    resp = await client.get(f"{BASE_URL}/health/ready")
    assert resp.status_code == 200
    assert resp.json()["checks"]["database"] == "ok"


async def test_health_reports_database(client):
    resp = await client.get(f"{BASE_URL}/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["services"]["database"]["status"] == "ok"
    assert "redis" not in body["services"]


async def test_metrics_exposes_request_counters(client):
    await client.get(f"{BASE_URL}/health/live")
    resp = await client.get(f"{BASE_URL}/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
