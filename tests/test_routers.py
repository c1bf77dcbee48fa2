import httpx
import pytest

from schedule_sync import routers
from schedule_sync.config import settings
from schedule_sync.main import app


GUIDE = """<?xml version="1.0" encoding="UTF-8"?>
<tv>
  <channel id="1"><display-name>BBC One</display-name></channel>
  <programme start="20240301180000 +0000" stop="20240301183000 +0000" channel="1">
    <title>News</title>
  </programme>
</tv>
"""


@pytest.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "sync_running": False}


@pytest.mark.asyncio
async def test_sync_endpoint_runs_reconciliation(client, schedule_db, tmp_path, monkeypatch):
    await schedule_db.add_channels("BBC One")
    path = tmp_path / "guide.xml"
    path.write_text(GUIDE, encoding="utf-8")
    monkeypatch.setattr(settings, "guide_url", str(path))

    response = await client.post("/sync")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["channels_resolved"] == 1
    assert body["feed_programmes"] == 1


@pytest.mark.asyncio
async def test_sync_endpoint_ignores_source_in_request_body(client, monkeypatch):
    calls = []

    async def fake_run_sync(source=None):
        calls.append(source)
        return {"status": "error", "error": "GUIDE_URL not configured"}

    monkeypatch.setattr(routers, "run_sync", fake_run_sync)

    response = await client.post("/sync", json={"source": "/etc/passwd"})

    assert response.status_code == 500
    assert calls == [None]


@pytest.mark.asyncio
async def test_sync_endpoint_reports_failure(client, schedule_db, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "guide_url", str(tmp_path / "missing.xml"))

    response = await client.post("/sync")

    assert response.status_code == 500
    assert "missing.xml" in response.json()["detail"]


@pytest.mark.asyncio
async def test_sync_endpoint_conflict_when_running(client, monkeypatch):
    async def skipped(source=None):
        return {"status": "skipped", "message": "Schedule sync already in progress"}

    monkeypatch.setattr(routers, "run_sync", skipped)

    response = await client.post("/sync")

    assert response.status_code == 409
