"""
Sync trigger endpoint tests. The Celery hand-off is patched out.
"""
from unittest.mock import Mock, patch

import pytest
from fastapi.testclient import TestClient

from payitem_sync.core.config import settings
from payitem_sync.core.database import get_db
from payitem_sync.core.limiter import limiter
from payitem_sync.main import app
from payitem_sync.routers import pay_items

URL = "/api/v1/businesses/{}/pay-items/sync"


@pytest.fixture
def client(session_factory):
    def _get_db():
        with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"X-Internal-Api-Key": settings.internal_api_key}


@pytest.fixture
def delay():
    with patch.object(pay_items.sync_business, "delay", return_value=Mock(id="task-123")) as mocked:
        yield mocked


class TestTriggerSync:
    def test_queues_task(self, client, business, auth_headers, delay):
        resp = client.post(URL.format("abcd-efg-hijk"), headers=auth_headers)

        assert resp.status_code == 202
        assert resp.json() == {
            "status": "queued",
            "business_external_id": "abcd-efg-hijk",
            "task_id": "task-123",
        }
        delay.assert_called_once_with("abcd-efg-hijk")

    def test_unknown_business_is_404(self, client, business, auth_headers, delay):
        resp = client.post(URL.format("does-not-exist"), headers=auth_headers)

        assert resp.status_code == 404
        delay.assert_not_called()

    def test_missing_key_rejected(self, client, business, delay):
        resp = client.post(URL.format("abcd-efg-hijk"))

        assert resp.status_code == 401
        delay.assert_not_called()

    def test_wrong_key_rejected(self, client, business, delay):
        resp = client.post(URL.format("abcd-efg-hijk"), headers={"X-Internal-Api-Key": "nope"})

        assert resp.status_code == 401
        delay.assert_not_called()

    def test_rate_limited(self, client, business, auth_headers, delay):
        statuses = [
            client.post(URL.format("abcd-efg-hijk"), headers=auth_headers).status_code
            for _ in range(11)
        ]

        assert statuses[:10] == [202] * 10
        assert statuses[10] == 429


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_health_db(self, client):
        resp = client.get("/health/db")
        assert resp.json() == {"status": "ok", "database": "connected"}

    def test_security_headers(self, client):
        resp = client.get("/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
