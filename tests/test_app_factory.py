"""Tests for app factory and role-based routing."""

from fastapi.testclient import TestClient

from lodgekeeper.api.factory import create_app
from lodgekeeper.observability.correlation import CORRELATION_ID_HEADER


class TestPublicRole:
    """Tests for APP_ROLE=public."""

    def test_health_available(self):
        client = TestClient(create_app(role="public"))
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_tasks_not_mounted(self):
        client = TestClient(create_app(role="public"))
        assert client.get("/tasks/health").status_code == 404
        assert client.post("/tasks/holds/expire", json={}).status_code == 404


class TestWorkerRole:
    """Tests for APP_ROLE=worker."""

    def test_health_available(self):
        client = TestClient(create_app(role="worker"))
        assert client.get("/health").status_code == 200

    def test_tasks_mounted(self):
        client = TestClient(create_app(role="worker"))
        response = client.get("/tasks/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "subsystem": "tasks"}


class TestRoleFromEnv:
    def test_env_selects_worker(self, monkeypatch):
        monkeypatch.setenv("APP_ROLE", "worker")
        client = TestClient(create_app())
        assert client.get("/tasks/health").status_code == 200

    def test_default_is_public(self, monkeypatch):
        monkeypatch.delenv("APP_ROLE", raising=False)
        client = TestClient(create_app())
        assert client.get("/tasks/health").status_code == 404


class TestCorrelationId:
    def test_generated_when_absent(self):
        client = TestClient(create_app(role="public"))
        response = client.get("/health")
        assert response.headers[CORRELATION_ID_HEADER]

    def test_echoed_when_present(self):
        client = TestClient(create_app(role="public"))
        response = client.get("/health", headers={CORRELATION_ID_HEADER: "abc-123"})
        assert response.headers[CORRELATION_ID_HEADER] == "abc-123"

    def test_malformed_header_replaced(self):
        client = TestClient(create_app(role="public"))
        response = client.get("/health", headers={CORRELATION_ID_HEADER: "bad id"})
        assert response.headers[CORRELATION_ID_HEADER] != "bad id"
