# tests/test_health.py
from fastapi.testclient import TestClient


def test_health_reports_ok(client: TestClient) -> None:
    """The health endpoint responds without touching authentication."""
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_root_lists_docs(client: TestClient) -> None:
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["docs"] == "/docs"
