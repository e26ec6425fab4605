"""リクエストIDミドルウェアのテスト。"""

from __future__ import annotations

from fastapi.testclient import TestClient

from tutoring_notifier.app import create_app


def test_request_id_is_echoed(make_settings, fake_transport) -> None:
    client = TestClient(create_app(settings=make_settings(), transport=fake_transport))

    response = client.get("/health", headers={"X-Request-Id": "req-123"})

    assert response.headers["X-Request-Id"] == "req-123"
    assert int(response.headers["X-Response-Time-Ms"]) >= 0


def test_request_id_is_generated(make_settings, fake_transport) -> None:
    client = TestClient(create_app(settings=make_settings(), transport=fake_transport))

    response = client.get("/health")

    assert response.headers["X-Request-Id"]
