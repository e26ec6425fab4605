"""送信設定チェックエンドポイントのテスト。"""

from __future__ import annotations

from fastapi.testclient import TestClient

from tutoring_notifier.app import create_app
from tutoring_notifier.core.errors import TransportError


def test_valid_configuration_returns_200(make_settings, fake_transport) -> None:
    client = TestClient(create_app(settings=make_settings(), transport=fake_transport))

    res = client.get("/api/test-email")

    assert res.status_code == 200
    assert res.json() == {
        "success": True,
        "message": "fake transport is ready",
        "details": {"transport": "smtp", "invite_mode": "link"},
    }


def test_missing_configuration_lists_keys(make_settings, fake_transport) -> None:
    settings = make_settings(smtp_host=None, mail_from=None)
    client = TestClient(create_app(settings=settings, transport=fake_transport))

    res = client.get("/api/test-email")

    assert res.status_code == 500
    body = res.json()
    assert body["success"] is False
    assert body["details"]["missing_keys"] == ["MAIL_FROM", "SMTP_HOST"]


def test_transport_verification_failure(make_settings, make_transport) -> None:
    transport = make_transport(verify_error=TransportError("SMTP authentication failed"))
    client = TestClient(create_app(settings=make_settings(), transport=transport))

    res = client.get("/api/test-email")

    assert res.status_code == 500
    assert res.json()["details"] == {
        "code": "TRANSPORT_ERROR",
        "message": "SMTP authentication failed",
    }
