from __future__ import annotations

import asyncio
import dataclasses
from typing import Any, Callable, Iterable

import pytest

from tutoring_notifier.core import settings as core_settings
from tutoring_notifier.core.errors import TransportError
from tutoring_notifier.core.models import OutboundMessage
from tutoring_notifier.core.settings import InviteMode, MailTransportKind, Settings

_ENV_KEYS = (
    "APP_ENV",
    "MAIL_TRANSPORT",
    "INVITE_MODE",
    "MAIL_FROM",
    "EMAILJS_SERVICE_ID",
    "EMAILJS_PUBLIC_KEY",
    "EMAILJS_PRIVATE_KEY",
    "SMTP_HOST",
    "SMTP_USER",
    "SMTP_PASSWORD",
    "INVITE_ORGANIZER_EMAIL",
    "CORS_ORIGINS",
    "SEND_TIMEOUT_SECONDS",
    "DISPLAY_TIMEZONE",
    "SSM_PATH_PREFIX",
)


class FakeTransport:
    """送信内容を記録するテスト用の送信基盤。"""

    def __init__(
        self,
        *,
        fail_for: Iterable[str] = (),
        hang_for: Iterable[str] = (),
        verify_error: Exception | None = None,
    ) -> None:
        self.sent: list[OutboundMessage] = []
        self.fail_for = set(fail_for)
        self.hang_for = set(hang_for)
        self.verify_error = verify_error

    async def send(self, message: OutboundMessage) -> dict[str, Any]:
        self.sent.append(message)
        if message.to_email in self.hang_for:
            await asyncio.sleep(3600)
        if message.to_email in self.fail_for:
            raise TransportError(
                "Mailbox unavailable",
                status_code=550,
                payload={"reason": "mailbox unavailable"},
            )
        return {"id": f"fake-{len(self.sent)}"}

    async def verify(self) -> str:
        if self.verify_error is not None:
            raise self.verify_error
        return "fake transport is ready"

    def sent_to(self, address: str) -> OutboundMessage:
        return next(message for message in self.sent if message.to_email == address)


@pytest.fixture(autouse=True)
def basic_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """テストごとに送信関連の環境変数と設定キャッシュを初期化する。"""

    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    core_settings.load_settings.cache_clear()


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    base = Settings(
        app_env="local",
        region="eu-west-1",
        mail_transport=MailTransportKind.SMTP,
        invite_mode=InviteMode.LINK,
        mail_from="booktutor@example.edu",
        mail_from_name="Peer Tutoring Program",
        smtp_host="smtp.example.edu",
        smtp_user="booktutor@example.edu",
        smtp_password="app-password",
        invite_organizer_email="tutoring@example.edu",
        display_timezone="UTC",
        send_timeout_seconds=5.0,
    )

    def _make(**overrides: Any) -> Settings:
        return dataclasses.replace(base, **overrides)

    return _make


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def make_transport() -> type[FakeTransport]:
    return FakeTransport
