"""送信基盤の共通インターフェースと生成処理。"""

from __future__ import annotations

from typing import Any, Protocol

from tutoring_notifier.clients.emailjs_client import EmailJsTransport
from tutoring_notifier.clients.smtp_client import SmtpTransport
from tutoring_notifier.core.models import OutboundMessage
from tutoring_notifier.core.settings import MailTransportKind, Settings


class MailTransport(Protocol):
    async def send(self, message: OutboundMessage) -> Any:
        """1通送信する。失敗時は TransportError を送出する。"""

    async def verify(self) -> str:
        """送信せずに設定・接続を検証し、結果メッセージを返す。"""


def build_transport(settings: Settings) -> MailTransport:
    """起動時に設定された送信経路のクライアントを返す。"""

    if settings.mail_transport is MailTransportKind.REST:
        return EmailJsTransport(settings)
    return SmtpTransport(settings)
