"""SMTP リレー経由の送信クライアント。"""

from __future__ import annotations

import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr, formatdate, make_msgid
from typing import Any

from tutoring_notifier.core.errors import TransportError
from tutoring_notifier.core.models import OutboundMessage
from tutoring_notifier.core.settings import Settings


class SmtpTransport:
    """smtplib でテキスト/HTML 混在メールを送信する。"""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def build_message(self, message: OutboundMessage) -> EmailMessage:
        mime = EmailMessage()
        mime["From"] = formataddr((message.from_name, message.from_email))
        mime["To"] = formataddr((message.to_name, message.to_email))
        mime["Subject"] = message.email.subject
        mime["Date"] = formatdate(localtime=False)
        mime["Message-ID"] = make_msgid(domain=message.from_email.rpartition("@")[2] or None)

        mime.set_content(message.email.text)
        mime.add_alternative(message.email.html, subtype="html")
        for attachment in message.attachments:
            _, _, subtype = attachment.mime_type.partition("/")
            mime.add_attachment(
                attachment.content,
                subtype=subtype or "plain",
                filename=attachment.filename,
                params=dict(attachment.params),
            )
        return mime

    def _connect(self) -> smtplib.SMTP:
        settings = self._settings
        host = settings.smtp_host or ""
        timeout = settings.send_timeout_seconds
        context = ssl.create_default_context()
        if settings.smtp_use_ssl:
            server: smtplib.SMTP = smtplib.SMTP_SSL(
                host, settings.smtp_port, context=context, timeout=timeout
            )
        else:
            server = smtplib.SMTP(host, settings.smtp_port, timeout=timeout)
        # 接続後の失敗ではソケットを必ず閉じる
        try:
            if not settings.smtp_use_ssl:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls(context=context)
                    server.ehlo()
            server.login(settings.smtp_user or "", settings.smtp_password or "")
        except BaseException:
            server.close()
            raise
        return server

    def _send_sync(self, message: OutboundMessage) -> dict[str, Any]:
        try:
            mime = self.build_message(message)
        except ValueError as exc:
            raise TransportError(f"Invalid message headers: {exc}") from exc
        try:
            with self._connect() as server:
                refused = server.send_message(mime)
        except smtplib.SMTPAuthenticationError as exc:
            raise TransportError(
                "SMTP authentication failed", status_code=exc.smtp_code, payload=_smtp_detail(exc)
            ) from exc
        except smtplib.SMTPRecipientsRefused as exc:
            raise TransportError(
                f"SMTP server refused recipient {message.to_email}",
                payload={addr: list(map(_decode, info)) for addr, info in exc.recipients.items()},
            ) from exc
        except (smtplib.SMTPException, OSError) as exc:
            raise TransportError(f"SMTP delivery failed: {exc}") from exc

        if refused:
            raise TransportError(
                f"SMTP server refused recipient {message.to_email}",
                payload={addr: list(map(_decode, info)) for addr, info in refused.items()},
            )
        return {"message_id": mime["Message-ID"]}

    def _verify_sync(self) -> None:
        try:
            with self._connect() as server:
                server.noop()
        except smtplib.SMTPAuthenticationError as exc:
            raise TransportError(
                "SMTP authentication failed", status_code=exc.smtp_code, payload=_smtp_detail(exc)
            ) from exc
        except (smtplib.SMTPException, OSError) as exc:
            raise TransportError(f"SMTP connection failed: {exc}") from exc

    async def send(self, message: OutboundMessage) -> dict[str, Any]:
        return await asyncio.to_thread(self._send_sync, message)

    async def verify(self) -> str:
        """接続と認証のみ行い、メールは送信しない。"""

        await asyncio.to_thread(self._verify_sync)
        return "SMTP server is ready to take our messages"


def _decode(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _smtp_detail(exc: smtplib.SMTPResponseException) -> dict[str, Any]:
    return {"code": exc.smtp_code, "message": _decode(exc.smtp_error)}
