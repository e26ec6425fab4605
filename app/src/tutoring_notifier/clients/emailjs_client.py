"""EmailJS REST API の送信クライアント。"""

from __future__ import annotations

import json
from typing import Any

import httpx

from tutoring_notifier.clients.http_client import create_async_client
from tutoring_notifier.core.errors import ConfigurationError, TransportError
from tutoring_notifier.core.models import NotificationKind, OutboundMessage
from tutoring_notifier.core.settings import Settings


EMAILJS_SEND_ENDPOINT = "https://api.emailjs.com/api/v1.0/email/send"


class EmailJsTransport:
    """EmailJS のテンプレート送信 API でメールを送る。"""

    def __init__(
        self,
        settings: Settings,
        *,
        timeout: httpx.Timeout | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._timeout = timeout
        self._http_transport = http_transport

    def _template_id(self, kind: NotificationKind) -> str | None:
        return {
            "application_confirmation": self._settings.emailjs_application_template_id,
            "tutor_booking_notification": self._settings.emailjs_tutor_template_id,
            "student_booking_confirmation": self._settings.emailjs_student_template_id,
        }[kind]

    def build_payload(self, message: OutboundMessage) -> dict[str, Any]:
        template_id = self._template_id(message.kind)
        if not template_id:
            raise ConfigurationError([f"EMAILJS template id for {message.kind}"])

        template_params: dict[str, Any] = {
            "to_email": message.to_email,
            "to_name": message.to_name,
            "from_name": message.from_name,
            "reply_to": message.from_email,
            "subject": message.email.subject,
            "message_text": message.email.text,
            "message_html": message.email.html,
        }
        template_params.update(message.template_params)
        return {
            "service_id": self._settings.emailjs_service_id,
            "template_id": template_id,
            "user_id": self._settings.emailjs_public_key,
            "accessToken": self._settings.emailjs_private_key,
            "template_params": template_params,
        }

    async def send(self, message: OutboundMessage) -> dict[str, Any]:
        """1通送信する。失敗時は TransportError を送出する。"""

        if message.attachments:
            raise ConfigurationError(["INVITE_MODE=ics requires MAIL_TRANSPORT=smtp"])

        payload = self.build_payload(message)
        async with create_async_client(
            timeout=self._timeout, transport=self._http_transport
        ) as client:
            try:
                response = await client.post(EMAILJS_SEND_ENDPOINT, json=payload)
            except httpx.HTTPError as exc:
                raise TransportError(f"EmailJS request failed: {exc}") from exc

        if response.status_code == 200:
            return {"status_code": response.status_code, "body": response.text}

        raise TransportError(
            f"EmailJS API call failed (Status: {response.status_code})",
            status_code=response.status_code,
            payload=_error_payload(response),
        )

    async def verify(self) -> str:
        """EmailJS はキーの存在のみ確認する (送信せずに検証する API が無いため)。"""

        missing = [
            name
            for name, value in (
                ("EMAILJS_SERVICE_ID", self._settings.emailjs_service_id),
                ("EMAILJS_PUBLIC_KEY", self._settings.emailjs_public_key),
                ("EMAILJS_PRIVATE_KEY", self._settings.emailjs_private_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(missing)
        return "EmailJS configuration is ready"


def _error_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except json.JSONDecodeError:
        return response.text
