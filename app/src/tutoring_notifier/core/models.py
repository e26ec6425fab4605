"""ユースケース間で共有するデータモデル。"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

NotificationKind = Literal[
    "application_confirmation",
    "tutor_booking_notification",
    "student_booking_confirmation",
]


@dataclass(frozen=True, slots=True)
class RenderedEmail:
    """テンプレートから生成した件名と本文 (テキスト/HTML)。"""

    subject: str
    text: str
    html: str


@dataclass(frozen=True, slots=True)
class MailAttachment:
    """添付ファイル。ICS 招待の添付に利用する。"""

    filename: str
    content: str
    mime_type: str = "text/calendar"
    params: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class OutboundMessage:
    """送信基盤へ渡す1通分のメッセージ。"""

    kind: NotificationKind
    to_email: str
    to_name: str
    from_email: str
    from_name: str
    email: RenderedEmail
    attachments: tuple[MailAttachment, ...] = ()
    # REST 送信時にテンプレートへ渡す追加パラメータ
    template_params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SessionDetails:
    """カレンダー招待を生成するためのセッション情報。"""

    subject: str
    topic: str
    organizer_name: str
    organizer_email: str
    attendee_name: str
    attendee_email: str
    other_party_name: str
    other_party_email: str
    start_time: datetime
    duration_minutes: int = 60


@dataclass(slots=True)
class SendOutcome:
    """1通ごとの送信結果。"""

    success: bool
    response: Any = None
    error: str | None = None
    error_payload: Any = None

    def as_details(self) -> dict[str, Any]:
        if self.success:
            return {"success": True}
        body: dict[str, Any] = {"success": False, "error": self.error}
        if self.error_payload is not None:
            body["payload"] = self.error_payload
        return body
