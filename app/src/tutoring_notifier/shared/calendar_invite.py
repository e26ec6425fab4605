"""カレンダー招待 (iCalendar / カレンダーリンク) の生成。

ICS は文字列の直接埋め込みではなく、プロパティ単位で値をエスケープしてから
シリアライズする。行末は CRLF、75 オクテットを超える行は折り返す (RFC 5545)。
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterator
from urllib.parse import quote, urlencode

from tutoring_notifier.core.errors import FormatError
from tutoring_notifier.core.models import SessionDetails
from tutoring_notifier.shared.datetime_format import format_ics_datetime

PRODID = "-//Ashesi University//Peer Tutoring//EN"
GOOGLE_CALENDAR_RENDER_URL = "https://calendar.google.com/calendar/render"
DEFAULT_DURATION_MINUTES = 60
REMINDER_TRIGGERS = ("-PT15M", "-PT1H")
VENUE_PLACEHOLDER = "TBD - Contact tutor for venue details"

_MAX_LINE_OCTETS = 75


@dataclass(slots=True)
class IcsProperty:
    name: str
    value: str
    params: dict[str, str] = field(default_factory=dict)

    def to_line(self) -> str:
        rendered_params = "".join(
            f";{key}={_param_value(value)}" for key, value in self.params.items()
        )
        return f"{self.name}{rendered_params}:{self.value}"


@dataclass(slots=True)
class IcsComponent:
    """VCALENDAR / VEVENT / VALARM などのコンポーネント。"""

    name: str
    properties: list[IcsProperty] = field(default_factory=list)
    components: list["IcsComponent"] = field(default_factory=list)

    def add_text(self, name: str, value: str, **params: str) -> "IcsComponent":
        """TEXT 型の値をエスケープして追加する。"""

        self.properties.append(IcsProperty(name, escape_text(value), dict(params)))
        return self

    def add_raw(self, name: str, value: str, **params: str) -> "IcsComponent":
        """日時や URI などエスケープ対象外の値を追加する。"""

        if any(ch in value for ch in "\r\n"):
            raise FormatError(f"{name} must not contain line breaks")
        self.properties.append(IcsProperty(name, value, dict(params)))
        return self

    def add_component(self, component: "IcsComponent") -> "IcsComponent":
        self.components.append(component)
        return self

    def content_lines(self) -> Iterator[str]:
        yield f"BEGIN:{self.name}"
        for prop in self.properties:
            yield prop.to_line()
        for component in self.components:
            yield from component.content_lines()
        yield f"END:{self.name}"

    def serialize(self) -> str:
        return "".join(f"{fold_line(line)}\r\n" for line in self.content_lines())


def escape_text(value: str) -> str:
    """TEXT 値のエスケープ (バックスラッシュ, セミコロン, カンマ, 改行)。"""

    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\r", "\\n")
        .replace("\n", "\\n")
    )


def fold_line(line: str) -> str:
    """75 オクテットごとに CRLF + 空白で折り返す。マルチバイト文字は分割しない。"""

    if len(line.encode("utf-8")) <= _MAX_LINE_OCTETS:
        return line

    chunks: list[str] = []
    current = ""
    current_octets = 0
    limit = _MAX_LINE_OCTETS
    for char in line:
        size = len(char.encode("utf-8"))
        if current_octets + size > limit:
            chunks.append(current)
            current = ""
            current_octets = 0
            # 継続行は先頭の空白 1 オクテット分短くする
            limit = _MAX_LINE_OCTETS - 1
        current += char
        current_octets += size
    chunks.append(current)
    return "\r\n ".join(chunks)


def _param_value(value: str) -> str:
    cleaned = value.replace('"', "").replace("\r", " ").replace("\n", " ")
    if any(ch in cleaned for ch in ":;,"):
        return f'"{cleaned}"'
    return cleaned


def new_uid(domain: str) -> str:
    """招待ごとに一意な UID を発行する。"""

    return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}@{domain}"


def session_window(start_time: datetime, duration_minutes: int) -> tuple[datetime, datetime]:
    if duration_minutes <= 0:
        raise FormatError(f"Session duration must be positive: {duration_minutes}")
    start = start_time.astimezone(timezone.utc)
    return start, start + timedelta(minutes=duration_minutes)


def build_ics_invite(
    details: SessionDetails,
    *,
    uid_domain: str,
    now: datetime | None = None,
) -> str:
    """受信者を第一参加者とした個別の ICS 招待を生成する。"""

    start, end = session_window(details.start_time, details.duration_minutes)
    stamp = now or datetime.now(timezone.utc)

    event = IcsComponent("VEVENT")
    event.add_raw("UID", new_uid(uid_domain))
    event.add_raw("DTSTAMP", format_ics_datetime(stamp))
    event.add_raw("DTSTART", format_ics_datetime(start))
    event.add_raw("DTEND", format_ics_datetime(end))
    event.add_text("SUMMARY", f"{details.subject} - Tutoring Session")
    event.add_text(
        "DESCRIPTION",
        f"Tutoring session on {details.topic}\n"
        f"Participants: {details.attendee_name}, {details.other_party_name}\n"
        "Please coordinate the venue details with each other.",
    )
    event.add_text("LOCATION", VENUE_PLACEHOLDER)
    event.add_raw(
        "ORGANIZER",
        f"mailto:{details.organizer_email}",
        CN=details.organizer_name,
    )
    for name, email in (
        (details.attendee_name, details.attendee_email),
        (details.other_party_name, details.other_party_email),
    ):
        event.add_raw(
            "ATTENDEE",
            f"mailto:{email}",
            CN=name,
            ROLE="REQ-PARTICIPANT",
            PARTSTAT="NEEDS-ACTION",
            RSVP="TRUE",
        )
    event.add_raw("STATUS", "TENTATIVE")
    event.add_raw("SEQUENCE", "0")

    for trigger in REMINDER_TRIGGERS:
        alarm = IcsComponent("VALARM")
        alarm.add_raw("TRIGGER", trigger)
        alarm.add_raw("ACTION", "DISPLAY")
        alarm.add_text("DESCRIPTION", f"Tutoring session reminder: {details.subject}")
        event.add_component(alarm)

    calendar = IcsComponent("VCALENDAR")
    calendar.add_raw("VERSION", "2.0")
    calendar.add_raw("PRODID", PRODID)
    calendar.add_raw("CALSCALE", "GREGORIAN")
    calendar.add_raw("METHOD", "REQUEST")
    calendar.add_component(event)
    return calendar.serialize()


def build_calendar_link(
    *,
    title: str,
    details: str,
    start_time: datetime,
    duration_minutes: int = DEFAULT_DURATION_MINUTES,
) -> str:
    """Google Calendar の予定作成画面への URL を生成する。"""

    start, end = session_window(start_time, duration_minutes)
    query = urlencode(
        {
            "action": "TEMPLATE",
            "text": title,
            "dates": f"{format_ics_datetime(start)}/{format_ics_datetime(end)}",
            "details": details,
        },
        safe="/",
        quote_via=quote,
    )
    return f"{GOOGLE_CALENDAR_RENDER_URL}?{query}"
