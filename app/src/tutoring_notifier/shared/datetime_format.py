"""日時の解析・表示用フォーマット。"""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tutoring_notifier.core.errors import ConfigurationError, FormatError


def parse_timestamp(value: str) -> datetime:
    """ISO8601 文字列を UTC の aware datetime に変換する。

    タイムゾーン指定が無い値は UTC とみなす。解析できない値は FormatError。
    """

    raw = value.strip() if isinstance(value, str) else ""
    if not raw:
        raise FormatError(f"Invalid session time: {value!r}")
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise FormatError(f"Invalid session time: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_ics_datetime(value: datetime) -> str:
    """`YYYYMMDDTHHMMSSZ` 形式 (UTC) に整形する。"""

    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def format_session_time(value: datetime, tz_name: str) -> str:
    """メール本文用の表示形式 (例: Monday, January 2nd 2025, 3:04 PM)。"""

    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError([f"DISPLAY_TIMEZONE={tz_name}"]) from exc

    local = value.astimezone(tz)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return (
        f"{local:%A}, {local:%B} {_ordinal(local.day)} {local.year}, "
        f"{hour}:{local.minute:02d} {meridiem}"
    )


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"
