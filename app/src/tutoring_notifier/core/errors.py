"""通知処理で扱う例外の定義。"""

from __future__ import annotations

from typing import Any, Iterable


class NotificationError(RuntimeError):
    """通知処理の基底例外。"""

    code = "NOTIFICATION_ERROR"


class ConfigurationError(NotificationError):
    """送信に必要な設定値が欠けている場合の例外。"""

    code = "CONFIGURATION_ERROR"

    def __init__(self, missing_keys: Iterable[str]) -> None:
        self.missing_keys = sorted(set(missing_keys))
        super().__init__(f"Missing email configuration: {', '.join(self.missing_keys)}")


class TransportError(NotificationError):
    """メール送信基盤が送信を拒否・失敗した場合の例外。"""

    code = "TRANSPORT_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class FormatError(NotificationError):
    """招待やテンプレートの生成に失敗した場合の例外。"""

    code = "FORMAT_ERROR"
