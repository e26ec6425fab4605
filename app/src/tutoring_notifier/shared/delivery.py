"""送信基盤への1回限りの送信と結果の正規化。"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from tutoring_notifier.core.errors import (
    ConfigurationError,
    NotificationError,
    TransportError,
)
from tutoring_notifier.core.logging import log_delivery, log_error
from tutoring_notifier.core.models import OutboundMessage, SendOutcome
from tutoring_notifier.shared.schemas.dispatch import DispatchResult

if TYPE_CHECKING:
    from tutoring_notifier.clients.transport import MailTransport
    from tutoring_notifier.core.settings import Settings


async def deliver(
    transport: "MailTransport",
    message: OutboundMessage,
    *,
    timeout: float,
) -> SendOutcome:
    """タイムアウト付きで1回だけ送信し、失敗も SendOutcome として返す。

    再送は行わない。タイムアウトは送信失敗として扱う。
    タイムアウト時は待機を打ち切るだけで、スレッドで実行中の SMTP 送信は中断されない。
    その送信は smtplib 自身のソケットタイムアウト (同じ秒数) まで継続し、
    遅れて配送される可能性がある。
    """

    try:
        response = await asyncio.wait_for(transport.send(message), timeout=timeout)
    except asyncio.TimeoutError:
        outcome = SendOutcome(
            success=False, error=f"Mail transport timed out after {timeout:g} seconds"
        )
    except TransportError as exc:
        outcome = SendOutcome(success=False, error=str(exc), error_payload=exc.payload)
    except NotificationError as exc:
        outcome = SendOutcome(success=False, error=str(exc))
    except Exception as exc:
        log_error(path=message.kind, error=exc)
        outcome = SendOutcome(success=False, error=str(exc))
    else:
        outcome = SendOutcome(success=True, response=response)

    log_delivery(
        kind=message.kind,
        recipient=message.to_email,
        success=outcome.success,
        error=outcome.error_payload or outcome.error,
    )
    return outcome


def ensure_configured(settings: "Settings") -> None:
    missing = settings.missing_keys()
    if missing:
        raise ConfigurationError(missing)


def failure_result(exc: Exception, *, operation: str) -> DispatchResult:
    """送信処理の境界で捕捉した例外を DispatchResult に変換する。"""

    if isinstance(exc, ConfigurationError):
        return DispatchResult(
            success=False,
            error="Email service is not configured",
            details="Required email configuration is missing. See /api/test-email.",
        )
    if isinstance(exc, NotificationError):
        return DispatchResult(
            success=False,
            error=f"Failed to send {operation}",
            details={"code": exc.code, "message": str(exc)},
        )
    log_error(path=operation, error=exc)
    return DispatchResult(success=False, error="Internal Server Error", details=str(exc))


async def deliver_concurrently(
    transport: "MailTransport",
    messages: dict[str, OutboundMessage],
    *,
    timeout: float,
) -> dict[str, SendOutcome]:
    """複数通を同時に送信し、すべての完了を待ってラベルごとの結果を返す。"""

    labels = list(messages)
    outcomes = await asyncio.gather(
        *(deliver(transport, messages[label], timeout=timeout) for label in labels)
    )
    return dict(zip(labels, outcomes))
