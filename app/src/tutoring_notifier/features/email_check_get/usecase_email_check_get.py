"""送信設定のセルフチェック。"""

from __future__ import annotations

from tutoring_notifier.clients.transport import MailTransport
from tutoring_notifier.core.errors import ConfigurationError, NotificationError
from tutoring_notifier.core.settings import Settings
from tutoring_notifier.shared.schemas.dispatch import DispatchResult


async def check_email_configuration(
    *,
    transport: MailTransport,
    settings: Settings,
) -> DispatchResult:
    """不足設定を列挙し、問題が無ければ送信基盤へ接続確認を行う。メールは送らない。"""

    missing = settings.missing_keys()
    if missing:
        return _configuration_failure(ConfigurationError(missing))

    try:
        message = await transport.verify()
    except ConfigurationError as exc:
        return _configuration_failure(exc)
    except NotificationError as exc:
        return DispatchResult(
            success=False,
            error="Email configuration test failed",
            details={"code": exc.code, "message": str(exc)},
        )
    return DispatchResult(
        success=True,
        message=message,
        details={
            "transport": settings.mail_transport.value,
            "invite_mode": settings.invite_mode.value,
        },
    )


def _configuration_failure(exc: ConfigurationError) -> DispatchResult:
    return DispatchResult(
        success=False,
        error="Email configuration test failed",
        details={"missing_keys": exc.missing_keys},
    )
