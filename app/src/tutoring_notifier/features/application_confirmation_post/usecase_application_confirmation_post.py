"""応募受付確認メールの送信ユースケース。"""

from __future__ import annotations

from tutoring_notifier.clients.transport import MailTransport
from tutoring_notifier.core.models import OutboundMessage
from tutoring_notifier.core.settings import Settings
from tutoring_notifier.features.application_confirmation_post.schemas_application_confirmation_post import (
    ApplicationConfirmationRequest,
)
from tutoring_notifier.shared.delivery import deliver, ensure_configured, failure_result
from tutoring_notifier.shared.email_templates import application_confirmation_template
from tutoring_notifier.shared.schemas.dispatch import DispatchResult


async def send_application_confirmation(
    request: ApplicationConfirmationRequest,
    *,
    transport: MailTransport,
    settings: Settings,
) -> DispatchResult:
    """応募者へ受付確認メールを1通送信する。例外は結果に変換して返す。"""

    try:
        ensure_configured(settings)
        rendered = application_confirmation_template(
            to_name=request.to_name,
            courses=request.courses,
            submission_date=request.submission_date,
        )
        message = OutboundMessage(
            kind="application_confirmation",
            to_email=request.to_email.strip(),
            to_name=request.to_name,
            from_email=settings.mail_from or "",
            from_name=settings.mail_from_name,
            email=rendered,
            template_params={
                "courses": request.courses,
                "submission_date": request.submission_date,
            },
        )
        outcome = await deliver(transport, message, timeout=settings.send_timeout_seconds)
    except Exception as exc:
        return failure_result(exc, operation="application confirmation")

    if outcome.success:
        return DispatchResult(
            success=True, message="Application confirmation email sent successfully"
        )
    return DispatchResult(
        success=False,
        error="Failed to send application confirmation email",
        details=outcome.as_details(),
    )
