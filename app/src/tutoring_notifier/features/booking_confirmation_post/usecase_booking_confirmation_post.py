"""予約確認メールの送信ユースケース。"""

from __future__ import annotations

from datetime import datetime

from tutoring_notifier.clients.transport import MailTransport
from tutoring_notifier.core.models import MailAttachment, OutboundMessage, SessionDetails
from tutoring_notifier.core.settings import InviteMode, Settings
from tutoring_notifier.features.booking_confirmation_post.schemas_booking_confirmation_post import (
    BookingConfirmationRequest,
)
from tutoring_notifier.shared.calendar_invite import (
    DEFAULT_DURATION_MINUTES,
    build_calendar_link,
    build_ics_invite,
)
from tutoring_notifier.shared.datetime_format import format_session_time, parse_timestamp
from tutoring_notifier.shared.delivery import (
    deliver_concurrently,
    ensure_configured,
    failure_result,
)
from tutoring_notifier.shared.email_templates import (
    student_booking_confirmation_template,
    tutor_booking_notification_template,
)
from tutoring_notifier.shared.schemas.dispatch import DispatchResult

INVITE_FILENAME = "invite.ics"


async def send_booking_confirmation(
    request: BookingConfirmationRequest,
    *,
    transport: MailTransport,
    settings: Settings,
) -> DispatchResult:
    """チューターと学生へ確認メールを同時送信し、両方の結果をまとめて返す。"""

    try:
        ensure_configured(settings)
        messages = build_booking_messages(request, settings=settings)
        outcomes = await deliver_concurrently(
            transport, messages, timeout=settings.send_timeout_seconds
        )
    except Exception as exc:
        return failure_result(exc, operation="booking confirmation")

    if all(outcome.success for outcome in outcomes.values()):
        return DispatchResult(
            success=True, message="Booking confirmation emails sent successfully"
        )
    return DispatchResult(
        success=False,
        error="Email sending failed",
        details={label: outcome.as_details() for label, outcome in outcomes.items()},
    )


def build_booking_messages(
    request: BookingConfirmationRequest,
    *,
    settings: Settings,
) -> dict[str, OutboundMessage]:
    """チューター宛て・学生宛ての2通を組み立てる。"""

    student_email = request.student_email.strip()
    tutor_email = request.tutor_email.strip()
    start_time = parse_timestamp(request.selected_time)
    formatted_time = format_session_time(start_time, settings.display_timezone)

    tutor_attachments: tuple[MailAttachment, ...] = ()
    student_attachments: tuple[MailAttachment, ...] = ()
    calendar_link: str | None = None

    if settings.invite_mode is InviteMode.ICS:
        tutor_attachments = (
            _ics_attachment(
                request,
                settings=settings,
                start_time=start_time,
                recipient=(request.tutor_name, tutor_email),
                counterpart=(request.student_name, student_email),
            ),
        )
        student_attachments = (
            _ics_attachment(
                request,
                settings=settings,
                start_time=start_time,
                recipient=(request.student_name, student_email),
                counterpart=(request.tutor_name, tutor_email),
            ),
        )
    else:
        calendar_link = build_calendar_link(
            title=f"Tutoring: {request.subject} - {request.topic}",
            details=(
                f"Topic: {request.topic}\n"
                f"Tutor: {request.tutor_name} ({tutor_email}, {request.tutor_number})\n"
                f"Student: {request.student_name} ({student_email})"
            ),
            start_time=start_time,
        )

    tutor_email_body = tutor_booking_notification_template(
        tutor_name=request.tutor_name,
        student_name=request.student_name,
        student_email=student_email,
        subject=request.subject,
        topic=request.topic,
        formatted_time=formatted_time,
        calendar_link=calendar_link,
    )
    student_email_body = student_booking_confirmation_template(
        student_name=request.student_name,
        tutor_name=request.tutor_name,
        tutor_email=tutor_email,
        tutor_number=request.tutor_number,
        subject=request.subject,
        topic=request.topic,
        formatted_time=formatted_time,
        calendar_link=calendar_link,
    )

    shared_params = {
        "subject_name": request.subject,
        "topic": request.topic,
        "formatted_time": formatted_time,
        "calendar_link": calendar_link or "",
    }
    return {
        "tutor": OutboundMessage(
            kind="tutor_booking_notification",
            to_email=tutor_email,
            to_name=request.tutor_name,
            from_email=settings.mail_from or "",
            from_name=settings.mail_from_name,
            email=tutor_email_body,
            attachments=tutor_attachments,
            template_params={
                **shared_params,
                "tutor_name": request.tutor_name,
                "student_name": request.student_name,
                "student_email": student_email,
            },
        ),
        "student": OutboundMessage(
            kind="student_booking_confirmation",
            to_email=student_email,
            to_name=request.student_name,
            from_email=settings.mail_from or "",
            from_name=settings.mail_from_name,
            email=student_email_body,
            attachments=student_attachments,
            template_params={
                **shared_params,
                "student_name": request.student_name,
                "tutor_name": request.tutor_name,
                "tutor_email": tutor_email,
                "tutor_number": request.tutor_number,
            },
        ),
    }


def _ics_attachment(
    request: BookingConfirmationRequest,
    *,
    settings: Settings,
    start_time: datetime,
    recipient: tuple[str, str],
    counterpart: tuple[str, str],
) -> MailAttachment:
    # 受信者ごとに UID の異なる招待を生成する
    details = SessionDetails(
        subject=request.subject,
        topic=request.topic,
        organizer_name=settings.invite_organizer_name,
        organizer_email=settings.invite_organizer_email or "",
        attendee_name=recipient[0],
        attendee_email=recipient[1],
        other_party_name=counterpart[0],
        other_party_email=counterpart[1],
        start_time=start_time,
        duration_minutes=DEFAULT_DURATION_MINUTES,
    )
    return MailAttachment(
        filename=INVITE_FILENAME,
        content=build_ics_invite(details, uid_domain=settings.invite_uid_domain),
        mime_type="text/calendar",
        params={"method": "REQUEST"},
    )
