"""通知メールのテンプレート。

迷惑メール判定を避けるため、すべての通知でテキスト本文と HTML 本文の両方を生成する。
"""

from __future__ import annotations

from html import escape

from tutoring_notifier.core.models import RenderedEmail

_SIGNATURE_TEXT = "Best regards,\nPeer Tutoring Program\nAshesi University"
_SIGNATURE_HTML = (
    "<p>Best regards,<br><strong>Peer Tutoring Program</strong><br>Ashesi University</p>"
)


def _wrap_html(title: str, body: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<h2 style="color: #2c3e50;">{escape(title)}</h2>'
        f"{body}"
        f"{_SIGNATURE_HTML}"
        "</div>"
    )


def _html_box(heading: str | None, rows: list[str], *, background: str = "#f8f9fa") -> str:
    inner = "".join(rows)
    header = (
        f'<h4 style="color: #2c3e50; margin-top: 0;">{escape(heading)}</h4>' if heading else ""
    )
    return (
        f'<div style="background-color: {background}; padding: 15px; '
        f'border-radius: 5px; margin: 20px 0;">{header}{inner}</div>'
    )


def _html_row(label: str, value: str) -> str:
    return f"<p><strong>{escape(label)}:</strong> {escape(value)}</p>"


def _calendar_link_html(link: str | None) -> str:
    if not link:
        return ""
    return (
        f'<p><a href="{escape(link, quote=True)}" '
        'style="background-color: #2c3e50; color: #ffffff; padding: 10px 16px; '
        'border-radius: 4px; text-decoration: none;">Add to Google Calendar</a></p>'
    )


def _calendar_link_text(link: str | None) -> str:
    if not link:
        return ""
    return f"\nAdd this session to your calendar:\n{link}\n"


def application_confirmation_template(
    *,
    to_name: str,
    courses: str,
    submission_date: str,
) -> RenderedEmail:
    """ピアチューター応募者への受付確認メール。"""

    subject = "Peer Tutor Application Confirmation - Ashesi University"
    intro = (
        "Thank you for applying to be a Peer Tutor at Ashesi University. "
        "We have received your application with the following details:"
    )
    review = (
        "Your application is currently under review by the academic advisor's office. "
        "We will contact you shortly with further instructions or to confirm your tutor status."
    )

    text = (
        f"Dear {to_name},\n\n"
        f"{intro}\n\n"
        f"Courses Selected: {courses}\n"
        f"Submission Date: {submission_date}\n\n"
        f"{review}\n\n"
        "Key Next Steps:\n"
        "- Await review confirmation\n"
        "- Prepare for potential tutor training\n\n"
        f"{_SIGNATURE_TEXT}\n"
    )
    html = _wrap_html(
        "Peer Tutor Application Confirmation",
        f"<p>Dear <strong>{escape(to_name)}</strong>,</p>"
        f"<p>{escape(intro)}</p>"
        + _html_box(
            None,
            [
                _html_row("Courses Selected", courses),
                _html_row("Submission Date", submission_date),
            ],
        )
        + f"<p>{escape(review)}</p>"
        + _html_box(
            "Key Next Steps:",
            ["<ul><li>Await review confirmation</li>"
             "<li>Prepare for potential tutor training</li></ul>"],
            background="#e8f4f8",
        ),
    )
    return RenderedEmail(subject=subject, text=text, html=html)


def tutor_booking_notification_template(
    *,
    tutor_name: str,
    student_name: str,
    student_email: str,
    subject: str,
    topic: str,
    formatted_time: str,
    calendar_link: str | None = None,
) -> RenderedEmail:
    """チューターへ新しい予約を知らせるメール。"""

    email_subject = f"New Tutoring Session Booked: {subject}"
    text = (
        f"Hello {tutor_name},\n\n"
        f"You have a new tutoring session booked by {student_name} ({student_email}).\n\n"
        "Session Details:\n"
        f"- Subject: {subject}\n"
        f"- Topic: {topic}\n"
        f"- Time: {formatted_time}\n"
        f"- Student: {student_name} ({student_email})\n"
        "- Duration: 1 hour\n"
        f"{_calendar_link_text(calendar_link)}\n"
        "Next Steps:\n"
        "- Contact the student to arrange the meeting venue\n"
        "- Prepare any necessary materials for the topic\n\n"
        f"{_SIGNATURE_TEXT}\n"
    )
    html = _wrap_html(
        "New Tutoring Session Booked",
        f"<p>Hello <strong>{escape(tutor_name)}</strong>,</p>"
        f"<p>You have a new tutoring session booked by <strong>{escape(student_name)}</strong> "
        f"(<strong>{escape(student_email)}</strong>).</p>"
        + _html_box(
            "Session Details:",
            [
                _html_row("Subject", subject),
                _html_row("Topic", topic),
                _html_row("Time", formatted_time),
                _html_row("Student", f"{student_name} ({student_email})"),
                _html_row("Duration", "1 hour"),
            ],
        )
        + _calendar_link_html(calendar_link)
        + _html_box(
            "Next Steps:",
            ["<ul><li>Contact the student to arrange the meeting venue</li>"
             "<li>Prepare any necessary materials for the topic</li></ul>"],
            background="#d1ecf1",
        ),
    )
    return RenderedEmail(subject=email_subject, text=text, html=html)


def student_booking_confirmation_template(
    *,
    student_name: str,
    tutor_name: str,
    tutor_email: str,
    tutor_number: str,
    subject: str,
    topic: str,
    formatted_time: str,
    calendar_link: str | None = None,
) -> RenderedEmail:
    """学生へ予約確定とチューター連絡先を知らせるメール。"""

    email_subject = f"Booking Confirmed: {subject} Session"
    text = (
        f"Hello {student_name},\n\n"
        "Great news! Your tutoring session has been successfully booked.\n\n"
        "Your Session Details:\n"
        f"- Subject: {subject}\n"
        f"- Topic: {topic}\n"
        f"- Date & Time: {formatted_time}\n"
        f"- Tutor: {tutor_name}\n"
        "- Duration: 1 hour\n"
        f"{_calendar_link_text(calendar_link)}\n"
        "Important Next Steps:\n"
        f"- Contact your tutor at {tutor_number} to confirm the venue\n"
        "- Prepare specific questions about the topic\n"
        "- Bring any relevant materials or assignments\n\n"
        "Tutor Contact Information:\n"
        f"- Email: {tutor_email}\n"
        f"- Phone: {tutor_number}\n\n"
        "Your tutor has also received notification of this booking. "
        "Please coordinate with them for the final venue details.\n\n"
        f"{_SIGNATURE_TEXT}\n"
    )
    html = _wrap_html(
        "Tutoring Session Confirmed!",
        f"<p>Hello <strong>{escape(student_name)}</strong>,</p>"
        "<p>Great news! Your tutoring session has been successfully booked.</p>"
        + _html_box(
            "Your Session Details:",
            [
                _html_row("Subject", subject),
                _html_row("Topic", topic),
                _html_row("Date & Time", formatted_time),
                _html_row("Tutor", tutor_name),
                _html_row("Duration", "1 hour"),
            ],
        )
        + _calendar_link_html(calendar_link)
        + _html_box(
            "Important Next Steps:",
            [f"<ul><li>Contact your tutor at <strong>{escape(tutor_number)}</strong> "
             "to confirm the venue</li>"
             "<li>Prepare specific questions about the topic</li>"
             "<li>Bring any relevant materials or assignments</li></ul>"],
            background="#fff3cd",
        )
        + _html_box(
            "Tutor Contact Information:",
            [_html_row("Email", tutor_email), _html_row("Phone", tutor_number)],
            background="#d4edda",
        )
        + "<p>Your tutor has also received notification of this booking. "
        "Please coordinate with them for the final venue details.</p>",
    )
    return RenderedEmail(subject=email_subject, text=text, html=html)
