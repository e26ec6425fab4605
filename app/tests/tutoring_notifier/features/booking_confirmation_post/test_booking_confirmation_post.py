"""予約確認メールエンドポイントのテスト。"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from tutoring_notifier.app import create_app
from tutoring_notifier.clients.smtp_client import SmtpTransport
from tutoring_notifier.core.settings import InviteMode

PAYLOAD = {
    "student_email": "  ama@example.edu ",
    "student_name": "Ama Owusu",
    "tutor_email": "kofi@example.edu\n",
    "tutor_name": "Kofi Mensah",
    "tutor_number": "+233 24 123 4567",
    "subject": "Mathematics",
    "topic": "Calculus - Derivatives",
    "selected_time": "2025-07-15T14:00:00Z",
}


def _client(settings, transport) -> TestClient:
    return TestClient(create_app(settings=settings, transport=transport))


def _uid(ics: str) -> str:
    return next(
        line.split(":", 1)[1] for line in ics.replace("\r\n ", "").split("\r\n") if line.startswith("UID:")
    )


def test_sends_one_email_to_each_trimmed_address(make_settings, fake_transport) -> None:
    res = _client(make_settings(), fake_transport).post(
        "/api/send-booking-confirmation", json=PAYLOAD
    )

    assert res.status_code == 200
    assert res.json() == {
        "success": True,
        "message": "Booking confirmation emails sent successfully",
    }
    assert len(fake_transport.sent) == 2
    assert {m.to_email for m in fake_transport.sent} == {"ama@example.edu", "kofi@example.edu"}

    tutor = fake_transport.sent_to("kofi@example.edu")
    student = fake_transport.sent_to("ama@example.edu")
    assert tutor.kind == "tutor_booking_notification"
    assert student.kind == "student_booking_confirmation"
    assert tutor.from_email == "booktutor@example.edu"
    assert "Tuesday, July 15th 2025, 2:00 PM" in tutor.email.text
    assert "ama@example.edu" in tutor.email.text
    assert "+233 24 123 4567" in student.email.text


def test_link_mode_shares_one_calendar_link(make_settings, fake_transport) -> None:
    _client(make_settings(invite_mode=InviteMode.LINK), fake_transport).post(
        "/api/send-booking-confirmation", json=PAYLOAD
    )

    tutor = fake_transport.sent_to("kofi@example.edu")
    student = fake_transport.sent_to("ama@example.edu")
    link = tutor.template_params["calendar_link"]
    assert link.startswith("https://calendar.google.com/calendar/render?")
    assert "dates=20250715T140000Z/20250715T150000Z" in link
    assert student.template_params["calendar_link"] == link
    assert link in tutor.email.text
    assert link in student.email.text
    assert tutor.attachments == () and student.attachments == ()


def test_ics_mode_attaches_personalized_invites(make_settings, fake_transport) -> None:
    res = _client(make_settings(invite_mode=InviteMode.ICS), fake_transport).post(
        "/api/send-booking-confirmation", json=PAYLOAD
    )

    assert res.status_code == 200
    tutor = fake_transport.sent_to("kofi@example.edu")
    student = fake_transport.sent_to("ama@example.edu")
    tutor_ics = tutor.attachments[0].content
    student_ics = student.attachments[0].content

    assert tutor.attachments[0].filename == "invite.ics"
    assert tutor.attachments[0].params == {"method": "REQUEST"}
    assert _uid(tutor_ics) != _uid(student_ics)
    for ics in (tutor_ics, student_ics):
        assert "DTSTART:20250715T140000Z" in ics
        assert "DTEND:20250715T150000Z" in ics
        assert "mailto:tutoring@example.edu" in ics

    def attendees(ics: str) -> list[str]:
        lines = ics.replace("\r\n ", "").split("\r\n")
        return [line.rsplit("mailto:", 1)[1] for line in lines if line.startswith("ATTENDEE")]

    assert attendees(tutor_ics) == ["kofi@example.edu", "ama@example.edu"]
    assert attendees(student_ics) == ["ama@example.edu", "kofi@example.edu"]
    assert "calendar.google.com" not in tutor.email.text


def test_repeated_requests_are_sent_again(make_settings, fake_transport) -> None:
    client = _client(make_settings(invite_mode=InviteMode.ICS), fake_transport)

    client.post("/api/send-booking-confirmation", json=PAYLOAD)
    client.post("/api/send-booking-confirmation", json=PAYLOAD)

    assert len(fake_transport.sent) == 4
    uids = {_uid(message.attachments[0].content) for message in fake_transport.sent}
    assert len(uids) == 4


def test_partial_failure_reports_both_sides(make_settings, make_transport) -> None:
    transport = make_transport(fail_for=["kofi@example.edu"])

    res = _client(make_settings(), transport).post("/api/send-booking-confirmation", json=PAYLOAD)

    assert res.status_code == 500
    body = res.json()
    assert body["success"] is False
    assert body["error"] == "Email sending failed"
    assert body["details"]["student"] == {"success": True}
    assert body["details"]["tutor"] == {
        "success": False,
        "error": "Mailbox unavailable",
        "payload": {"reason": "mailbox unavailable"},
    }
    assert len(transport.sent) == 2


def test_send_timeout_is_reported_as_failure(make_settings, make_transport) -> None:
    transport = make_transport(hang_for=["ama@example.edu"])

    res = _client(make_settings(send_timeout_seconds=0.05), transport).post(
        "/api/send-booking-confirmation", json=PAYLOAD
    )

    assert res.status_code == 500
    details = res.json()["details"]
    assert details["tutor"] == {"success": True}
    assert details["student"]["success"] is False
    assert "timed out" in details["student"]["error"]


def test_missing_field_returns_400(make_settings, fake_transport) -> None:
    payload = {key: value for key, value in PAYLOAD.items() if key != "tutor_number"}

    res = _client(make_settings(), fake_transport).post(
        "/api/send-booking-confirmation", json=payload
    )

    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert "tutor_number" in body["error"]
    assert body["details"]["missing_fields"] == ["tutor_number"]
    assert fake_transport.sent == []


def test_empty_field_counts_as_missing(make_settings, fake_transport) -> None:
    res = _client(make_settings(), fake_transport).post(
        "/api/send-booking-confirmation", json={**PAYLOAD, "topic": ""}
    )

    assert res.status_code == 400
    assert res.json()["details"]["missing_fields"] == ["topic"]


def test_unparseable_time_is_a_format_failure(make_settings, fake_transport) -> None:
    res = _client(make_settings(), fake_transport).post(
        "/api/send-booking-confirmation", json={**PAYLOAD, "selected_time": "sometime soon"}
    )

    assert res.status_code == 500
    body = res.json()
    assert body["success"] is False
    assert body["details"]["code"] == "FORMAT_ERROR"
    assert fake_transport.sent == []


def test_missing_configuration_fails_without_sending(make_settings, fake_transport) -> None:
    res = _client(make_settings(smtp_password=None), fake_transport).post(
        "/api/send-booking-confirmation", json=PAYLOAD
    )

    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "Email service is not configured"
    assert "SMTP_PASSWORD" not in body["details"]
    assert "/api/test-email" in body["details"]
    assert fake_transport.sent == []


def test_wrong_type_is_reported_as_invalid(make_settings, fake_transport) -> None:
    res = _client(make_settings(), fake_transport).post(
        "/api/send-booking-confirmation", json={**PAYLOAD, "tutor_number": 123}
    )

    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "Invalid fields: tutor_number"
    assert body["details"] == {"missing_fields": [], "invalid_fields": ["tutor_number"]}
    assert fake_transport.sent == []


def test_missing_and_invalid_fields_are_reported_separately(make_settings, fake_transport) -> None:
    payload = {key: value for key, value in PAYLOAD.items() if key != "topic"}

    res = _client(make_settings(), fake_transport).post(
        "/api/send-booking-confirmation", json={**payload, "subject": ["Mathematics"]}
    )

    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "Missing required fields: topic; Invalid fields: subject"
    assert body["details"]["missing_fields"] == ["topic"]
    assert body["details"]["invalid_fields"] == ["subject"]


def test_malformed_tutor_name_still_reports_both_sides(make_settings) -> None:
    server = MagicMock()
    server.__enter__.return_value = server
    server.__exit__.return_value = False
    server.send_message.return_value = {}
    settings = make_settings()

    with patch("tutoring_notifier.clients.smtp_client.smtplib.SMTP", return_value=server):
        res = _client(settings, SmtpTransport(settings)).post(
            "/api/send-booking-confirmation", json={**PAYLOAD, "tutor_name": "Tom\nSmith"}
        )

    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "Email sending failed"
    assert body["details"]["student"] == {"success": True}
    assert body["details"]["tutor"]["success"] is False
    assert "Invalid message headers" in body["details"]["tutor"]["error"]
    [sent] = [call.args[0] for call in server.send_message.call_args_list]
    assert sent["To"] == "Ama Owusu <ama@example.edu>"
