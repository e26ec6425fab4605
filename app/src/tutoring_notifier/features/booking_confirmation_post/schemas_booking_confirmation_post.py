"""`/api/send-booking-confirmation` のリクエストスキーマ。"""

from __future__ import annotations

from pydantic import BaseModel, Field


class BookingConfirmationRequest(BaseModel):
    """チューター・学生双方への予約確認メール送信リクエスト。"""

    student_email: str = Field(..., min_length=1, examples=["student@gmail.com"])
    student_name: str = Field(..., min_length=1, examples=["Jane Smith"])
    tutor_email: str = Field(..., min_length=1, examples=["tutor@gmail.com"])
    tutor_name: str = Field(..., min_length=1, examples=["John Smith"])
    tutor_number: str = Field(..., min_length=1, examples=["+233 24 123 4567"])
    subject: str = Field(..., min_length=1, examples=["Mathematics"])
    topic: str = Field(..., min_length=1, examples=["Calculus - Derivatives"])
    selected_time: str = Field(
        ...,
        min_length=1,
        description="セッション開始日時 (ISO8601)",
        examples=["2025-07-15T14:00:00Z"],
    )
