"""`/api/send-application-confirmation` のリクエストスキーマ。"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ApplicationConfirmationRequest(BaseModel):
    """ピアチューター応募の受付確認メール送信リクエスト。"""

    to_email: str = Field(..., min_length=1, description="宛先メールアドレス", examples=["student@gmail.com"])
    to_name: str = Field(..., min_length=1, description="宛先氏名", examples=["John Doe"])
    courses: str = Field(
        ...,
        min_length=1,
        description="カンマ区切りの担当希望科目",
        examples=["Mathematics, Physics, Computer Science"],
    )
    submission_date: str = Field(..., min_length=1, description="応募日", examples=["2025-07-12"])
