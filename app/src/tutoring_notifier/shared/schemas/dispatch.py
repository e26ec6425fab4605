"""各エンドポイント共通のレスポンススキーマ。"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class DispatchResult(BaseModel):
    """送信処理の結果。失敗時も例外ではなくこの形で返す。"""

    success: bool
    message: str | None = None
    error: str | None = None
    details: Any = None

    model_config = ConfigDict(extra="forbid")

    @property
    def status_code(self) -> int:
        return 200 if self.success else 500

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class HealthResponse(BaseModel):
    status: str
    timestamp: str
