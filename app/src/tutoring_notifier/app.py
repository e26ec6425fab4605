"""FastAPI アプリケーションの組み立てを担当するモジュール。"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from .clients.transport import MailTransport, build_transport
from .core.middleware import request_id_middleware
from .core.settings import Settings, load_settings
from .features.application_confirmation_post.router_application_confirmation_post import (
    router as application_router,
)
from .features.booking_confirmation_post.router_booking_confirmation_post import (
    router as booking_router,
)
from .features.email_check_get.router_email_check_get import router as email_check_router
from .shared.schemas.dispatch import DispatchResult, HealthResponse

_MISSING_ERROR_TYPES = {"missing", "string_too_short"}


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """入力エラーを 400 として返す。

    欠落・空文字は missing_fields、型違いなどそれ以外は invalid_fields に分けて報告する。
    """

    missing: list[str] = []
    invalid: list[str] = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        name = ".".join(loc) or "body"
        bucket = missing if error.get("type") in _MISSING_ERROR_TYPES else invalid
        if name not in bucket:
            bucket.append(name)

    messages = []
    if missing:
        messages.append(f"Missing required fields: {', '.join(missing)}")
    if invalid:
        messages.append(f"Invalid fields: {', '.join(invalid)}")
    details: dict[str, list[str]] = {"missing_fields": missing}
    if invalid:
        details["invalid_fields"] = invalid
    result = DispatchResult(success=False, error="; ".join(messages), details=details)
    return JSONResponse(status_code=400, content=result.to_body())


def create_app(
    *,
    settings: Settings | None = None,
    transport: MailTransport | None = None,
) -> FastAPI:
    """コア設定や共通ミドルウェアを組み込んだ FastAPI アプリを返す。

    送信基盤は起動時に1度だけ生成し、テストでは差し替えられるよう引数で受け取る。
    """

    settings = settings or load_settings()
    app = FastAPI(
        title="Peer Tutoring Notification API",
        version="1.0.0",
        description="Email notifications for peer tutoring applications and bookings",
    )
    app.state.settings = settings  # type: ignore[attr-defined]
    app.state.transport = transport or build_transport(settings)  # type: ignore[attr-defined]
    app.middleware("http")(request_id_middleware)
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]

    @app.get("/health", tags=["system"], response_model=HealthResponse)
    def health() -> HealthResponse:
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        return HealthResponse(status="OK", timestamp=timestamp.replace("+00:00", "Z"))

    @app.get("/", include_in_schema=False)
    def root() -> RedirectResponse:
        return RedirectResponse(url="/docs")

    app.include_router(application_router)
    app.include_router(booking_router)
    app.include_router(email_check_router)

    return app
