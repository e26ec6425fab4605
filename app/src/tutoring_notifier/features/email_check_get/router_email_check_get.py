"""送信設定チェックのエンドポイント。"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tutoring_notifier.clients.transport import MailTransport
from tutoring_notifier.core.dependencies import get_settings, get_transport
from tutoring_notifier.core.settings import Settings
from tutoring_notifier.features.email_check_get.usecase_email_check_get import (
    check_email_configuration,
)
from tutoring_notifier.shared.schemas.dispatch import DispatchResult

router = APIRouter(prefix="/api", tags=["system"])


@router.get(
    "/test-email",
    response_model=DispatchResult,
    responses={500: {"model": DispatchResult}},
)
async def email_check(
    settings: Settings = Depends(get_settings),
    transport: MailTransport = Depends(get_transport),
) -> JSONResponse:
    result = await check_email_configuration(transport=transport, settings=settings)
    return JSONResponse(status_code=result.status_code, content=result.to_body())
