"""応募受付確認メールのエンドポイント。"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tutoring_notifier.clients.transport import MailTransport
from tutoring_notifier.core.dependencies import get_settings, get_transport
from tutoring_notifier.core.settings import Settings
from tutoring_notifier.features.application_confirmation_post.schemas_application_confirmation_post import (
    ApplicationConfirmationRequest,
)
from tutoring_notifier.features.application_confirmation_post.usecase_application_confirmation_post import (
    send_application_confirmation,
)
from tutoring_notifier.shared.schemas.dispatch import DispatchResult

router = APIRouter(prefix="/api", tags=["email-notifications"])


@router.post(
    "/send-application-confirmation",
    response_model=DispatchResult,
    responses={400: {"model": DispatchResult}, 500: {"model": DispatchResult}},
)
async def application_confirmation(
    payload: ApplicationConfirmationRequest,
    settings: Settings = Depends(get_settings),
    transport: MailTransport = Depends(get_transport),
) -> JSONResponse:
    result = await send_application_confirmation(payload, transport=transport, settings=settings)
    return JSONResponse(status_code=result.status_code, content=result.to_body())
