"""ルータ共通の依存性。"""

from __future__ import annotations

from fastapi import Request

from tutoring_notifier.clients.transport import MailTransport
from tutoring_notifier.core.settings import Settings


async def get_settings(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[attr-defined]


async def get_transport(request: Request) -> MailTransport:
    return request.app.state.transport  # type: ignore[attr-defined]
