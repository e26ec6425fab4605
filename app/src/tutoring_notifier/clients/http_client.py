"""httpx クライアントの共通設定。"""

from __future__ import annotations

import httpx

DEFAULT_TIMEOUT = httpx.Timeout(10.0, connect=5.0)


def create_async_client(
    *,
    timeout: httpx.Timeout | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """共通タイムアウト付きの AsyncClient を生成する。"""

    return httpx.AsyncClient(timeout=timeout or DEFAULT_TIMEOUT, transport=transport)
