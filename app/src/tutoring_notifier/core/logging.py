"""JSONロギングの共通ヘルパー。"""

from __future__ import annotations

import json
import logging
import traceback
from typing import Any

_LOGGER = logging.getLogger("tutoring_notifier")


def log_request(*, path: str, status: int, request_id: str, latency_ms: int) -> None:
    payload = {
        "level": "INFO",
        "path": path,
        "status": status,
        "request_id": request_id,
        "latency_ms": latency_ms,
    }
    _LOGGER.info(json.dumps(payload, ensure_ascii=False))


def log_delivery(*, kind: str, recipient: str, success: bool, error: Any = None) -> None:
    """1通ごとの送信結果を記録する。"""

    payload: dict[str, Any] = {
        "level": "INFO" if success else "WARNING",
        "event": "mail_delivery",
        "kind": kind,
        "recipient": recipient,
        "success": success,
    }
    if error is not None:
        payload["error_json"] = _to_error_json(error)
    if success:
        _LOGGER.info(json.dumps(payload, ensure_ascii=False))
    else:
        _LOGGER.warning(json.dumps(payload, ensure_ascii=False))


def log_error(
    *,
    path: str,
    error: Any,
    status: int = 500,
    request_id: str | None = None,
) -> None:
    payload = {
        "level": "ERROR",
        "path": path,
        "status": status,
        "request_id": request_id,
        "error_json": _to_error_json(error),
        "traceback": traceback.format_exc(),
    }
    _LOGGER.error(json.dumps(payload, ensure_ascii=False))


def _to_error_json(error: Any) -> str:
    if isinstance(error, (dict, list)):
        return json.dumps(error, ensure_ascii=False, default=str)
    return json.dumps({"message": str(error)}, ensure_ascii=False)
