"""外部サービスへの接続ヘルパーをまとめたパッケージ。"""

from __future__ import annotations

__all__ = [
    "emailjs_client",
    "http_client",
    "smtp_client",
    "transport",
]
