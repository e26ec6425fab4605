"""アプリ全体で共有する設定読み込みロジック。"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Iterable

import boto3
from botocore.exceptions import ClientError


_DEFAULT_REGION = "eu-west-1"
_DEFAULT_TZ = "Africa/Accra"
_DEFAULT_SEND_TIMEOUT = 30.0
_LOCAL_ENV = "local"


class MailTransportKind(str, Enum):
    """送信経路。"""

    REST = "rest"
    SMTP = "smtp"


class InviteMode(str, Enum):
    """カレンダー招待の形式。"""

    ICS = "ics"
    LINK = "link"


# SSM から読み込む秘匿値 (パラメータ名 -> 環境変数名)
_SSM_SECRET_KEYS = {
    "mail/from": "MAIL_FROM",
    "emailjs/service_id": "EMAILJS_SERVICE_ID",
    "emailjs/public_key": "EMAILJS_PUBLIC_KEY",
    "emailjs/private_key": "EMAILJS_PRIVATE_KEY",
    "smtp/host": "SMTP_HOST",
    "smtp/user": "SMTP_USER",
    "smtp/password": "SMTP_PASSWORD",
}


@dataclass(slots=True)
class Settings:
    """環境非依存で参照できる設定値の集合。"""

    app_env: str
    region: str
    mail_transport: MailTransportKind
    invite_mode: InviteMode
    mail_from: str | None
    mail_from_name: str
    emailjs_service_id: str | None = None
    emailjs_public_key: str | None = None
    emailjs_private_key: str | None = None
    emailjs_application_template_id: str | None = None
    emailjs_tutor_template_id: str | None = None
    emailjs_student_template_id: str | None = None
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_use_ssl: bool = False
    invite_organizer_email: str | None = None
    invite_organizer_name: str = "Peer Tutoring Program"
    invite_uid_domain: str = "ashesi.edu.gh"
    display_timezone: str = _DEFAULT_TZ
    send_timeout_seconds: float = _DEFAULT_SEND_TIMEOUT
    cors_origins: list[str] = field(default_factory=list)
    ssm_path_prefix: str | None = None

    @property
    def is_local(self) -> bool:
        return self.app_env == _LOCAL_ENV

    def missing_keys(self) -> list[str]:
        """選択中の送信経路・招待形式で不足している設定キーを返す。"""

        required: dict[str, object] = {"MAIL_FROM": self.mail_from}
        if self.mail_transport is MailTransportKind.REST:
            required.update(
                {
                    "EMAILJS_SERVICE_ID": self.emailjs_service_id,
                    "EMAILJS_PUBLIC_KEY": self.emailjs_public_key,
                    "EMAILJS_PRIVATE_KEY": self.emailjs_private_key,
                    "EMAILJS_APPLICATION_TEMPLATE_ID": self.emailjs_application_template_id,
                    "EMAILJS_TUTOR_TEMPLATE_ID": self.emailjs_tutor_template_id,
                    "EMAILJS_STUDENT_TEMPLATE_ID": self.emailjs_student_template_id,
                }
            )
        else:
            required.update(
                {
                    "SMTP_HOST": self.smtp_host,
                    "SMTP_USER": self.smtp_user,
                    "SMTP_PASSWORD": self.smtp_password,
                }
            )
        if self.invite_mode is InviteMode.ICS:
            required["INVITE_ORGANIZER_EMAIL"] = self.invite_organizer_email

        missing = [name for name, value in required.items() if not value]
        # EmailJS は添付ファイルを扱えないため ICS 招待は SMTP 専用
        if (
            self.mail_transport is MailTransportKind.REST
            and self.invite_mode is InviteMode.ICS
        ):
            missing.append("INVITE_MODE=ics requires MAIL_TRANSPORT=smtp")
        return missing


def _load_json_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("JSON 文字列のパースに失敗しました。") from exc
    if not isinstance(parsed, list):
        raise ValueError("JSON 文字列は配列である必要があります。")
    return [str(item) for item in parsed]


def _load_bool(raw: str | None, default: bool = False) -> bool:
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _load_enum(enum_cls: type[Enum], name: str, default: Enum) -> Enum:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"環境変数 {name} は {allowed} のいずれかである必要があります。") from exc


def _fetch_ssm_parameters(
    region: str, names: Iterable[str], prefix: str
) -> dict[str, str]:
    """SSM から取得できたパラメータのみを返す。未設定は missing_keys で検出する。"""

    name_list = [f"{prefix}/{name}" for name in names]
    client = boto3.client("ssm", region_name=region)
    try:
        resp = client.get_parameters(Names=name_list, WithDecryption=True)
    except ClientError as exc:  # pragma: no cover - boto3 例外ラップ
        raise RuntimeError("SSM パラメータ取得に失敗しました。") from exc

    return {item["Name"]: item["Value"] for item in resp.get("Parameters", [])}


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """環境に応じて環境変数または SSM から設定を構築する。"""

    app_env = os.getenv("APP_ENV", _LOCAL_ENV)
    region = os.getenv("REGION", _DEFAULT_REGION)

    secrets = {env_name: os.getenv(env_name) for env_name in _SSM_SECRET_KEYS.values()}
    prefix: str | None = None
    if app_env != _LOCAL_ENV:
        prefix = os.getenv("SSM_PATH_PREFIX", "/tutoring-notifier/prod")
        found = _fetch_ssm_parameters(region=region, names=_SSM_SECRET_KEYS, prefix=prefix)
        for ssm_name, env_name in _SSM_SECRET_KEYS.items():
            value = found.get(f"{prefix}/{ssm_name}")
            if value:
                secrets[env_name] = value

    return Settings(
        app_env=app_env,
        region=region,
        mail_transport=_load_enum(MailTransportKind, "MAIL_TRANSPORT", MailTransportKind.SMTP),  # type: ignore[arg-type]
        invite_mode=_load_enum(InviteMode, "INVITE_MODE", InviteMode.LINK),  # type: ignore[arg-type]
        mail_from=secrets["MAIL_FROM"],
        mail_from_name=os.getenv("MAIL_FROM_NAME", "Peer Tutoring Program"),
        emailjs_service_id=secrets["EMAILJS_SERVICE_ID"],
        emailjs_public_key=secrets["EMAILJS_PUBLIC_KEY"],
        emailjs_private_key=secrets["EMAILJS_PRIVATE_KEY"],
        emailjs_application_template_id=os.getenv("EMAILJS_APPLICATION_TEMPLATE_ID"),
        emailjs_tutor_template_id=os.getenv("EMAILJS_TUTOR_TEMPLATE_ID"),
        emailjs_student_template_id=os.getenv("EMAILJS_STUDENT_TEMPLATE_ID"),
        smtp_host=secrets["SMTP_HOST"],
        smtp_port=int(os.getenv("SMTP_PORT", "587")),
        smtp_user=secrets["SMTP_USER"],
        smtp_password=secrets["SMTP_PASSWORD"],
        smtp_use_ssl=_load_bool(os.getenv("SMTP_USE_SSL")),
        invite_organizer_email=os.getenv("INVITE_ORGANIZER_EMAIL"),
        invite_organizer_name=os.getenv("INVITE_ORGANIZER_NAME", "Peer Tutoring Program"),
        invite_uid_domain=os.getenv("INVITE_UID_DOMAIN", "ashesi.edu.gh"),
        display_timezone=os.getenv("DISPLAY_TIMEZONE", _DEFAULT_TZ),
        send_timeout_seconds=float(
            os.getenv("SEND_TIMEOUT_SECONDS", str(_DEFAULT_SEND_TIMEOUT))
        ),
        cors_origins=_load_json_list(os.getenv("CORS_ORIGINS")),
        ssm_path_prefix=prefix,
    )
