# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from itsdangerous import BadSignature, URLSafeTimedSerializer

from chatauth.config import Settings
from chatauth.errors import TokenError

SESSION_MAX_AGE_SECONDS = 7 * 24 * 60 * 60  # 7 days
SESSION_MAX_AGE_MS = SESSION_MAX_AGE_SECONDS * 1000


class CookieSink(Protocol):
    def set_cookie(self, key: str, value: str = "", **kwargs: Any) -> Any:
        ...


@dataclass(frozen=True)
class SessionData:
    account_id: str
    expires_at: int


def _serializer(settings: Settings) -> URLSafeTimedSerializer:
    if not settings.secret_key:
        raise TokenError("Missing signing secret (CHATAUTH_SECRET_KEY)")
    return URLSafeTimedSerializer(secret_key=settings.secret_key, salt=settings.session_salt)


def sign_session(account_id: Any, settings: Settings) -> str:
    s = _serializer(settings)
    payload = {"userId": account_id, "exp": int(time.time()) + SESSION_MAX_AGE_SECONDS}
    try:
        return s.dumps(payload)
    except (TypeError, ValueError) as exc:
        raise TokenError(str(exc)) from exc


def cookie_settings(settings: Settings) -> dict:
    return {"httponly": True, "samesite": "strict", "secure": settings.is_production}


def issue_session(account_id: Any, response: CookieSink, settings: Settings) -> str:
    """Sign a session for ``account_id`` and attach it to ``response`` as a cookie.

    Returns the raw token. Signing or cookie failures raise ``TokenError``.
    """
    token = sign_session(account_id, settings)
    try:
        response.set_cookie(
            settings.cookie_name,
            token,
            max_age=SESSION_MAX_AGE_SECONDS,
            **cookie_settings(settings),
        )
    except Exception as exc:
        raise TokenError(str(exc)) from exc
    return token


def clear_session(response: Any, settings: Settings) -> None:
    response.delete_cookie(settings.cookie_name, **cookie_settings(settings))


def verify_session(
    token: str, settings: Settings, *, max_age: int = SESSION_MAX_AGE_SECONDS
) -> Optional[SessionData]:
    if not token:
        return None
    s = _serializer(settings)
    try:
        data = s.loads(token, max_age=max_age)
    except BadSignature:
        # SignatureExpired and BadTimeSignature are both BadSignature
        return None
    if not isinstance(data, dict):
        return None
    account_id = data.get("userId")
    exp = data.get("exp")
    if account_id in (None, "") or not isinstance(exp, int):
        return None
    if exp <= int(time.time()):
        return None
    return SessionData(account_id=str(account_id), expires_at=exp)
