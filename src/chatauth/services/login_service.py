# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from chatauth.auth.accounts import AccountStore
from chatauth.auth.passwords import verify_password_async
from chatauth.auth.session import CookieSink, issue_session
from chatauth.auth.validation import MSG_REQUIRED, require_mapping
from chatauth.config import Settings
from chatauth.services.signup_service import server_error_body

logger = logging.getLogger(__name__)

MSG_INVALID_CREDENTIALS = "Invalid credentials"


async def login(
    store: AccountStore,
    settings: Settings,
    payload: Optional[Mapping[str, Any]],
    response: CookieSink,
) -> Tuple[int, Dict[str, Any]]:
    """Check email/password and issue a fresh session cookie.

    Unknown email and wrong password give the same answer.
    """
    try:
        payload = require_mapping(payload)
        email = payload.get("email")
        password = payload.get("password")
        if not email or not password:
            return 400, {"message": MSG_REQUIRED}

        account = await store.find_by_email(email)
        if account is None or not await verify_password_async(account.password_hash, password):
            logger.info("Login rejected")
            return 400, {"message": MSG_INVALID_CREDENTIALS}

        issue_session(account.id, response, settings)
        return 200, account.to_public()
    except Exception as exc:
        logger.error("Login error: %s", exc, exc_info=exc)
        return 500, server_error_body(exc)
