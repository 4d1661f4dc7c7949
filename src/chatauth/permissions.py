# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request

from chatauth.auth.accounts import Account, AccountStore
from chatauth.auth.session import verify_session
from chatauth.config import Settings
from chatauth.errors import TokenError


async def load_account_from_request(
    request: Request, store: AccountStore, settings: Settings
) -> Optional[Account]:
    token = request.cookies.get(settings.cookie_name, "")
    try:
        sess = verify_session(token, settings)
    except TokenError:
        # No signing secret configured: no cookie can be trusted.
        return None
    if not sess:
        return None
    return await store.find_by_id(sess.account_id)


async def require_account(request: Request) -> Account:
    acc = await load_account_from_request(request, request.app.state.store, request.app.state.settings)
    if acc:
        return acc
    raise HTTPException(status_code=401, detail="Unauthorized")
