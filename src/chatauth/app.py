# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request, Response

from chatauth.auth.accounts import Account, AccountStore, build_store
from chatauth.auth.session import clear_session
from chatauth.config import Settings
from chatauth.permissions import require_account
from chatauth.services.login_service import login
from chatauth.services.signup_service import SignupService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth")


async def _read_json(request: Request):
    # Absent or undecodable bodies go through as None; the services answer 500.
    try:
        return await request.json()
    except ValueError:
        return None


# ------------------ Routes ------------------


@router.post("/signup")
async def signup_post(request: Request, response: Response):
    service: SignupService = request.app.state.signup_service
    payload = await _read_json(request)
    result = await service.signup(payload, response)
    response.status_code = result.status_code
    return result.body


@router.post("/login")
async def login_post(request: Request, response: Response):
    payload = await _read_json(request)
    status_code, body = await login(request.app.state.store, request.app.state.settings, payload, response)
    response.status_code = status_code
    return body


@router.post("/logout")
def logout_post(request: Request, response: Response):
    clear_session(response, request.app.state.settings)
    return {"message": "Logged out successfully"}


@router.get("/check")
def check_get(account: Account = Depends(require_account)):
    return account.to_public()


def create_app(settings: Optional[Settings] = None, store: Optional[AccountStore] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    store = store if store is not None else build_store(settings)

    app = FastAPI(title="chatauth")
    app.state.settings = settings
    app.state.store = store
    app.state.signup_service = SignupService(store, settings)
    app.include_router(router)

    if not settings.secret_key:
        logger.warning("No signing secret configured; session issuance will fail")
    return app


app = create_app()
