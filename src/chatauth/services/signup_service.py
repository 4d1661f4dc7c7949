# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from chatauth.auth.accounts import AccountStore
from chatauth.auth.passwords import hash_password_async
from chatauth.auth.session import CookieSink, issue_session
from chatauth.auth.validation import Invalid, validate_signup
from chatauth.config import Settings
from chatauth.errors import ConflictError, PersistenceError, SignupError, ValidationError

logger = logging.getLogger(__name__)

MSG_EMAIL_TAKEN = "Email is already registered"
MSG_INVALID_USER_DATA = "Invalid user data"
MSG_SERVER_ERROR = "Server error"

Hasher = Callable[[str], Awaitable[str]]
Issuer = Callable[[Any, CookieSink, Settings], str]


class SignupState(str, Enum):
    VALIDATING = "validating"
    CHECKING_DUPLICATE = "checking_duplicate"
    HASHING = "hashing"
    PERSISTING = "persisting"
    ISSUING_TOKEN = "issuing_token"
    FINALIZING = "finalizing"
    RESPONDING = "responding"
    FAILED = "failed"


@dataclass(frozen=True)
class SignupResult:
    status_code: int
    body: Dict[str, Any]
    state: SignupState
    failed_at: Optional[SignupState] = None
    token: Optional[str] = None


def server_error_body(exc: BaseException) -> Dict[str, Any]:
    body: Dict[str, Any] = {"message": MSG_SERVER_ERROR}
    if str(exc):
        body["error"] = str(exc)
    return body


class SignupService:
    """Registration flow: validate, check duplicate, hash, create, issue, save.

    Each step raises on failure and ``signup`` is the only place that catches.
    Two limitations are kept as-is: the duplicate check and the create are not
    atomic, and a failing ``save`` leaves the already created account behind.
    """

    def __init__(
        self,
        store: AccountStore,
        settings: Settings,
        *,
        hasher: Hasher = hash_password_async,
        issuer: Issuer = issue_session,
    ) -> None:
        self.store = store
        self.settings = settings
        self._hash = hasher
        self._issue = issuer

    async def signup(self, payload: Optional[Mapping[str, Any]], response: CookieSink) -> SignupResult:
        state = SignupState.VALIDATING
        try:
            result = validate_signup(payload)
            if isinstance(result, Invalid):
                raise ValidationError(result.reason)
            fields = result.payload

            state = SignupState.CHECKING_DUPLICATE
            if await self.store.find_by_email(fields.email) is not None:
                raise ConflictError(MSG_EMAIL_TAKEN)

            state = SignupState.HASHING
            password_hash = await self._hash(fields.password)

            state = SignupState.PERSISTING
            account = await self.store.create(
                full_name=fields.full_name,
                email=fields.email,
                password_hash=password_hash,
            )
            if account is None:
                raise PersistenceError(MSG_INVALID_USER_DATA)

            state = SignupState.ISSUING_TOKEN
            token = self._issue(account.id, response, self.settings)

            state = SignupState.FINALIZING
            try:
                account = await self.store.save(account)
            except Exception:
                # No rollback: the account row already exists at this point.
                logger.warning("Account %s created but final save failed", account.id)
                raise

            state = SignupState.RESPONDING
            logger.info("Account %s registered", account.id)
            return SignupResult(201, account.to_public(), SignupState.RESPONDING, token=token)

        except Exception as exc:
            if isinstance(exc, SignupError) and exc.status_code < 500:
                logger.info("Signup rejected at %s: %s", state.value, exc)
                return SignupResult(exc.status_code, {"message": str(exc)}, SignupState.FAILED, failed_at=state)
            logger.error("Signup error at %s: %s", state.value, exc, exc_info=exc)
            return SignupResult(500, server_error_body(exc), SignupState.FAILED, failed_at=state)
