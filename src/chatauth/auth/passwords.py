# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import secrets

from argon2 import PasswordHasher
from argon2.exceptions import HashingError as Argon2HashingError
from argon2.exceptions import InvalidHashError, VerificationError
from starlette.concurrency import run_in_threadpool

from chatauth.errors import HashingError

WORK_FACTOR = 10
SALT_BYTES = 16

_PH = PasswordHasher(time_cost=WORK_FACTOR, salt_len=SALT_BYTES)


def generate_salt() -> bytes:
    try:
        return secrets.token_bytes(SALT_BYTES)
    except (OSError, NotImplementedError) as exc:
        raise HashingError(str(exc)) from exc


def hash_password(plain: str) -> str:
    """Hash ``plain`` with a fresh salt. Equal inputs give different hashes."""
    if not plain:
        raise HashingError("Empty password")
    salt = generate_salt()
    try:
        return _PH.hash(plain, salt=salt)
    except (Argon2HashingError, TypeError, ValueError) as exc:
        raise HashingError(str(exc)) from exc


async def hash_password_async(plain: str) -> str:
    return await run_in_threadpool(hash_password, plain)


def verify_password(hash_value: str, plain: str) -> bool:
    if not hash_value or not plain:
        return False
    try:
        return _PH.verify(hash_value, plain)
    except (VerificationError, InvalidHashError):
        return False


async def verify_password_async(hash_value: str, plain: str) -> bool:
    return await run_in_threadpool(verify_password, hash_value, plain)
