# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

MIN_PASSWORD_LENGTH = 6

MSG_REQUIRED = "All fields are required"
MSG_PASSWORD_SHORT = "Password too short"
MSG_INVALID_EMAIL = "Invalid email address"


@dataclass(frozen=True)
class SignupPayload:
    full_name: str
    email: str
    password: str


@dataclass(frozen=True)
class Valid:
    payload: SignupPayload


@dataclass(frozen=True)
class Invalid:
    reason: str


ValidationResult = Union[Valid, Invalid]


def require_mapping(raw: Any) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise TypeError("Request body must be a JSON object")
    return raw


def _missing(value: Any) -> bool:
    # Whitespace-only values count as present; nothing is trimmed.
    return value is None or value == ""


def validate_signup(raw: Mapping[str, Any]) -> ValidationResult:
    """Check presence and shape of the signup fields.

    Extra keys in ``raw`` are ignored. Checks run in a fixed order: presence,
    password length, then the ``@`` rule on the email. A non-mapping ``raw``
    or a present non-string field raises ``TypeError``; that is a broken
    request, not a validation failure.
    """
    raw = require_mapping(raw)
    full_name = raw.get("fullName")
    email = raw.get("email")
    password = raw.get("password")

    if _missing(full_name) or _missing(email) or _missing(password):
        return Invalid(MSG_REQUIRED)
    for name, value in (("fullName", full_name), ("email", email), ("password", password)):
        if not isinstance(value, str):
            raise TypeError(f"Field {name!r} must be a string")
    if len(password) < MIN_PASSWORD_LENGTH:
        return Invalid(MSG_PASSWORD_SHORT)
    if "@" not in email:
        return Invalid(MSG_INVALID_EMAIL)

    return Valid(SignupPayload(full_name=full_name, email=email, password=password))
