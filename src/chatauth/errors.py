# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations


class SignupError(Exception):
    """Base class for failures raised by the signup/session flow."""

    status_code = 500


class ValidationError(SignupError):
    status_code = 400


class ConflictError(SignupError):
    status_code = 400


class PersistenceError(SignupError):
    """The store answered but returned no record."""

    status_code = 400


class InfrastructureError(SignupError):
    status_code = 500


class HashingError(InfrastructureError):
    pass


class TokenError(InfrastructureError):
    pass


class StoreError(InfrastructureError):
    """The account store raised (connectivity, duplicate key, bad file)."""
