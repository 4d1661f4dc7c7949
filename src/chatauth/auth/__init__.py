# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication building blocks.

This package provides:
- Signup field validation (tagged result, no side effects)
- Password hashing/verification (argon2, fixed work factor)
- Account store contract plus in-memory and YAML implementations
- Signed session cookies (itsdangerous)
"""
