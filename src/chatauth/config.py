# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_COOKIE_NAME = "jwt"
DEFAULT_SESSION_SALT = "chatauth.session.v1"

_TRUTHY = {"1", "true", "yes", "y"}


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup and passed around."""

    secret_key: Optional[str] = None
    environment: str = "development"
    cookie_name: str = DEFAULT_COOKIE_NAME
    session_salt: str = DEFAULT_SESSION_SALT
    accounts_path: Optional[Path] = None
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        accounts = (env.get("CHATAUTH_ACCOUNTS_PATH") or "").strip()
        return cls(
            secret_key=env.get("CHATAUTH_SECRET_KEY") or env.get("SECRET_KEY") or None,
            environment=(env.get("CHATAUTH_ENV") or env.get("NODE_ENV") or "development").strip().lower(),
            cookie_name=env.get("CHATAUTH_COOKIE_NAME", DEFAULT_COOKIE_NAME),
            session_salt=env.get("CHATAUTH_SESSION_SALT", DEFAULT_SESSION_SALT),
            accounts_path=Path(accounts).resolve() if accounts else None,
            log_level=env.get("CHATAUTH_LOG_LEVEL", "INFO").upper(),
            host=env.get("CHATAUTH_HOST", "0.0.0.0"),
            port=int(env.get("CHATAUTH_PORT", "8000")),
            reload=env.get("CHATAUTH_RELOAD", "false").lower() in _TRUTHY,
        )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
