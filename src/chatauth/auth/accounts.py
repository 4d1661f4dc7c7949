# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

import yaml
from starlette.concurrency import run_in_threadpool

from chatauth.config import Settings
from chatauth.errors import StoreError

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Account:
    id: str
    email: str
    full_name: str
    password_hash: str
    profile_picture_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_public(self) -> dict:
        """Response projection. Never includes the password hash."""
        return {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "profilePictureUrl": self.profile_picture_url,
        }


class AccountStore(Protocol):
    async def find_by_email(self, email: str) -> Optional[Account]:
        ...

    async def find_by_id(self, account_id: str) -> Optional[Account]:
        ...

    async def create(self, *, full_name: str, email: str, password_hash: str) -> Optional[Account]:
        ...

    async def save(self, account: Account) -> Account:
        ...


class InMemoryAccountStore:
    """Dict-backed store. Email uniqueness is NOT enforced on create."""

    def __init__(self) -> None:
        self._by_id: Dict[str, Account] = {}

    def __len__(self) -> int:
        return len(self._by_id)

    async def find_by_email(self, email: str) -> Optional[Account]:
        for acc in self._by_id.values():
            if acc.email == email:
                return acc
        return None

    async def find_by_id(self, account_id: str) -> Optional[Account]:
        return self._by_id.get(account_id)

    async def create(self, *, full_name: str, email: str, password_hash: str) -> Optional[Account]:
        now = _now()
        acc = Account(
            id=_new_id(),
            email=email,
            full_name=full_name,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        self._by_id[acc.id] = acc
        return acc

    async def save(self, account: Account) -> Account:
        if account.id not in self._by_id:
            raise StoreError(f"Account {account.id} does not exist")
        saved = replace(account, updated_at=_now())
        self._by_id[saved.id] = saved
        return saved


def _parse_ts(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    return datetime.fromisoformat(str(value))


def _account_from_yaml(email: str, data: dict) -> Optional[Account]:
    account_id = str(data.get("id") or "").strip()
    if not account_id:
        return None
    return Account(
        id=account_id,
        email=email,
        full_name=str(data.get("full_name") or ""),
        password_hash=str(data.get("password_hash") or ""),
        profile_picture_url=str(data.get("profile_picture_url") or ""),
        created_at=_parse_ts(data.get("created_at")),
        updated_at=_parse_ts(data.get("updated_at")),
    )


def _account_to_yaml(acc: Account) -> dict:
    return {
        "id": acc.id,
        "full_name": acc.full_name,
        "password_hash": acc.password_hash,
        "profile_picture_url": acc.profile_picture_url,
        "created_at": acc.created_at.isoformat() if acc.created_at else None,
        "updated_at": acc.updated_at.isoformat() if acc.updated_at else None,
    }


class YamlAccountStore:
    """Accounts kept in a YAML file keyed by email.

    File layout::

        version: 1
        accounts:
          jane@example.com:
            id: ...
            full_name: ...
            password_hash: ...

    Reads are cached on the file mtime. ``create`` rejects an email that is
    already a key, so this store enforces uniqueness itself; the check and the
    write happen under one lock.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._cache: Tuple[float, Dict[str, Account]] = (0.0, {})
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Account]:
        if not self.path.exists():
            return {}
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise StoreError(f"Cannot read accounts file {self.path}: {exc}") from exc
        entries = (raw.get("accounts") or {}) if isinstance(raw, dict) else {}
        out: Dict[str, Account] = {}
        for email, data in entries.items():
            if not isinstance(data, dict):
                continue
            acc = _account_from_yaml(str(email), data)
            if acc is not None:
                out[acc.email] = acc
        return out

    def _accounts(self) -> Dict[str, Account]:
        mtime = self.path.stat().st_mtime if self.path.exists() else 0.0
        cached_mtime, cached = self._cache
        if mtime and mtime == cached_mtime:
            return cached
        accounts = self._load()
        self._cache = (mtime, accounts)
        return accounts

    def _write(self, accounts: Dict[str, Account]) -> None:
        raw = {
            "version": 1,
            "accounts": {email: _account_to_yaml(acc) for email, acc in accounts.items()},
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(yaml.safe_dump(raw, sort_keys=False, allow_unicode=True), encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Cannot write accounts file {self.path}: {exc}") from exc
        # Force a reload on next read; mtime resolution may hide quick rewrites.
        self._cache = (0.0, {})

    def _find_by_id(self, account_id: str) -> Optional[Account]:
        for acc in self._accounts().values():
            if acc.id == account_id:
                return acc
        return None

    def _create(self, full_name: str, email: str, password_hash: str) -> Account:
        with self._lock:
            accounts = dict(self._accounts())
            if email in accounts:
                raise StoreError(f"Duplicate key: email {email!r} already exists")
            now = _now()
            acc = Account(
                id=_new_id(),
                email=email,
                full_name=full_name,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
            accounts[email] = acc
            self._write(accounts)
        logger.info("Account %s written to %s", acc.id, self.path)
        return acc

    def _save(self, account: Account) -> Account:
        with self._lock:
            accounts = dict(self._accounts())
            current = accounts.get(account.email)
            if current is None or current.id != account.id:
                raise StoreError(f"Account {account.id} does not exist")
            saved = replace(account, updated_at=_now())
            accounts[saved.email] = saved
            self._write(accounts)
        return saved

    # File I/O runs in the threadpool so a slow disk only suspends its request.

    async def find_by_email(self, email: str) -> Optional[Account]:
        accounts = await run_in_threadpool(self._accounts)
        return accounts.get(email)

    async def find_by_id(self, account_id: str) -> Optional[Account]:
        return await run_in_threadpool(self._find_by_id, account_id)

    async def create(self, *, full_name: str, email: str, password_hash: str) -> Optional[Account]:
        return await run_in_threadpool(self._create, full_name, email, password_hash)

    async def save(self, account: Account) -> Account:
        return await run_in_threadpool(self._save, account)


def build_store(settings: Settings) -> AccountStore:
    if settings.accounts_path:
        return YamlAccountStore(settings.accounts_path)
    return InMemoryAccountStore()
