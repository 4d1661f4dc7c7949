import asyncio
import threading

import pytest
import yaml

from chatauth.auth.accounts import Account, InMemoryAccountStore, YamlAccountStore, build_store
from chatauth.config import Settings
from chatauth.errors import StoreError


def _create(store, email="jane@example.com", full_name="Jane Doe"):
    return asyncio.run(store.create(full_name=full_name, email=email, password_hash="$argon2id$h"))


@pytest.mark.parametrize("kind", ["memory", "yaml"])
def test_create_assigns_id_timestamps_and_defaults(kind, memory_store, yaml_store):
    store = memory_store if kind == "memory" else yaml_store
    acc = _create(store)
    assert acc.id
    assert acc.profile_picture_url == ""
    assert acc.created_at is not None and acc.created_at == acc.updated_at
    assert asyncio.run(store.find_by_email("jane@example.com")) == acc
    assert asyncio.run(store.find_by_id(acc.id)) == acc


@pytest.mark.parametrize("kind", ["memory", "yaml"])
def test_lookup_is_exact_and_returns_none_when_missing(kind, memory_store, yaml_store):
    store = memory_store if kind == "memory" else yaml_store
    _create(store)
    assert asyncio.run(store.find_by_email("Jane@example.com")) is None
    assert asyncio.run(store.find_by_email("nobody@example.com")) is None
    assert asyncio.run(store.find_by_id("missing")) is None


@pytest.mark.parametrize("kind", ["memory", "yaml"])
def test_save_refreshes_updated_at(kind, memory_store, yaml_store):
    store = memory_store if kind == "memory" else yaml_store
    acc = _create(store)
    saved = asyncio.run(store.save(acc))
    assert saved.id == acc.id
    assert saved.created_at == acc.created_at
    assert saved.updated_at >= acc.updated_at


@pytest.mark.parametrize("kind", ["memory", "yaml"])
def test_save_of_unknown_account_raises(kind, memory_store, yaml_store):
    store = memory_store if kind == "memory" else yaml_store
    ghost = Account(id="ghost", email="ghost@example.com", full_name="G", password_hash="h")
    with pytest.raises(StoreError):
        asyncio.run(store.save(ghost))


def test_memory_store_does_not_enforce_uniqueness(memory_store):
    _create(memory_store)
    _create(memory_store)
    assert len(memory_store) == 2


def test_yaml_store_enforces_uniqueness(yaml_store):
    _create(yaml_store)
    with pytest.raises(StoreError, match="Duplicate key"):
        _create(yaml_store)


def test_yaml_file_layout_and_reload(yaml_store):
    acc = _create(yaml_store)
    raw = yaml.safe_load(yaml_store.path.read_text(encoding="utf-8"))
    entry = raw["accounts"]["jane@example.com"]
    assert entry["id"] == acc.id
    assert entry["password_hash"] == "$argon2id$h"
    assert "password" not in entry

    reopened = YamlAccountStore(yaml_store.path)
    again = asyncio.run(reopened.find_by_email("jane@example.com"))
    assert again == acc


def test_yaml_store_skips_malformed_entries(tmp_path):
    path = tmp_path / "accounts.yml"
    path.write_text(
        yaml.safe_dump({"accounts": {"a@x": "oops", "b@x": {"full_name": "no id"}, "c@x": {"id": "c1"}}}),
        encoding="utf-8",
    )
    store = YamlAccountStore(path)
    assert asyncio.run(store.find_by_email("a@x")) is None
    assert asyncio.run(store.find_by_email("b@x")) is None
    assert asyncio.run(store.find_by_email("c@x")).id == "c1"


def test_unreadable_yaml_raises_store_error(tmp_path):
    path = tmp_path / "accounts.yml"
    path.write_text("accounts: [unclosed", encoding="utf-8")
    with pytest.raises(StoreError):
        asyncio.run(YamlAccountStore(path).find_by_email("a@x"))


def test_build_store_picks_backend(tmp_path):
    assert isinstance(build_store(Settings()), InMemoryAccountStore)
    store = build_store(Settings(accounts_path=tmp_path / "a.yml"))
    assert isinstance(store, YamlAccountStore)


def test_yaml_file_io_runs_off_the_event_loop_thread(yaml_store, monkeypatch):
    threads = []
    original = YamlAccountStore._accounts

    def recording(self):
        threads.append(threading.current_thread())
        return original(self)

    monkeypatch.setattr(YamlAccountStore, "_accounts", recording)
    _create(yaml_store)
    asyncio.run(yaml_store.find_by_email("jane@example.com"))
    assert threads
    assert all(t is not threading.main_thread() for t in threads)


def test_yaml_concurrent_creates_keep_one_account(yaml_store):
    async def both():
        return await asyncio.gather(
            yaml_store.create(full_name="A", email="same@example.com", password_hash="h"),
            yaml_store.create(full_name="B", email="same@example.com", password_hash="h"),
            return_exceptions=True,
        )

    results = asyncio.run(both())
    assert sum(isinstance(r, Account) for r in results) == 1
    assert sum(isinstance(r, StoreError) for r in results) == 1
    raw = yaml.safe_load(yaml_store.path.read_text(encoding="utf-8"))
    assert list(raw["accounts"]) == ["same@example.com"]
