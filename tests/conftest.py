import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from chatauth.app import create_app
from chatauth.auth.accounts import InMemoryAccountStore, YamlAccountStore
from chatauth.config import Settings


@pytest.fixture()
def settings() -> Settings:
    return Settings(secret_key="test-secret-key-for-testing", environment="test")


@pytest.fixture()
def prod_settings() -> Settings:
    return Settings(secret_key="test-secret-key-for-testing", environment="production")


@pytest.fixture()
def memory_store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture()
def yaml_store(tmp_path: Path) -> YamlAccountStore:
    return YamlAccountStore(tmp_path / "data" / "accounts.yml")


@pytest.fixture()
def client(settings, memory_store):
    """App wired to an empty in-memory store."""
    app = create_app(settings=settings, store=memory_store)
    return TestClient(app)


@pytest.fixture()
def jane() -> dict:
    return {"fullName": "Jane Doe", "email": "jane@example.com", "password": "password123"}
