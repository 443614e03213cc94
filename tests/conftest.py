from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from minitwit.auth import AuthService
from minitwit.db import Store
from minitwit.feed import FeedAggregator
from minitwit.graph import SocialGraphManager
from minitwit.hashing import PasswordHasher

# cheap hashes keep the suite fast
TEST_HASH_METHOD = "pbkdf2:sha256:1000"


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'minitwit.db'}"


@pytest.fixture()
def store(database_url: str) -> Store:
    store = Store(database_url)
    store.init_db()
    return store


@pytest.fixture()
def hasher() -> PasswordHasher:
    return PasswordHasher(method=TEST_HASH_METHOD)


@pytest.fixture()
def auth(store: Store, hasher: PasswordHasher) -> AuthService:
    return AuthService(store, hasher)


@pytest.fixture()
def graph(store: Store) -> SocialGraphManager:
    return SocialGraphManager(store)


@pytest.fixture()
def feed(store: Store, graph: SocialGraphManager) -> FeedAggregator:
    return FeedAggregator(store, graph)


@pytest.fixture()
def make_user(auth: AuthService):
    def _make(username: str, password: str = "secret"):
        return auth.register(username, f"{username}@example.com", password, password)

    return _make
