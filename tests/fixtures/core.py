from __future__ import annotations

from collections.abc import Callable, Generator
from itertools import count

import pytest

from ewallet_ums.entities.core.user import User
from ewallet_ums.runtime.config import AppConfig, ConfigData
from ewallet_ums.runtime.environment import get_environment_store

_sequence = count(1)


@pytest.fixture
def fresh_environment() -> Generator[None]:
    """Drop the cached environment snapshot before and after the test."""
    store = get_environment_store()
    store.reset()
    yield
    store.reset()


@pytest.fixture
def test_config() -> ConfigData:
    return ConfigData(app=AppConfig(environment="test"))


@pytest.fixture
def user_factory() -> Callable[..., User]:
    def _make_user(**overrides) -> User:
        n = next(_sequence)
        fields = {
            "email": f"user{n}@example.com",
            "phone": f"+6281200000{n:03d}",
            "full_name": f"User {n}",
            "password_hash": f"hash-{n}",
        }
        fields.update(overrides)
        return User(**fields)

    return _make_user
