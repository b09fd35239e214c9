from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio

from ewallet_ums.core.services import DatabaseService
from ewallet_ums.entities.core.user import UserRepository
from ewallet_ums.runtime.config import DatabaseConfig

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


def sqlite_config(path: Path, migrations_dir: Path = MIGRATIONS_DIR) -> DatabaseConfig:
    return DatabaseConfig(
        url=f"sqlite+aiosqlite:///{path}",
        migrations_dir=str(migrations_dir),
        ping_timeout=5.0,
    )


@pytest.fixture
def database_config(tmp_path: Path) -> DatabaseConfig:
    return sqlite_config(tmp_path / "ums.db")


@pytest_asyncio.fixture
async def database(database_config: DatabaseConfig) -> AsyncGenerator[DatabaseService]:
    """A migrated SQLite database, one file per test."""
    service = DatabaseService(database_config)
    await service.init()
    try:
        yield service
    finally:
        await service.close()


@pytest.fixture
def user_repository(database: DatabaseService) -> UserRepository:
    return UserRepository(database)
