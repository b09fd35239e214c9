"""Schema migrations applied at startup through alembic."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from loguru import logger
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine


def find_revision_files(directory: Path) -> list[Path]:
    """Return the revision scripts of an alembic directory in lexical order."""
    versions = directory / "versions"
    if not versions.is_dir():
        return []
    return sorted(
        path for path in versions.glob("*.py") if not path.name.startswith("__")
    )


def build_alembic_config(directory: Path) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(directory))
    return cfg


def _upgrade_to_head(connection: Connection, cfg: Config) -> None:
    # env.py picks up this connection instead of creating its own engine
    cfg.attributes["connection"] = connection
    command.upgrade(cfg, "head")


async def run_migrations(engine: AsyncEngine, directory: Path) -> bool:
    """Upgrade the schema to the latest revision.

    A missing or empty migration directory is skipped so that environments
    managing their schema externally can still start. Returns True when alembic
    ran; an already up-to-date schema counts as success.
    """
    if not directory.is_dir():
        logger.warning("Migration directory does not exist: {}", directory)
        return False

    revisions = find_revision_files(directory)
    if not revisions:
        logger.warning("No migration files found in {}", directory)
        return False

    cfg = build_alembic_config(directory)
    async with engine.begin() as connection:
        await connection.run_sync(_upgrade_to_head, cfg)

    logger.info("Found {} migration files in {}", len(revisions), directory)
    return True
