"""Process environment snapshot.

The environment is read once, merged with an optional ``.env`` file and frozen.
Real environment variables take precedence over values from the file.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from dotenv import dotenv_values
from loguru import logger

from ewallet_ums.core.errors import ConfigurationError


class EnvironmentStore:
    """Read-only view over environment variables, loaded at most once."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values: Mapping[str, str] | None = None

    @property
    def loaded(self) -> bool:
        return self._values is not None

    def load(self, env_file: str | Path = ".env") -> Mapping[str, str]:
        """Load the environment on first call; later calls return the same snapshot."""
        with self._lock:
            if self._values is not None:
                return self._values

            values: dict[str, str] = {}
            path = Path(env_file)
            if path.is_file():
                values.update(
                    {k: v for k, v in dotenv_values(path).items() if v is not None}
                )
                logger.debug("Loaded {} entries from {}", len(values), path)
            else:
                logger.warning(
                    "No {} file found, using system environment variables", path
                )

            values.update(os.environ)
            self._values = MappingProxyType(values)
            logger.info("Configuration loaded successfully")
            return self._values

    def get(self, key: str, default: str = "") -> str:
        """Return the value for ``key``, or ``default`` when unset or empty."""
        values = self._values if self._values is not None else self.load()
        value = values.get(key)
        if value:
            return value
        return default

    def require(self, key: str) -> str:
        value = self.get(key)
        if not value:
            logger.error("Required environment variable {} is not set", key)
            raise ConfigurationError(f"required environment variable {key} is not set")
        return value

    def reset(self) -> None:
        """Forget the snapshot so the next lookup reloads it (tests only)."""
        with self._lock:
            self._values = None


_store = EnvironmentStore()


def setup_environment(env_file: str | Path = ".env") -> Mapping[str, str]:
    return _store.load(env_file)


def get_env(key: str, default: str = "") -> str:
    return _store.get(key, default)


def get_required_env(key: str) -> str:
    return _store.require(key)


def get_environment_store() -> EnvironmentStore:
    return _store
