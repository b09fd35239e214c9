from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from ewallet_ums.core.errors import DatabaseConnectionError


class DummyDatabase:
    """Stands in for DatabaseService in HTTP and health tests."""

    def __init__(self, healthy: bool = True, probe_delay: float = 0.0):
        self.healthy = healthy
        self.probe_delay = probe_delay
        self.init_calls = 0
        self.close_calls = 0
        self.probe_timeouts: list[float] = []

    async def init(self) -> None:
        self.init_calls += 1

    async def close(self) -> None:
        self.close_calls += 1

    async def probe(self, timeout: float) -> None:
        self.probe_timeouts.append(timeout)
        if self.probe_delay:
            await asyncio.sleep(self.probe_delay)
        if not self.healthy:
            raise DatabaseConnectionError("connection refused")

    def get_pool_status(self) -> dict[str, int]:
        return {}


class FailingInitDatabase(DummyDatabase):
    async def init(self) -> None:
        await super().init()
        raise DatabaseConnectionError("failed to initialize database: refused")


class HangingDatabase:
    """Every borrowed connection blocks far longer than any test timeout."""

    @asynccontextmanager
    async def connect(self):
        await asyncio.sleep(10)
        yield None  # pragma: no cover

    @asynccontextmanager
    async def begin(self):
        await asyncio.sleep(10)
        yield None  # pragma: no cover


class ExplodingHealthService:
    async def check(self):
        raise RuntimeError("unexpected failure")
