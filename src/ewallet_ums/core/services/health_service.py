"""Liveness aggregation for the /healthcheck endpoint."""

from dataclasses import dataclass
from typing import Protocol

from loguru import logger

HEALTH_CHECK_TIMEOUT = 3.0
STATUS_HEALTHY = "healthy"
STATUS_UNHEALTHY = "unhealthy - database connection failed"


class Probeable(Protocol):
    async def probe(self, timeout: float) -> None: ...


@dataclass(frozen=True)
class HealthReport:
    status: str
    error: Exception | None = None

    @property
    def healthy(self) -> bool:
        return self.error is None


class HealthCheckService:
    """Turns the database probe into a status string; keeps no state of its own."""

    def __init__(self, database: Probeable, timeout: float = HEALTH_CHECK_TIMEOUT) -> None:
        self._database = database
        self._timeout = timeout

    async def check(self) -> HealthReport:
        try:
            await self._database.probe(self._timeout)
        except Exception as e:
            logger.warning("Health check failed: {}", e)
            return HealthReport(status=STATUS_UNHEALTHY, error=e)
        return HealthReport(status=STATUS_HEALTHY)
