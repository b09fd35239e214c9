"""Core services exports."""

from .database.db_session import DatabaseService
from .health_service import HealthCheckService, HealthReport

__all__ = [
    "DatabaseService",
    "HealthCheckService",
    "HealthReport",
]
