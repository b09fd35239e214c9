from dataclasses import dataclass

from ewallet_ums.core.services import DatabaseService, HealthCheckService


@dataclass
class ApplicationDependencies:
    database_service: DatabaseService
    health_service: HealthCheckService
