"""FastAPI dependency implementations."""

from fastapi import Request

from ewallet_ums.api.http.app_data import ApplicationDependencies
from ewallet_ums.core.services import DatabaseService, HealthCheckService


def get_database_service(request: Request) -> DatabaseService:
    """Get the shared database service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.database_service


def get_health_service(request: Request) -> HealthCheckService:
    """Get the health check service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.health_service
