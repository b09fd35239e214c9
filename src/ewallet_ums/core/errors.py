"""Exception hierarchy shared by the persistence, runtime and HTTP layers."""


class UmsError(Exception):
    """Base class for all service errors."""


class NotFoundError(UmsError):
    """No live row matched a lookup, update or delete."""


class PersistenceError(UmsError):
    """Any other store-level failure (constraint, transport, timeout)."""


class DatabaseConnectionError(UmsError):
    """The connection pool is unavailable or the liveness probe failed."""


class ConfigurationError(UmsError):
    """A required configuration value is missing or invalid."""
