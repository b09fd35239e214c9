from .db_migrate import find_revision_files, run_migrations
from .db_session import DatabaseService

__all__ = ["DatabaseService", "find_revision_files", "run_migrations"]
