"""Database module for checkpoint and run history persistence."""

from .models import (
    Base,
    CheckpointRecord,
    SyncRun,
)
from .session import (
    get_database_url,
    init_db,
    close_db,
    create_engine,
    get_session_factory,
    DatabaseManager,
)
from .repository import (
    CheckpointRepository,
    SyncRunRepository,
)

__all__ = [
    # Models
    "Base",
    "CheckpointRecord",
    "SyncRun",
    # Session management
    "get_database_url",
    "init_db",
    "close_db",
    "create_engine",
    "get_session_factory",
    "DatabaseManager",
    # Repositories
    "CheckpointRepository",
    "SyncRunRepository",
]
