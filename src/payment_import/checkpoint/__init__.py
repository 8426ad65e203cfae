"""Checkpoint persistence for the incremental sync."""

from typing import Optional

from sqlalchemy.orm import sessionmaker

from ..config import SyncConfig
from .base import CheckpointStore
from .file_store import FileCheckpointStore
from .sql_store import SqlCheckpointStore


def get_checkpoint_store(
    config: SyncConfig,
    session_factory: Optional[sessionmaker] = None,
) -> CheckpointStore:
    """Factory function to get the configured checkpoint store.

    Args:
        config: Sync configuration.
        session_factory: Session factory for the database backend.

    Returns:
        CheckpointStore implementation for the configured backend.

    Raises:
        ValueError: If the backend is not supported or lacks a session factory.
    """
    if config.checkpoint_backend == "file":
        return FileCheckpointStore(config.checkpoint_file, config.start_date)
    if config.checkpoint_backend == "database":
        if session_factory is None:
            raise ValueError("The database checkpoint backend needs a session factory")
        return SqlCheckpointStore(session_factory, config.checkpoint_name, config.start_date)
    raise ValueError(f"Unsupported checkpoint backend: {config.checkpoint_backend}")


__all__ = [
    "CheckpointStore",
    "FileCheckpointStore",
    "SqlCheckpointStore",
    "get_checkpoint_store",
]
