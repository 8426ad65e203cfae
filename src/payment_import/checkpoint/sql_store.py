"""Database-backed checkpoint store."""

from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..database import CheckpointRepository
from ..exceptions import CheckpointError
from .base import CheckpointStore


class SqlCheckpointStore(CheckpointStore):
    """Keeps the checkpoint text in one row of ``sync_checkpoints``."""

    def __init__(self, session_factory: sessionmaker, name: str, start_date: date):
        super().__init__(start_date)
        self.session_factory = session_factory
        self.name = name

    def _read(self) -> Optional[str]:
        try:
            with self.session_factory() as session:
                record = CheckpointRepository(session).get(self.name)
                return record.content if record else None
        except SQLAlchemyError as e:
            raise CheckpointError(f"Cannot read checkpoint {self.name}: {e}") from e

    def _write(self, content: str) -> None:
        try:
            with self.session_factory() as session:
                CheckpointRepository(session).upsert(self.name, content)
                session.commit()
        except SQLAlchemyError as e:
            raise CheckpointError(f"Cannot write checkpoint {self.name}: {e}") from e
