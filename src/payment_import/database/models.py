"""SQLAlchemy models for checkpoint and run history persistence."""

import uuid
import json
from datetime import datetime, date
from typing import Optional, List

from sqlalchemy import (
    String,
    Integer,
    Date,
    DateTime,
    Text,
    Index,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class CheckpointRecord(Base):
    """Single checkpoint blob, one row per named feed."""
    __tablename__ = "sync_checkpoints"

    name: Mapped[str] = mapped_column(String(100), primary_key=True)
    # Two-line checkpoint text: date, optional transaction id
    content: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<CheckpointRecord(name={self.name}, content={self.content!r})>"


class SyncRun(Base):
    """History entry for one sync run."""
    __tablename__ = "sync_runs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    feed_provider: Mapped[str] = mapped_column(String(50), nullable=False, default="fio")
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    state: Mapped[str] = mapped_column(String(30), nullable=False)
    window_start: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    window_end: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    resume_transaction_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    total_fetched: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_incoming: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_posted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_unmatched: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    posted_ids_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    started_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    finished_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_sync_runs_started_at", "started_at"),
        Index("ix_sync_runs_status", "status"),
    )

    @property
    def posted_transaction_ids(self) -> List[str]:
        """Get posted transaction ids as a list."""
        if self.posted_ids_json:
            return json.loads(self.posted_ids_json)
        return []

    @posted_transaction_ids.setter
    def posted_transaction_ids(self, value: Optional[List[str]]) -> None:
        """Set posted transaction ids from a list."""
        self.posted_ids_json = json.dumps(list(value)) if value else None

    def to_dict(self) -> dict:
        """Convert the run to a dictionary."""
        return {
            "id": self.id,
            "feed_provider": self.feed_provider,
            "status": self.status,
            "state": self.state,
            "window_start": self.window_start.isoformat() if self.window_start else None,
            "window_end": self.window_end.isoformat() if self.window_end else None,
            "resume_transaction_id": self.resume_transaction_id,
            "total_fetched": self.total_fetched,
            "total_incoming": self.total_incoming,
            "total_skipped": self.total_skipped,
            "total_posted": self.total_posted,
            "total_unmatched": self.total_unmatched,
            "posted_transaction_ids": self.posted_transaction_ids,
            "error_message": self.error_message,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }

    def __repr__(self) -> str:
        return f"<SyncRun(id={self.id}, status={self.status}, posted={self.total_posted})>"
