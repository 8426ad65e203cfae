"""Repository layer for checkpoint and run history persistence."""

import logging
from datetime import datetime
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import CheckpointRecord, SyncRun
from ..models import SyncReport

logger = logging.getLogger(__name__)


class CheckpointRepository:
    """Repository for the checkpoint row."""

    def __init__(self, session: Session):
        """Initialize the repository with a database session.

        Args:
            session: Session instance for database operations.
        """
        self.session = session

    def get(self, name: str) -> Optional[CheckpointRecord]:
        """Get the checkpoint row by name.

        Args:
            name: Checkpoint name.

        Returns:
            CheckpointRecord if found, None otherwise.
        """
        result = self.session.execute(
            select(CheckpointRecord).where(CheckpointRecord.name == name)
        )
        return result.scalar_one_or_none()

    def upsert(self, name: str, content: str) -> CheckpointRecord:
        """Create or overwrite the checkpoint row.

        Args:
            name: Checkpoint name.
            content: Serialized checkpoint.

        Returns:
            The stored CheckpointRecord.
        """
        record = self.get(name)
        if record is None:
            record = CheckpointRecord(name=name, content=content)
            self.session.add(record)
        else:
            record.content = content
            record.updated_at = datetime.utcnow()
        self.session.flush()
        return record


class SyncRunRepository:
    """Repository for sync run history."""

    def __init__(self, session: Session):
        self.session = session

    def create_from_report(self, report: SyncReport) -> SyncRun:
        """Store a finished run report.

        Args:
            report: Report returned by the sync driver.

        Returns:
            Created SyncRun instance.
        """
        run = SyncRun(
            id=report.id,
            feed_provider=report.feed_provider,
            status=report.status.value,
            state=report.state.value,
            window_start=report.window_start,
            window_end=report.window_end,
            resume_transaction_id=report.resume_transaction_id,
            total_fetched=report.total_fetched,
            total_incoming=report.total_incoming,
            total_skipped=report.total_skipped,
            total_posted=report.total_posted,
            total_unmatched=report.total_unmatched,
            error_message=report.error_message,
            started_at=report.started_at,
            finished_at=report.finished_at,
        )
        run.posted_transaction_ids = report.posted_transaction_ids
        self.session.add(run)
        self.session.flush()

        logger.info(f"Recorded sync run {run.id} with status {run.status}")
        return run

    def get_by_id(self, run_id: str) -> Optional[SyncRun]:
        result = self.session.execute(
            select(SyncRun).where(SyncRun.id == run_id)
        )
        return result.scalar_one_or_none()

    def list_recent(self, limit: int = 20) -> List[SyncRun]:
        """List the most recent runs, newest first.

        Args:
            limit: Maximum number of runs to return.

        Returns:
            List of SyncRun instances.
        """
        result = self.session.execute(
            select(SyncRun).order_by(SyncRun.started_at.desc()).limit(limit)
        )
        return list(result.scalars().all())
