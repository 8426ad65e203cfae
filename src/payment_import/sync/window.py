"""Feed window determination."""

import logging
from datetime import date, timedelta
from typing import Optional

from ..models import Checkpoint, SyncWindow

logger = logging.getLogger(__name__)


def query_end_date(today: Optional[date] = None) -> date:
    """Last day to query: yesterday. The current day may still be incomplete."""
    return (today or date.today()) - timedelta(days=1)


def determine_window(
    configured_start: date,
    checkpoint: Checkpoint,
    today: Optional[date] = None,
) -> SyncWindow:
    """Compute the feed window for the next run.

    A checkpoint without a pending transaction id marks its date as fully
    processed, so the window starts the day after. With a pending id the
    window starts on the checkpoint date and the id is resumed from. A
    checkpoint that falls before the configured start date is ignored.

    Args:
        configured_start: Earliest date ever synchronized.
        checkpoint: Current checkpoint.
        today: Reference day; defaults to ``date.today()``.

    Returns:
        SyncWindow ending yesterday.
    """
    end_date = query_end_date(today)

    if checkpoint.fresh:
        return SyncWindow(start_date=configured_start, end_date=end_date)

    start_date = checkpoint.last_date
    resume_transaction_id = checkpoint.last_transaction_id
    if not resume_transaction_id:
        start_date = start_date + timedelta(days=1)

    if start_date < configured_start:
        logger.info(
            f"Checkpoint {checkpoint.last_date.isoformat()} precedes configured start "
            f"{configured_start.isoformat()}, starting from configuration"
        )
        return SyncWindow(start_date=configured_start, end_date=end_date)

    return SyncWindow(
        start_date=start_date,
        end_date=end_date,
        resume_transaction_id=resume_transaction_id,
    )
