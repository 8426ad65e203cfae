"""Skipping of transactions already posted by an earlier run."""

import logging
from typing import List, Optional, Sequence

from ..exceptions import ConsistencyError
from ..models import Transaction, SyncWindow

logger = logging.getLogger(__name__)


def skip_processed(
    transactions: Sequence[Transaction],
    resume_transaction_id: Optional[str],
    window: Optional[SyncWindow] = None,
) -> List[Transaction]:
    """Drop everything up to and including the last posted transaction.

    Args:
        transactions: Incoming transactions in feed order.
        resume_transaction_id: Id saved in the checkpoint, or None.
        window: Window the batch was fetched for, used in the error message.

    Returns:
        Transactions after ``resume_transaction_id``; the input unchanged if
        there is nothing to resume from.

    Raises:
        ConsistencyError: If ``resume_transaction_id`` is not in the batch.
    """
    if not resume_transaction_id:
        return list(transactions)

    for index, transaction in enumerate(transactions):
        if transaction.id == resume_transaction_id:
            logger.info(
                f"Resuming after transaction {resume_transaction_id}, "
                f"skipped {index + 1} already processed"
            )
            return list(transactions[index + 1:])

    raise ConsistencyError(
        resume_transaction_id,
        window.start_date if window else None,
        window.end_date if window else None,
    )
