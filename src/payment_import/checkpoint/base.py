"""Checkpoint store interface."""

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from ..exceptions import CheckpointError
from ..models import Checkpoint

logger = logging.getLogger(__name__)


class CheckpointStore(ABC):
    """
    Persists the single sync checkpoint.

    Implementations only read and overwrite the serialized text; parsing,
    the fresh-start default and the no-regression rule live here.
    """

    def __init__(self, start_date: date):
        """Initialize the store.

        Args:
            start_date: Configured earliest sync date, used when nothing is stored.
        """
        self.start_date = start_date

    @abstractmethod
    def _read(self) -> Optional[str]:
        """Return the stored checkpoint text, or None if nothing is stored."""
        raise NotImplementedError

    @abstractmethod
    def _write(self, content: str) -> None:
        """Replace the stored checkpoint text in one step."""
        raise NotImplementedError

    def load(self) -> Checkpoint:
        """Load the checkpoint.

        Returns:
            The stored Checkpoint, or a fresh-start checkpoint at the
            configured start date when nothing has been saved yet.

        Raises:
            CheckpointError: If the stored content cannot be parsed.
        """
        content = self._read()
        if content is None or not content.strip():
            return Checkpoint.fresh_start(self.start_date)
        return Checkpoint.parse(content)

    def save(self, last_date: date, last_transaction_id: Optional[str] = None) -> Checkpoint:
        """Overwrite the checkpoint.

        Args:
            last_date: Date of the last posted transaction, or the end of a
                completed window.
            last_transaction_id: Last posted transaction id within last_date.
                Omit to mark last_date as fully processed.

        Returns:
            The saved Checkpoint.

        Raises:
            CheckpointError: If last_date is earlier than the stored date.
        """
        current = self._read()
        if current and current.strip():
            previous = Checkpoint.parse(current)
            if last_date < previous.last_date:
                raise CheckpointError(
                    f"Refusing to move checkpoint back from {previous.last_date.isoformat()} "
                    f"to {last_date.isoformat()}"
                )

        checkpoint = Checkpoint(last_date=last_date, last_transaction_id=last_transaction_id)
        self._write(checkpoint.dumps())
        logger.debug(f"Checkpoint saved: {checkpoint.dumps()!r}")
        return checkpoint
