"""Bank feed interface."""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Dict, Any


class BankFeedBase(ABC):
    """Base class for bank statement feeds."""

    name: str = "base"

    @abstractmethod
    def fetch_transactions(
        self,
        start_date: date,
        end_date: date,
    ) -> List[Dict[str, Any]]:
        """Fetch raw transaction records posted within the date range.

        Args:
            start_date: First day of the window (inclusive).
            end_date: Last day of the window (inclusive).

        Returns:
            Raw, column-indexed records in feed order. Each column is a
            mapping with ``name`` and ``value`` keys, or a falsy value when
            the column is empty.

        Raises:
            FeedFetchError: If the feed cannot be reached or refuses the request.
            MalformedRecordError: If the response has an unexpected structure.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release any transport resources."""
