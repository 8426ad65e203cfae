"""In-memory bank feed for dry runs and tests."""

import logging
from datetime import date, datetime
from typing import List, Dict, Any, Optional, Tuple

from ..exceptions import FeedFetchError
from .base import BankFeedBase

logger = logging.getLogger(__name__)

# Fio statement columns in the order the API emits them
FIO_COLUMNS: List[Tuple[int, str]] = [
    (22, "ID pohybu"),
    (0, "Datum"),
    (1, "Objem"),
    (14, "Měna"),
    (2, "Protiúčet"),
    (10, "Název protiúčtu"),
    (3, "Kód banky"),
    (12, "Název banky"),
    (4, "KS"),
    (5, "VS"),
    (6, "SS"),
    (7, "Uživatelská identifikace"),
    (16, "Zpráva pro příjemce"),
    (8, "Typ"),
    (9, "Provedl"),
    (18, "Upřesnění"),
    (25, "Komentář"),
    (26, "BIC"),
    (17, "ID pokynu"),
]


def make_fio_record(
    transaction_id: Any,
    posted_on: date,
    amount: Any,
    currency: str = "CZK",
    reference: Optional[str] = None,
    extra: Optional[Dict[int, Any]] = None,
) -> Dict[str, Any]:
    """Build a Fio-shaped raw transaction record.

    Args:
        transaction_id: Movement id (column22).
        posted_on: Posting date (column0).
        amount: Signed amount (column1).
        currency: Currency code (column14).
        reference: Variable symbol (column5).
        extra: Additional column values keyed by column index.

    Returns:
        Record with one ``columnN`` key per Fio column; empty columns are None.
    """
    values: Dict[int, Any] = {
        0: posted_on.strftime("%Y-%m-%d") + "+0100",
        1: amount,
        5: reference,
        14: currency,
        22: transaction_id,
    }
    values.update(extra or {})

    record: Dict[str, Any] = {}
    for index, name in FIO_COLUMNS:
        value = values.get(index)
        record[f"column{index}"] = None if value is None else {"value": value, "name": name, "id": index}
    return record


def _record_date(record: Dict[str, Any]) -> Optional[date]:
    column = record.get("column0")
    if not column or not column.get("value"):
        return None
    return datetime.strptime(str(column["value"])[:10], "%Y-%m-%d").date()


class SimulatedFeed(BankFeedBase):
    """
    Bank feed backed by a list of raw records.

    Records are returned in insertion order, restricted to the requested
    window. Records without a date column are always returned.
    """

    name = "simulator"

    def __init__(
        self,
        records: Optional[List[Dict[str, Any]]] = None,
        fail_with: Optional[Exception] = None,
    ):
        self.records: List[Dict[str, Any]] = list(records or [])
        self.fail_with = fail_with
        self.requests: List[Tuple[date, date]] = []
        logger.info("SimulatedFeed initialized")

    def add_record(self, record: Dict[str, Any]) -> None:
        self.records.append(record)

    def remove_transaction(self, transaction_id: Any) -> None:
        """Drop a record, as if the bank had withdrawn it."""
        self.records = [
            r for r in self.records
            if not (r.get("column22") and str(r["column22"]["value"]) == str(transaction_id))
        ]

    def fetch_transactions(
        self,
        start_date: date,
        end_date: date,
    ) -> List[Dict[str, Any]]:
        self.requests.append((start_date, end_date))
        if self.fail_with is not None:
            if isinstance(self.fail_with, FeedFetchError):
                raise self.fail_with
            raise FeedFetchError(str(self.fail_with)) from self.fail_with

        selected = []
        for record in self.records:
            posted_on = _record_date(record)
            if posted_on is None or start_date <= posted_on <= end_date:
                selected.append(record)
        logger.info(f"Simulated feed returned {len(selected)} transactions")
        return selected
