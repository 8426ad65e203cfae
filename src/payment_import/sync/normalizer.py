"""Raw feed record normalization."""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Dict, Any, Iterable

from ..exceptions import MalformedRecordError
from ..models import Transaction

logger = logging.getLogger(__name__)

# Fixed semantic columns of a Fio statement record
AMOUNT_COLUMN = "column1"
CURRENCY_COLUMN = "column14"
DATE_COLUMN = "column0"
REFERENCE_COLUMN = "column5"
ID_COLUMN = "column22"

REQUIRED_COLUMNS = (ID_COLUMN, DATE_COLUMN, AMOUNT_COLUMN, CURRENCY_COLUMN)


def _column_value(record: Dict[str, Any], column: str) -> Any:
    cell = record.get(column)
    if not cell:
        return None
    if not isinstance(cell, dict):
        raise MalformedRecordError(f"Column {column} is not a name/value cell")
    return cell.get("value")


def normalize_record(record: Dict[str, Any]) -> Transaction:
    """Convert one raw column-indexed record into a Transaction.

    Args:
        record: Mapping of ``columnN`` to ``{"name", "value"}`` cells; empty
            cells are None.

    Returns:
        Normalized Transaction. ``raw_fields`` holds every non-empty column by
        its declared name, in record order.

    Raises:
        MalformedRecordError: If a required column is missing or unparsable.
    """
    if not isinstance(record, dict):
        raise MalformedRecordError(f"Expected a column mapping, got {type(record).__name__}")

    for column in REQUIRED_COLUMNS:
        if _column_value(record, column) in (None, ""):
            transaction_id = _column_value(record, ID_COLUMN)
            raise MalformedRecordError(
                f"Transaction {transaction_id if transaction_id is not None else '<unknown>'} "
                f"is missing required column {column}"
            )

    transaction_id = str(_column_value(record, ID_COLUMN))

    raw_date = str(_column_value(record, DATE_COLUMN))
    try:
        posted_on = datetime.strptime(raw_date[:10], "%Y-%m-%d").date()
    except ValueError as e:
        raise MalformedRecordError(
            f"Transaction {transaction_id} has invalid date {raw_date!r}"
        ) from e

    raw_amount = _column_value(record, AMOUNT_COLUMN)
    try:
        amount = Decimal(str(raw_amount))
    except InvalidOperation as e:
        raise MalformedRecordError(
            f"Transaction {transaction_id} has invalid amount {raw_amount!r}"
        ) from e

    reference = _column_value(record, REFERENCE_COLUMN)

    raw_fields: Dict[str, Any] = {}
    for column, cell in record.items():
        if not cell:
            continue
        if not isinstance(cell, dict):
            raise MalformedRecordError(
                f"Transaction {transaction_id} column {column} is not a name/value cell"
            )
        raw_fields[cell.get("name") or column] = cell.get("value")

    return Transaction(
        id=transaction_id,
        date=posted_on,
        amount=amount,
        currency=str(_column_value(record, CURRENCY_COLUMN)),
        reference=str(reference) if reference not in (None, "") else None,
        raw_fields=raw_fields,
    )


def normalize_transactions(records: Iterable[Dict[str, Any]]) -> List[Transaction]:
    """Normalize a whole batch; a single malformed record fails the batch."""
    transactions = [normalize_record(record) for record in records]
    logger.info(f"Normalized {len(transactions)} transactions")
    return transactions


def keep_incoming(transactions: Iterable[Transaction]) -> List[Transaction]:
    """Keep only transactions with a strictly positive amount (funds received)."""
    return [t for t in transactions if t.is_incoming]
