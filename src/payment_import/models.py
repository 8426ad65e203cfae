"""Models for the bank-to-billing payment sync."""

import datetime as dt
import enum
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, Field

from .exceptions import CheckpointError

# UCRM payment method id for bank transfers
PAYMENT_METHOD_BANK_TRANSFER = 3

CHECKPOINT_DATE_FORMAT = "%Y-%m-%d"


class Transaction(BaseModel):
    """A normalized bank transaction."""
    id: str = Field(..., description="Transaction ID assigned by the feed")
    date: dt.date = Field(..., description="Posting date")
    amount: Decimal = Field(..., description="Signed amount, positive for incoming funds")
    currency: str = Field(..., description="Currency code")
    reference: Optional[str] = Field(None, description="Payer reference used for matching")
    raw_fields: Dict[str, Any] = Field(
        default_factory=dict,
        description="Feed columns by declared name, in feed order",
    )

    class Config:
        frozen = True

    @property
    def is_incoming(self) -> bool:
        return self.amount > 0


class Checkpoint(BaseModel):
    """Persisted sync progress marker."""
    last_date: date
    last_transaction_id: Optional[str] = None
    fresh: bool = Field(
        default=False,
        description="True when no checkpoint has been saved yet",
    )

    @classmethod
    def fresh_start(cls, start_date: date) -> "Checkpoint":
        return cls(last_date=start_date, last_transaction_id=None, fresh=True)

    @classmethod
    def parse(cls, content: str) -> "Checkpoint":
        """Parse the two-line checkpoint format.

        Args:
            content: ``<YYYY-MM-DD>`` optionally followed by a second line
                holding the last posted transaction id.

        Returns:
            Parsed Checkpoint.

        Raises:
            CheckpointError: If the first line is not a valid date.
        """
        rows = [row.strip() for row in content.splitlines()]
        if not rows or not rows[0]:
            raise CheckpointError("Checkpoint is empty")
        try:
            last_date = datetime.strptime(rows[0], CHECKPOINT_DATE_FORMAT).date()
        except ValueError as e:
            raise CheckpointError(f"Invalid checkpoint date: {rows[0]!r}") from e
        last_transaction_id = rows[1] if len(rows) > 1 and rows[1] else None
        return cls(last_date=last_date, last_transaction_id=last_transaction_id)

    def dumps(self) -> str:
        content = self.last_date.strftime(CHECKPOINT_DATE_FORMAT)
        if self.last_transaction_id:
            content += "\n" + self.last_transaction_id
        return content


class SyncWindow(BaseModel):
    """Inclusive date range queried from the feed in one run."""
    start_date: date
    end_date: date
    resume_transaction_id: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.start_date > self.end_date


class MatchStrategy(str, enum.Enum):
    """How a transaction reference is resolved to a billing client."""
    INVOICE_NUMBER = "invoiceNumber"
    CLIENT_ID = "clientId"
    CLIENT_USER_IDENT = "clientUserIdent"
    CUSTOM_ATTRIBUTE = "customAttribute"

    @classmethod
    def from_setting(cls, value: str) -> "MatchStrategy":
        """Map a configured match attribute to a strategy.

        Anything that is not one of the built-in names is treated as a
        custom attribute key.
        """
        for strategy in (cls.INVOICE_NUMBER, cls.CLIENT_ID, cls.CLIENT_USER_IDENT):
            if value == strategy.value:
                return strategy
        return cls.CUSTOM_ATTRIBUTE


class MatchResult(BaseModel):
    """Billing client and invoice resolved for a transaction."""
    client_id: Optional[int] = None
    invoice_id: Optional[int] = None

    @classmethod
    def none(cls) -> "MatchResult":
        return cls()

    @property
    def is_match(self) -> bool:
        return self.client_id is not None


class PaymentPayload(BaseModel):
    """Payment record sent to the billing system."""
    client_id: Optional[int] = None
    method: int = PAYMENT_METHOD_BANK_TRANSFER
    amount: Decimal
    currency_code: str
    note: str = ""
    invoice_ids: List[int] = Field(default_factory=list)
    provider_name: str
    provider_payment_id: str
    provider_payment_time: datetime
    apply_to_invoices_automatically: bool = True

    def to_api_dict(self) -> Dict[str, Any]:
        """Return the JSON body expected by the billing API."""
        payment_time = self.provider_payment_time
        if payment_time.tzinfo is None:
            payment_time = payment_time.replace(tzinfo=timezone.utc)
        return {
            "clientId": self.client_id,
            "method": self.method,
            "amount": float(self.amount),
            "currencyCode": self.currency_code,
            "note": self.note,
            "invoiceIds": list(self.invoice_ids),
            "providerName": self.provider_name,
            "providerPaymentId": self.provider_payment_id,
            "providerPaymentTime": payment_time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            "applyToInvoicesAutomatically": self.apply_to_invoices_automatically,
        }


def start_of_day(day: date) -> datetime:
    """Midnight UTC of the given day."""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class SyncState(str, enum.Enum):
    """Stages of a single sync run."""
    IDLE = "idle"
    WINDOW_DETERMINED = "window_determined"
    FETCHED = "fetched"
    NORMALIZED = "normalized"
    FILTERED = "filtered"
    RESUMED = "resumed"
    PROCESSING = "processing"
    DONE = "done"
    ABORTED = "aborted"


class SyncStatus(str, enum.Enum):
    """Outcome of a sync run."""
    IN_PROGRESS = "in_progress"
    DONE = "done"
    ABORTED = "aborted"


class SyncReport(BaseModel):
    """Summary of one sync run."""
    id: str = Field(..., description="Run ID")
    status: SyncStatus = Field(default=SyncStatus.IN_PROGRESS)
    state: SyncState = Field(default=SyncState.IDLE)
    feed_provider: str = Field(default="fio")
    window_start: Optional[date] = None
    window_end: Optional[date] = None
    resume_transaction_id: Optional[str] = None
    started_at: datetime = Field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None

    # Statistics
    total_fetched: int = Field(default=0)
    total_incoming: int = Field(default=0)
    total_skipped: int = Field(default=0)
    total_posted: int = Field(default=0)
    total_unmatched: int = Field(default=0)

    posted_transaction_ids: List[str] = Field(default_factory=list)
    unmatched_transaction_ids: List[str] = Field(default_factory=list)

    error_message: Optional[str] = Field(None, description="Error message if the run aborted")

    def to_summary_dict(self) -> Dict[str, Any]:
        """Return the report as plain JSON-compatible data."""
        return {
            "id": self.id,
            "status": self.status.value,
            "state": self.state.value,
            "feed_provider": self.feed_provider,
            "window_start": self.window_start.isoformat() if self.window_start else None,
            "window_end": self.window_end.isoformat() if self.window_end else None,
            "resume_transaction_id": self.resume_transaction_id,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "statistics": {
                "total_fetched": self.total_fetched,
                "total_incoming": self.total_incoming,
                "total_skipped": self.total_skipped,
                "total_posted": self.total_posted,
                "total_unmatched": self.total_unmatched,
            },
            "posted_transaction_ids": list(self.posted_transaction_ids),
            "unmatched_transaction_ids": list(self.unmatched_transaction_ids),
            "error_message": self.error_message,
        }
