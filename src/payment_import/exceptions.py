"""Exception hierarchy for payment import."""

from datetime import date
from typing import Optional


class PaymentImportError(Exception):
    """Base exception for all payment import errors."""


class ConfigurationError(PaymentImportError):
    """Raised when configuration is invalid or missing."""


class SyncError(PaymentImportError):
    """Base class for errors that abort a sync run."""


class FeedFetchError(SyncError):
    """Raised when the bank feed cannot be reached or refuses the request."""


class MalformedRecordError(SyncError):
    """Raised when a raw feed record lacks a required column."""


class ConsistencyError(SyncError):
    """Raised when the checkpoint transaction is missing from the fetched window."""

    def __init__(
        self,
        transaction_id: str,
        window_start: Optional[date] = None,
        window_end: Optional[date] = None,
    ):
        self.transaction_id = transaction_id
        self.window_start = window_start
        self.window_end = window_end
        message = f"Could not find previously processed transaction {transaction_id}"
        if window_start and window_end:
            message += f" in window {window_start.isoformat()}..{window_end.isoformat()}"
        super().__init__(message + ".")


class CheckpointError(SyncError):
    """Raised when the checkpoint cannot be read or would move backwards."""


class TransactionError(SyncError):
    """Run-fatal error tied to one transaction; the message always names it."""

    def __init__(self, message: str, transaction_id: Optional[str] = None):
        self.transaction_id = transaction_id
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.transaction_id and f"transaction {self.transaction_id}" not in message:
            return f"{message} (transaction {self.transaction_id})"
        return message


class BillingQueryError(TransactionError):
    """Raised when a billing system lookup fails at the transport level."""


class PostingError(TransactionError):
    """Raised when the billing system rejects or never receives a payment."""


class MatchError(PaymentImportError):
    """Soft matching failure; the transaction is posted without association."""


class NoMatchFound(MatchError):
    """Raised when no billing record matches the transaction reference."""


class AmbiguousMatchError(MatchError):
    """Raised when more than one billing record matches the transaction reference."""
