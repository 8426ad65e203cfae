"""Payment building and submission."""

import logging
from typing import Dict, Any, Optional

from ..billing import BillingClientBase
from ..checkpoint import CheckpointStore
from ..models import (
    PAYMENT_METHOD_BANK_TRANSFER,
    MatchResult,
    PaymentPayload,
    Transaction,
    start_of_day,
)

logger = logging.getLogger(__name__)


def build_note(raw_fields: Dict[str, Any]) -> str:
    """Render every raw field as ``name: value``, one per line, in feed order."""
    return "".join(f"{name}: {value}\n" for name, value in raw_fields.items())


def build_payment(
    transaction: Transaction,
    match: Optional[MatchResult] = None,
    provider_name: str = "Fio CZ",
) -> PaymentPayload:
    """Build the billing payment for a transaction.

    Args:
        transaction: Incoming bank transaction.
        match: Resolved client/invoice, or None when unmatched.
        provider_name: Provider name recorded on the payment.

    Returns:
        PaymentPayload; invoices are applied automatically unless an explicit
        invoice was matched.
    """
    match = match or MatchResult.none()
    return PaymentPayload(
        client_id=match.client_id,
        method=PAYMENT_METHOD_BANK_TRANSFER,
        amount=transaction.amount,
        currency_code=transaction.currency,
        note=build_note(transaction.raw_fields),
        invoice_ids=[match.invoice_id] if match.invoice_id is not None else [],
        provider_name=provider_name,
        provider_payment_id=transaction.id,
        provider_payment_time=start_of_day(transaction.date),
        apply_to_invoices_automatically=match.invoice_id is None,
    )


class PaymentPoster:
    """Submits payments and advances the checkpoint after each success."""

    def __init__(
        self,
        billing: BillingClientBase,
        store: CheckpointStore,
        provider_name: str = "Fio CZ",
    ):
        self.billing = billing
        self.store = store
        self.provider_name = provider_name

    def post(self, transaction: Transaction, match: Optional[MatchResult] = None) -> PaymentPayload:
        """Create the payment, then record the transaction as processed.

        Raises:
            PostingError: If the billing system does not accept the payment.
                The checkpoint is left untouched in that case.
        """
        payment = build_payment(transaction, match, self.provider_name)
        self.billing.create_payment(payment)
        logger.info(
            f"Posted payment for transaction {transaction.id} "
            f"({transaction.amount} {transaction.currency}, client {payment.client_id})"
        )
        self.store.save(transaction.date, transaction.id)
        return payment
