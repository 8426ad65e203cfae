"""In-memory billing system for dry runs and tests."""

import logging
from typing import Dict, Any, List, Optional, Set, Tuple

from ..exceptions import PostingError
from ..models import PaymentPayload
from .base import BillingClientBase

logger = logging.getLogger(__name__)


def _matches(record: Dict[str, Any], filters: Dict[str, str]) -> bool:
    attribute_key = filters.get("customAttributeKey")
    if attribute_key is not None:
        attribute_value = filters.get("customAttributeValue")
        attributes = record.get("attributes") or []
        if not any(
            a.get("key") == attribute_key and str(a.get("value")) == str(attribute_value)
            for a in attributes
        ):
            return False
    for key, value in filters.items():
        if key in ("customAttributeKey", "customAttributeValue"):
            continue
        if str(record.get(key)) != str(value):
            return False
    return True


class SimulatedBilling(BillingClientBase):
    """
    Billing system backed by in-memory client and invoice lists.

    Created payments are kept in ``payments`` in posting order.
    Transaction ids listed in ``fail_on`` are rejected with PostingError.
    """

    name = "simulator"

    def __init__(
        self,
        clients: Optional[List[Dict[str, Any]]] = None,
        invoices: Optional[List[Dict[str, Any]]] = None,
        fail_on: Optional[Set[str]] = None,
    ):
        self.clients: List[Dict[str, Any]] = list(clients or [])
        self.invoices: List[Dict[str, Any]] = list(invoices or [])
        self.fail_on: Set[str] = set(fail_on or ())
        self.payments: List[Dict[str, Any]] = []
        self.queries: List[Tuple[str, Dict[str, str]]] = []

    def query_clients(self, filters: Dict[str, str]) -> List[Dict[str, Any]]:
        self.queries.append(("clients", dict(filters)))
        return [c for c in self.clients if _matches(c, filters)]

    def query_invoices(self, filters: Dict[str, str]) -> List[Dict[str, Any]]:
        self.queries.append(("invoices", dict(filters)))
        return [i for i in self.invoices if _matches(i, filters)]

    def create_payment(self, payment: PaymentPayload) -> Dict[str, Any]:
        if payment.provider_payment_id in self.fail_on:
            raise PostingError(
                f"Simulated rejection of payment for transaction {payment.provider_payment_id}",
                transaction_id=payment.provider_payment_id,
            )
        body = payment.to_api_dict()
        body["id"] = len(self.payments) + 1
        self.payments.append(body)
        logger.info(f"Simulated payment {body['id']} created")
        return body

    @property
    def posted_transaction_ids(self) -> List[str]:
        return [p["providerPaymentId"] for p in self.payments]
