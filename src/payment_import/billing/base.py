from abc import ABC, abstractmethod
from typing import Dict, Any, List

from ..models import PaymentPayload


class BillingClientBase(ABC):
    """
    Billing system interface: equality-filtered lookups plus payment creation.
    Lookups return plain dicts as the billing API reports them.
    """

    name: str = "base"

    @abstractmethod
    def query_clients(self, filters: Dict[str, str]) -> List[Dict[str, Any]]:
        """
        Return clients matching every filter. Each result carries at least ``id``.
        """
        raise NotImplementedError

    @abstractmethod
    def query_invoices(self, filters: Dict[str, str]) -> List[Dict[str, Any]]:
        """
        Return invoices matching every filter. Each result carries ``id``,
        ``clientId`` and ``number``.
        """
        raise NotImplementedError

    @abstractmethod
    def create_payment(self, payment: PaymentPayload) -> Dict[str, Any]:
        """
        Create a payment. Raises PostingError on any failure; there is no
        partial success.
        """
        raise NotImplementedError

    def close(self) -> None:
        pass
