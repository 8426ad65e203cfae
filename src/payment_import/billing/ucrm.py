"""UCRM billing system client."""

import logging
from typing import Dict, Any, List, Optional

import httpx

from ..exceptions import BillingQueryError, PostingError
from ..models import PaymentPayload
from .base import BillingClientBase

logger = logging.getLogger(__name__)


class UcrmClient(BillingClientBase):
    """
    UCRM REST API client. Authenticates with the ``X-Auth-App-Key`` header.

    See http://docs.ucrm.apiary.io/#reference/payments/payments/post
    """

    name = "ucrm"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        api_version: str = "1.0",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not base_url or not api_key:
            raise ValueError("UCRM base URL and app key are required")
        self.api_url = f"{base_url.rstrip('/')}/api/v{api_version}"
        self._client = httpx.Client(
            base_url=self.api_url,
            headers={
                "Content-Type": "application/json",
                "X-Auth-App-Key": api_key,
            },
            timeout=timeout,
            transport=transport,
        )

    def _query(self, path: str, filters: Dict[str, str]) -> List[Dict[str, Any]]:
        try:
            response = self._client.get(path, params=filters)
            response.raise_for_status()
            results = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"UCRM query {path} failed with HTTP {e.response.status_code}")
            raise BillingQueryError(
                f"UCRM query {path} failed with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Failed to connect to UCRM API: {type(e).__name__}")
            raise BillingQueryError(f"Failed to connect to UCRM API: {e}") from e
        except ValueError as e:
            raise BillingQueryError(f"UCRM query {path} returned invalid JSON") from e

        if not isinstance(results, list):
            raise BillingQueryError(f"UCRM query {path} did not return a list")
        return results

    def query_clients(self, filters: Dict[str, str]) -> List[Dict[str, Any]]:
        return self._query("/clients", filters)

    def query_invoices(self, filters: Dict[str, str]) -> List[Dict[str, Any]]:
        return self._query("/invoices", filters)

    def create_payment(self, payment: PaymentPayload) -> Dict[str, Any]:
        transaction_id = payment.provider_payment_id
        try:
            response = self._client.post("/payments", json=payment.to_api_dict())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = e.response.text[:500]
            logger.error(
                f"UCRM rejected payment for transaction {transaction_id}: "
                f"HTTP {e.response.status_code}"
            )
            raise PostingError(
                f"UCRM rejected payment for transaction {transaction_id}: "
                f"HTTP {e.response.status_code} {detail}".rstrip(),
                transaction_id=transaction_id,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Failed to send payment for transaction {transaction_id}")
            raise PostingError(
                f"Failed to send payment for transaction {transaction_id}: {type(e).__name__}",
                transaction_id=transaction_id,
            ) from e

        try:
            return response.json()
        except ValueError:
            return {}

    def close(self) -> None:
        self._client.close()
