"""Fio banka statement feed."""

import logging
from datetime import date
from typing import List, Dict, Any, Optional

import httpx

from ..exceptions import FeedFetchError, MalformedRecordError
from .base import BankFeedBase

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.fio.cz/ib_api/rest"


class FioFeed(BankFeedBase):
    """Fio REST API client for account statement periods."""

    name = "fio"

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the Fio feed.

        Args:
            token: Fio API token. It is part of the URL path, so it is never logged.
            base_url: REST API base URL.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, mainly for tests.

        Raises:
            ValueError: If no token is provided.
        """
        if not token:
            raise ValueError("A Fio API token is required")
        self._token = token
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def _periods_url(self, start_date: date, end_date: date) -> str:
        return (
            f"{self.base_url}/periods/{self._token}/"
            f"{start_date.strftime('%Y-%m-%d')}/{end_date.strftime('%Y-%m-%d')}/transactions.json"
        )

    def fetch_transactions(
        self,
        start_date: date,
        end_date: date,
    ) -> List[Dict[str, Any]]:
        """Fetch the account statement for the period.

        Args:
            start_date: First day of the window (inclusive).
            end_date: Last day of the window (inclusive).

        Returns:
            Raw Fio transaction records in statement order.
        """
        logger.info(
            f"Fetching Fio transactions from {start_date.isoformat()} "
            f"to {end_date.isoformat()}"
        )

        try:
            response = self._client.get(
                self._periods_url(start_date, end_date),
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 409:
                # Fio allows one request per token every 30 seconds
                raise FeedFetchError("Fio API rate limit hit (HTTP 409), try again later") from e
            logger.error(f"Fio API returned HTTP {status}")
            raise FeedFetchError(f"Fio API returned HTTP {status}") from e
        except httpx.HTTPError as e:
            logger.error("Failed to connect to Fio API")
            raise FeedFetchError(f"Failed to connect to Fio API: {type(e).__name__}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedRecordError("Fio API returned a non-JSON response") from e

        records = self.extract_records(payload)
        logger.info(f"Fetched {len(records)} transactions from Fio")
        return records

    @staticmethod
    def extract_records(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Pull the transaction list out of a statement response.

        Args:
            payload: Decoded ``transactions.json`` body.

        Returns:
            List of raw records; empty when the period has no transactions.

        Raises:
            MalformedRecordError: If the statement envelope is missing.
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("accountStatement"), dict):
            raise MalformedRecordError("Fio response has no accountStatement")
        transaction_list = payload["accountStatement"].get("transactionList") or {}
        records = transaction_list.get("transaction") or []
        if not isinstance(records, list):
            raise MalformedRecordError("Fio transactionList.transaction is not a list")
        return records

    def close(self) -> None:
        self._client.close()
