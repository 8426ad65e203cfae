"""Resolution of transaction references to billing clients and invoices."""

import logging
from typing import List, Dict, Any

from ..billing import BillingClientBase
from ..exceptions import AmbiguousMatchError, BillingQueryError, NoMatchFound
from ..models import MatchResult, MatchStrategy, Transaction

logger = logging.getLogger(__name__)


def _as_int(record: Dict[str, Any], key: str) -> int:
    try:
        return int(record[key])
    except (KeyError, TypeError, ValueError) as e:
        raise BillingQueryError(f"Billing record has no usable {key}: {record!r}") from e


class ClientMatcher:
    """Matches transactions to billing clients with the configured strategy."""

    def __init__(self, billing: BillingClientBase, match_by: str):
        """Initialize the matcher.

        Args:
            billing: Billing system client used for lookups.
            match_by: ``invoiceNumber``, ``clientId``, ``clientUserIdent`` or
                the key of a custom client attribute.
        """
        self.billing = billing
        self.match_by = match_by
        self.strategy = MatchStrategy.from_setting(match_by)

    def _lookup(self, reference: str) -> List[Dict[str, Any]]:
        if self.strategy == MatchStrategy.INVOICE_NUMBER:
            return self.billing.query_invoices({"number": reference})
        if self.strategy == MatchStrategy.CLIENT_ID:
            return self.billing.query_clients({"id": reference})
        if self.strategy == MatchStrategy.CLIENT_USER_IDENT:
            return self.billing.query_clients({"userIdent": reference})
        return self.billing.query_clients({
            "customAttributeKey": self.match_by,
            "customAttributeValue": reference,
        })

    def resolve(self, transaction: Transaction) -> MatchResult:
        """Resolve a transaction to exactly one billing record.

        Raises:
            NoMatchFound: If the reference is empty or nothing matches.
            AmbiguousMatchError: If more than one record matches.
            BillingQueryError: If the lookup itself fails.
        """
        if not transaction.reference:
            raise NoMatchFound(f"Transaction {transaction.id} has no reference")

        results = self._lookup(transaction.reference)
        if not results:
            raise NoMatchFound(f"No result found for transaction {transaction.id}")
        if len(results) > 1:
            raise AmbiguousMatchError(
                f"Multiple matching results found for transaction {transaction.id}"
            )

        result = results[0]
        if self.strategy == MatchStrategy.INVOICE_NUMBER:
            return MatchResult(
                client_id=_as_int(result, "clientId"),
                invoice_id=_as_int(result, "id"),
            )
        return MatchResult(client_id=_as_int(result, "id"))

    def match(self, transaction: Transaction) -> MatchResult:
        """Resolve a transaction, downgrading soft failures to no match."""
        try:
            return self.resolve(transaction)
        except NoMatchFound as e:
            logger.warning(f"{e}.")
        except AmbiguousMatchError as e:
            logger.warning(f"{e}.")
        return MatchResult.none()
