"""Sync driver: one incremental run from bank feed to billing system."""

import uuid
import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import sessionmaker

from ..billing import BillingClientBase
from ..checkpoint import CheckpointStore
from ..config import SyncConfig
from ..database import SyncRunRepository
from ..exceptions import SyncError, TransactionError
from ..feed import BankFeedBase
from ..models import SyncReport, SyncState, SyncStatus, SyncWindow, Transaction
from .matcher import ClientMatcher
from .normalizer import keep_incoming, normalize_transactions
from .poster import PaymentPoster
from .resume import skip_processed
from .window import determine_window

logger = logging.getLogger(__name__)


class SyncService:
    """Runs the incremental sync.

    Runs are strictly sequential. Each posted payment advances the
    checkpoint on its own, so an aborted run can be retried without
    re-posting or skipping anything. Runs against the same checkpoint
    must not overlap.
    """

    def __init__(
        self,
        config: SyncConfig,
        feed: BankFeedBase,
        billing: BillingClientBase,
        store: CheckpointStore,
        session_factory: Optional[sessionmaker] = None,
        today: Optional[date] = None,
    ):
        """Initialize the sync service.

        Args:
            config: Sync configuration.
            feed: Bank feed to fetch transactions from.
            billing: Billing system to match against and post to.
            store: Checkpoint store.
            session_factory: Optional database session factory for run history.
            today: Reference day for the window; defaults to the current date.
        """
        self.config = config
        self.feed = feed
        self.billing = billing
        self.store = store
        self.session_factory = session_factory
        self.today = today
        self.matcher = ClientMatcher(billing, config.match_by)
        self.poster = PaymentPoster(billing, store, config.provider_name)

    def next_window(self) -> SyncWindow:
        """Window the next run would query, without fetching anything."""
        return determine_window(self.config.start_date, self.store.load(), self.today)

    def _transition(self, report: SyncReport, state: SyncState) -> None:
        report.state = state
        logger.debug(f"Sync run {report.id}: {state.value}")

    def _process(self, report: SyncReport, transaction: Transaction) -> None:
        logger.info(f"Processing transaction {transaction.id}.")
        try:
            match = self.matcher.match(transaction)
            self.poster.post(transaction, match)
        except TransactionError as e:
            if e.transaction_id is None:
                e.transaction_id = transaction.id
            raise
        report.posted_transaction_ids.append(transaction.id)
        report.total_posted += 1
        if not match.is_match:
            report.unmatched_transaction_ids.append(transaction.id)
            report.total_unmatched += 1

    def _execute(self, report: SyncReport) -> None:
        window = self.next_window()
        report.window_start = window.start_date
        report.window_end = window.end_date
        report.resume_transaction_id = window.resume_transaction_id
        self._transition(report, SyncState.WINDOW_DETERMINED)
        logger.info(
            f"Sync window {window.start_date.isoformat()}..{window.end_date.isoformat()}"
            + (f", resuming after {window.resume_transaction_id}" if window.resume_transaction_id else "")
        )

        if window.is_empty:
            logger.info("Already synchronized through yesterday, nothing to fetch")
            return

        records = self.feed.fetch_transactions(window.start_date, window.end_date)
        report.total_fetched = len(records)
        self._transition(report, SyncState.FETCHED)

        transactions = normalize_transactions(records)
        self._transition(report, SyncState.NORMALIZED)

        incoming = keep_incoming(transactions)
        report.total_incoming = len(incoming)
        self._transition(report, SyncState.FILTERED)
        logger.info(f"{len(incoming)} of {len(transactions)} transactions are incoming")

        pending = skip_processed(incoming, window.resume_transaction_id, window)
        report.total_skipped = len(incoming) - len(pending)
        self._transition(report, SyncState.RESUMED)

        for transaction in pending:
            self._transition(report, SyncState.PROCESSING)
            self._process(report, transaction)

        self.store.save(window.end_date)

    def run(self) -> SyncReport:
        """Execute one sync run.

        Returns:
            SyncReport with status ``done``, or ``aborted`` and the error
            message when a SyncError stopped the run.
        """
        report = SyncReport(
            id=str(uuid.uuid4()),
            status=SyncStatus.IN_PROGRESS,
            feed_provider=self.feed.name,
            started_at=datetime.utcnow(),
        )
        logger.info(f"Starting sync run {report.id}")

        try:
            self._execute(report)
        except SyncError as e:
            self._transition(report, SyncState.ABORTED)
            report.status = SyncStatus.ABORTED
            report.error_message = str(e)
            logger.error(f"Sync run {report.id} aborted: {e}")
        else:
            self._transition(report, SyncState.DONE)
            report.status = SyncStatus.DONE
            logger.info(
                f"Sync run {report.id} done: {report.total_posted} posted, "
                f"{report.total_unmatched} unmatched, {report.total_skipped} skipped"
            )
        report.finished_at = datetime.utcnow()

        if self.session_factory is not None:
            with self.session_factory() as session:
                SyncRunRepository(session).create_from_report(report)
                session.commit()

        return report
