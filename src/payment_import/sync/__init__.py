"""Incremental sync engine.

Pipeline for one run:
- determine the feed window from the checkpoint
- fetch and normalize raw records, keep incoming funds only
- skip transactions already posted by an earlier run
- match, post and checkpoint each remaining transaction
- checkpoint the window end
"""

from .window import determine_window, query_end_date
from .normalizer import normalize_record, normalize_transactions, keep_incoming
from .resume import skip_processed
from .matcher import ClientMatcher
from .poster import PaymentPoster, build_payment, build_note
from .service import SyncService
from .report import ReportGenerator

__all__ = [
    "determine_window",
    "query_end_date",
    "normalize_record",
    "normalize_transactions",
    "keep_incoming",
    "skip_processed",
    "ClientMatcher",
    "PaymentPoster",
    "build_payment",
    "build_note",
    "SyncService",
    "ReportGenerator",
]
