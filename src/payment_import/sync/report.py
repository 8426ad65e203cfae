"""Report rendering for sync runs."""

import json

from ..models import SyncReport, SyncStatus


class ReportGenerator:
    """Renders a sync report for the operator."""

    def __init__(self, report: SyncReport):
        """Initialize the report generator.

        Args:
            report: The sync report to render.
        """
        self.report = report

    def to_json(self, indent: int = 2) -> str:
        """Generate JSON representation of the report."""
        return json.dumps(self.report.to_summary_dict(), indent=indent)

    def to_summary_text(self) -> str:
        """Generate a human-readable summary.

        Returns:
            Multi-line text; aborted runs end with the error message.
        """
        r = self.report
        lines = [
            "=" * 60,
            "PAYMENT IMPORT RUN",
            "=" * 60,
            f"Run ID:      {r.id}",
            f"Feed:        {r.feed_provider}",
            f"Status:      {r.status.value.upper()}",
            f"Window:      {r.window_start.isoformat() if r.window_start else '-'} .. "
            f"{r.window_end.isoformat() if r.window_end else '-'}",
        ]
        if r.resume_transaction_id:
            lines.append(f"Resumed:     after transaction {r.resume_transaction_id}")
        lines.extend([
            "",
            "-" * 60,
            "STATISTICS",
            "-" * 60,
            f"Fetched:     {r.total_fetched}",
            f"Incoming:    {r.total_incoming}",
            f"Skipped:     {r.total_skipped}",
            f"Posted:      {r.total_posted}",
            f"Unmatched:   {r.total_unmatched}",
        ])
        if r.unmatched_transaction_ids:
            lines.append(f"Unmatched transactions: {', '.join(r.unmatched_transaction_ids)}")
        if r.status == SyncStatus.ABORTED:
            lines.extend([
                "",
                f"ERROR: {r.error_message}",
            ])
        lines.append("=" * 60)
        return "\n".join(lines)
