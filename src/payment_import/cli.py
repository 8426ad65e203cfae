#!/usr/bin/env python3
"""Command-line interface for the payment import job.

All settings come from the environment (see SyncConfig). Meant to be run
by a scheduler that never starts two runs at once.

Usage:
    python -m payment_import.cli
    python -m payment_import.cli run
    python -m payment_import.cli --format json status
"""

import argparse
import json
import logging
import sys
from typing import Optional, Tuple

from .billing import get_billing_client
from .checkpoint import get_checkpoint_store
from .config import SyncConfig
from .database import DatabaseManager
from .exceptions import CheckpointError, ConfigurationError
from .feed import get_bank_feed
from .models import SyncStatus
from .sync import ReportGenerator, SyncService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_CONFIG_ERROR = 2

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for a CLI invocation.

    Args:
        level: Log level name.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # The Fio token is part of request URLs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_service(config: SyncConfig) -> Tuple[SyncService, Optional[DatabaseManager]]:
    """Wire the configured collaborators into a SyncService.

    Args:
        config: Sync configuration.

    Returns:
        The service and, when DATABASE_URL is set, the initialized DatabaseManager.
    """
    db_manager = None
    session_factory = None
    if config.database_url:
        db_manager = DatabaseManager(config.database_url)
        db_manager.initialize()
        session_factory = db_manager.session_factory

    service = SyncService(
        config=config,
        feed=get_bank_feed(config),
        billing=get_billing_client(config),
        store=get_checkpoint_store(config, session_factory),
        session_factory=session_factory,
    )
    return service, db_manager


def run_sync(config: SyncConfig, output_format: str = "text") -> int:
    """Run one sync and print its report.

    Args:
        config: Sync configuration.
        output_format: 'text' or 'json'.

    Returns:
        Exit code (0 when the run is done, 1 when it aborted).
    """
    service, db_manager = build_service(config)
    try:
        report = service.run()
    finally:
        service.feed.close()
        service.billing.close()
        if db_manager is not None:
            db_manager.shutdown()

    generator = ReportGenerator(report)
    print(generator.to_json() if output_format == "json" else generator.to_summary_text())

    if report.status == SyncStatus.DONE:
        return EXIT_OK
    return EXIT_ABORTED


def show_status(config: SyncConfig, output_format: str = "text") -> int:
    """Print the stored checkpoint and the next window.

    Args:
        config: Sync configuration.
        output_format: 'text' or 'json'.

    Returns:
        Exit code.
    """
    service, db_manager = build_service(config)
    try:
        checkpoint = service.store.load()
        window = service.next_window()
    except CheckpointError as e:
        logger.error(str(e))
        return EXIT_ABORTED
    finally:
        service.feed.close()
        service.billing.close()
        if db_manager is not None:
            db_manager.shutdown()

    status = {
        "checkpoint": None if checkpoint.fresh else {
            "last_date": checkpoint.last_date.isoformat(),
            "last_transaction_id": checkpoint.last_transaction_id,
        },
        "next_window": {
            "start_date": window.start_date.isoformat(),
            "end_date": window.end_date.isoformat(),
            "resume_transaction_id": window.resume_transaction_id,
            "empty": window.is_empty,
        },
    }

    if output_format == "json":
        print(json.dumps(status, indent=2))
    else:
        if checkpoint.fresh:
            print("Checkpoint:  none (first run)")
        else:
            print(f"Checkpoint:  {checkpoint.last_date.isoformat()}"
                  + (f" after transaction {checkpoint.last_transaction_id}"
                     if checkpoint.last_transaction_id else " (day complete)"))
        if window.is_empty:
            print("Next window: nothing to fetch until tomorrow")
        else:
            print(f"Next window: {window.start_date.isoformat()} .. {window.end_date.isoformat()}")
    return EXIT_OK


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="payment-import",
        description="Import incoming bank transactions into the billing system as payments.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override LOG_LEVEL",
    )
    parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.add_parser(
        "run",
        help="Run one incremental sync (default)",
    )
    subparsers.add_parser(
        "status",
        help="Show the checkpoint and the next sync window",
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Optional list of command-line arguments (for testing).

    Returns:
        Exit code.
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    try:
        config = SyncConfig.from_env()
    except ConfigurationError as e:
        configure_logging(parsed_args.log_level or "INFO")
        logger.error(str(e))
        return EXIT_CONFIG_ERROR

    configure_logging(parsed_args.log_level or config.log_level)

    command = parsed_args.command or "run"
    if command == "status":
        return show_status(config, parsed_args.format)
    return run_sync(config, parsed_args.format)


if __name__ == "__main__":
    sys.exit(main())
