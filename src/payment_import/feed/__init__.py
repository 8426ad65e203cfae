"""Bank statement feeds."""

from ..config import SyncConfig
from .base import BankFeedBase
from .fio import FioFeed
from .simulator import SimulatedFeed, make_fio_record, FIO_COLUMNS


def get_bank_feed(config: SyncConfig) -> BankFeedBase:
    """Factory function to get the configured bank feed.

    Args:
        config: Sync configuration.

    Returns:
        BankFeedBase implementation for the configured provider.

    Raises:
        ValueError: If the provider is not supported.
    """
    if config.feed_provider == "fio":
        return FioFeed(
            token=config.fio_api_token,
            base_url=config.fio_api_url,
            timeout=config.http_timeout,
        )
    if config.feed_provider == "simulator":
        return SimulatedFeed()
    raise ValueError(f"Unsupported feed provider: {config.feed_provider}")


__all__ = [
    "BankFeedBase",
    "FioFeed",
    "SimulatedFeed",
    "make_fio_record",
    "FIO_COLUMNS",
    "get_bank_feed",
]
