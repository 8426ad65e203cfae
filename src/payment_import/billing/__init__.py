"""Billing system clients."""

from ..config import SyncConfig
from .base import BillingClientBase
from .ucrm import UcrmClient
from .simulator import SimulatedBilling


def get_billing_client(config: SyncConfig) -> BillingClientBase:
    """Factory function to get the configured billing client.

    Args:
        config: Sync configuration.

    Returns:
        BillingClientBase implementation for the configured provider.

    Raises:
        ValueError: If the provider is not supported.
    """
    if config.billing_provider == "ucrm":
        return UcrmClient(
            base_url=config.billing_api_url,
            api_key=config.billing_api_key,
            api_version=config.billing_api_version,
            timeout=config.http_timeout,
        )
    if config.billing_provider == "simulator":
        return SimulatedBilling()
    raise ValueError(f"Unsupported billing provider: {config.billing_provider}")


__all__ = [
    "BillingClientBase",
    "UcrmClient",
    "SimulatedBilling",
    "get_billing_client",
]
