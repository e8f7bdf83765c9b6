"""Clients package for Ledger API communication."""

from src.clients.api_client import (
    Account,
    LedgerAPIClient,
    LedgerAPIError,
)
from src.clients.resilient_fetch import resilient_fetch

__all__ = [
    "Account",
    "LedgerAPIClient",
    "LedgerAPIError",
    "resilient_fetch",
]
