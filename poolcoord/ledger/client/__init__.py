from .http_client import HTTPLedgerClient
from .interface import LedgerClient, LedgerClientError

__all__ = ["HTTPLedgerClient", "LedgerClient", "LedgerClientError"]
