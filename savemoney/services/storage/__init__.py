"""
Storage Services Package

Provides the abstract ledger storage interface and concrete implementations.
An in-memory store for tests and a Google Sheets store for durable data.
"""

from savemoney.services.storage.interface import (
    ConnectionError,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)
from savemoney.services.storage.memory import InMemoryLedgerStorage
from savemoney.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
)

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
    "InMemoryLedgerStorage",
]
