"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for ledger storage.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep the balance and budget logic decoupled from storage

Writes are STAGED and only become durable on persist(). The ledger
stages a transaction change together with the new balance and persists
them as one unit, rolling back if persist fails.

The interface is intentionally small - it is exactly what the ledger needs.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from savemoney.models.ledger import BudgetSettings, Transaction


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage operations.

    Any storage implementation (Google Sheets, SQLite, etc.)
    must implement these methods.

    Implementations must hand out copies: callers never hold a
    reference to a stored record.
    """

    @abstractmethod
    def fetch_all_transactions(self) -> list[Transaction]:
        """
        Fetch every persisted transaction.

        Returns:
            Transactions sorted by date, newest first

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    def fetch_budget_settings(self) -> Optional[BudgetSettings]:
        """
        Fetch the persisted budget settings.

        Returns:
            The settings if any have been persisted, None otherwise

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    def insert_transaction(self, transaction: Transaction) -> None:
        """Stage a new transaction for the next persist()."""
        pass

    @abstractmethod
    def update_transaction(self, transaction: Transaction) -> None:
        """
        Stage a full replacement of the transaction with the same id.

        persist() raises NotFoundError if no such transaction exists.
        """
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: UUID) -> None:
        """Stage removal of a transaction. Unknown ids are ignored."""
        pass

    @abstractmethod
    def save_budget_settings(self, settings: BudgetSettings) -> None:
        """
        Stage the budget settings.

        There is a single settings slot; this inserts or replaces it.
        """
        pass

    @abstractmethod
    def persist(self) -> None:
        """
        Durably commit every staged change.

        Raises:
            StorageError: If the commit fails. Staged changes are kept
                          so the caller can decide to rollback().
        """
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Discard every staged change."""
        pass

    @property
    @abstractmethod
    def has_pending_changes(self) -> bool:
        """True if there are staged changes not yet persisted."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
