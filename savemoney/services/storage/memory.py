"""
In-Memory Storage Implementation

Suitable for tests and short-lived sessions. All state is lost when the
process exits; use the Google Sheets store for durable data.

persist() is all-or-nothing: staged changes are applied to a copy of the
committed state, which only replaces it once every change has applied.
"""

from typing import Optional, Union
from uuid import UUID

from savemoney.models.ledger import BudgetSettings, Transaction
from savemoney.services.storage.interface import (
    LedgerStorageInterface,
    NotFoundError,
)


_INSERT = "insert"
_UPDATE = "update"
_DELETE = "delete"
_SETTINGS = "settings"

PendingChange = tuple[str, Union[Transaction, BudgetSettings, UUID]]


class InMemoryLedgerStorage(LedgerStorageInterface):
    """In-process ledger store."""

    def __init__(
        self,
        transactions: Optional[list[Transaction]] = None,
        settings: Optional[BudgetSettings] = None,
    ):
        self._transactions: dict[UUID, Transaction] = {
            t.id: t.model_copy(deep=True) for t in (transactions or [])
        }
        self._settings: Optional[BudgetSettings] = (
            settings.model_copy(deep=True) if settings else None
        )
        self._pending: list[PendingChange] = []

    # ─── Reads ───────────────────────────────────────────────────────────────

    def fetch_all_transactions(self) -> list[Transaction]:
        transactions = [t.model_copy(deep=True) for t in self._transactions.values()]
        transactions.sort(key=lambda t: t.date, reverse=True)
        return transactions

    def fetch_budget_settings(self) -> Optional[BudgetSettings]:
        if self._settings is None:
            return None
        return self._settings.model_copy(deep=True)

    # ─── Staged writes ───────────────────────────────────────────────────────

    def insert_transaction(self, transaction: Transaction) -> None:
        self._pending.append((_INSERT, transaction.model_copy(deep=True)))

    def update_transaction(self, transaction: Transaction) -> None:
        self._pending.append((_UPDATE, transaction.model_copy(deep=True)))

    def delete_transaction(self, transaction_id: UUID) -> None:
        self._pending.append((_DELETE, transaction_id))

    def save_budget_settings(self, settings: BudgetSettings) -> None:
        self._pending.append((_SETTINGS, settings.model_copy(deep=True)))

    # ─── Commit / rollback ───────────────────────────────────────────────────

    def persist(self) -> None:
        transactions = dict(self._transactions)
        settings = self._settings

        for kind, payload in self._pending:
            if kind == _INSERT:
                transactions[payload.id] = payload
            elif kind == _UPDATE:
                if payload.id not in transactions:
                    raise NotFoundError(f"Transaction not found: {payload.id}")
                transactions[payload.id] = payload
            elif kind == _DELETE:
                transactions.pop(payload, None)
            elif kind == _SETTINGS:
                settings = payload

        self._transactions = transactions
        self._settings = settings
        self._pending = []

    def rollback(self) -> None:
        self._pending = []

    @property
    def has_pending_changes(self) -> bool:
        return bool(self._pending)
