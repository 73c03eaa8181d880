"""
Ledger Facade

The single entry point callers use to change or read the ledger.

Every mutation follows the same steps:
1. Read the current settings and the stored transaction
2. Compute the new balance (BalanceMaintainer)
3. Stage the transaction change together with the new settings
4. persist() both as one unit
5. Only on success adopt the new settings and reload the cache

DESIGN DECISION: Storage failures never escape a mutation. They are
rolled back, logged, and reported through OperationResult and
error_message. The in-memory state is left exactly as it was.

DESIGN DECISION: The transaction cache is fully reloaded from storage
after every successful mutation. No incremental patching, so the cache
cannot drift from what is stored.

DESIGN DECISION: Every metric is recomputed on each call from the cache,
the settings and the clock. Nothing derived is cached.

Calls are synchronous and not locked. Callers serialize mutations.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional, Union
from uuid import UUID

from savemoney.budget import metrics
from savemoney.config import LedgerSettings, get_settings
from savemoney.events import LedgerEventLogger
from savemoney.ledger.balance import BalanceMaintainer
from savemoney.models.ledger import (
    BudgetSettings,
    BudgetSummary,
    DailyBudgetStatus,
    DailySpending,
    OperationResult,
    Transaction,
    TransactionGroup,
    TransactionType,
)
from savemoney.services.storage import (
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)


TransactionRef = Union[Transaction, UUID]


class LedgerFacade:
    """
    Owns the in-memory view of the ledger and coordinates every change.

    Holds only the transaction cache and the settings record. Everything
    else is derived on request.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        balance_maintainer: Optional[BalanceMaintainer] = None,
        event_logger: Optional[LedgerEventLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
        config: Optional[LedgerSettings] = None,
    ):
        self._storage = storage
        self._clock = clock or datetime.now
        self._balance = balance_maintainer or BalanceMaintainer(self._clock)
        self._events = event_logger or LedgerEventLogger()
        self._config = config or get_settings().ledger

        self._transactions: list[Transaction] = []
        self._settings: Optional[BudgetSettings] = None
        self._error_message: Optional[str] = None

    # =========================================================================
    # LOADING
    # =========================================================================

    def load(self) -> bool:
        """
        Load transactions and settings from storage.

        Creates the default settings record if storage holds none.
        Returns False (and sets error_message) if anything failed.
        """
        ok = True
        try:
            self._reload_transactions()
        except StorageError as e:
            self._report_failure("fetch transactions", e)
            ok = False

        try:
            self._load_settings()
        except StorageError as e:
            self._report_failure("fetch budget settings", e)
            ok = False

        return ok

    def _reload_transactions(self) -> None:
        self._transactions = self._storage.fetch_all_transactions()
        self._events.log_ledger_reloaded(len(self._transactions))

    def _load_settings(self) -> None:
        settings = self._storage.fetch_budget_settings()
        if settings is not None:
            self._settings = settings
            return

        now = self._clock()
        settings = BudgetSettings(
            total_balance=self._config.default_total_balance,
            monthly_target=self._config.default_monthly_target,
            created_at=now,
            updated_at=now,
        )
        try:
            self._storage.save_budget_settings(settings)
            self._storage.persist()
        except StorageError:
            self._storage.rollback()
            raise

        self._settings = settings
        self._events.log_settings_created(
            settings_id=settings.id,
            total_balance=settings.total_balance,
            monthly_target=settings.monthly_target,
        )

    def _require_settings(self) -> BudgetSettings:
        if self._settings is None:
            self._load_settings()
        return self._settings

    def _find_cached(self, ref: TransactionRef) -> Transaction:
        transaction_id = ref.id if isinstance(ref, Transaction) else ref
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        raise NotFoundError(f"Transaction not found: {transaction_id}")

    # =========================================================================
    # FAILURE HANDLING
    # =========================================================================

    def _report_failure(
        self,
        action: str,
        error: StorageError,
        entity_id: Optional[UUID] = None,
    ) -> str:
        message = f"Failed to {action}: {error}"
        self._error_message = message
        self._events.log_storage_failed(
            operation=action,
            error_message=str(error),
            entity_id=entity_id,
        )
        return message

    def _failed(
        self,
        action: str,
        error: StorageError,
        entity_id: Optional[UUID] = None,
    ) -> OperationResult:
        return OperationResult(
            success=False,
            error_message=self._report_failure(action, error, entity_id),
        )

    def _commit(
        self,
        action: str,
        stage: Callable[[], None],
        new_settings: BudgetSettings,
        entity_id: Optional[UUID] = None,
    ) -> Optional[OperationResult]:
        """
        Persist a staged change with the new settings as one unit.

        Returns a failure result, or None once the change is committed
        and the cache reloaded.
        """
        try:
            stage()
            self._storage.save_budget_settings(new_settings)
            self._storage.persist()
        except StorageError as e:
            self._storage.rollback()
            return self._failed(action, e, entity_id)

        self._settings = new_settings
        self._error_message = None

        try:
            self._reload_transactions()
        except StorageError as e:
            # Committed, but the cache could not be refreshed
            self._report_failure("reload transactions", e)
        return None

    def _succeeded(self, transaction_id: Optional[UUID] = None) -> OperationResult:
        transaction = None
        if transaction_id is not None:
            try:
                transaction = self._find_cached(transaction_id).model_copy(deep=True)
            except NotFoundError:
                transaction = None
        return OperationResult(
            success=True,
            error_message=self._error_message,
            transaction=transaction,
        )

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add_transaction(
        self,
        name: str,
        amount: Decimal,
        type: TransactionType,
        date: Optional[datetime] = None,
        category: Optional[str] = None,
    ) -> OperationResult:
        """
        Record a new transaction and apply it to the balance.

        date defaults to now. Raises ValueError for an empty name or a
        non-positive amount; storage failures are reported in the result.
        """
        transaction = Transaction(
            name=name,
            amount=amount,
            date=date or self._clock(),
            type=type,
            category=category,
        )

        try:
            settings = self._require_settings()
        except StorageError as e:
            self._storage.rollback()
            return self._failed("save transaction", e, transaction.id)

        new_settings = self._balance.apply_add(
            settings, transaction.type, transaction.amount
        )
        failure = self._commit(
            "save transaction",
            lambda: self._storage.insert_transaction(transaction),
            new_settings,
            transaction.id,
        )
        if failure is not None:
            return failure

        self._events.log_transaction_added(
            transaction_id=transaction.id,
            transaction_type=transaction.type.value,
            amount=transaction.amount,
            balance_after=new_settings.total_balance,
        )
        return self._succeeded(transaction.id)

    def update_transaction(
        self,
        existing: TransactionRef,
        name: str,
        amount: Decimal,
        type: TransactionType,
        date: datetime,
        category: Optional[str] = None,
    ) -> OperationResult:
        """
        Replace every field of an existing transaction.

        The balance is corrected by reversing the stored transaction and
        applying the new values. An empty category clears it.
        """
        try:
            stored = self._find_cached(existing)
        except NotFoundError as e:
            return self._failed("update transaction", e)

        updated = Transaction(
            id=stored.id,
            name=name,
            amount=amount,
            date=date,
            type=type,
            category=category,
        )

        try:
            settings = self._require_settings()
        except StorageError as e:
            self._storage.rollback()
            return self._failed("update transaction", e, stored.id)

        new_settings = self._balance.apply_edit(
            settings,
            stored.type,
            stored.amount,
            updated.type,
            updated.amount,
        )
        failure = self._commit(
            "update transaction",
            lambda: self._storage.update_transaction(updated),
            new_settings,
            stored.id,
        )
        if failure is not None:
            return failure

        self._events.log_transaction_updated(
            transaction_id=stored.id,
            old_type=stored.type.value,
            old_amount=stored.amount,
            new_type=updated.type.value,
            new_amount=updated.amount,
            balance_after=new_settings.total_balance,
        )
        return self._succeeded(stored.id)

    def delete_transaction(self, transaction: TransactionRef) -> OperationResult:
        """Remove a transaction and reverse its effect on the balance."""
        try:
            stored = self._find_cached(transaction)
        except NotFoundError as e:
            return self._failed("delete transaction", e)

        try:
            settings = self._require_settings()
        except StorageError as e:
            self._storage.rollback()
            return self._failed("delete transaction", e, stored.id)

        new_settings = self._balance.apply_remove(settings, stored.type, stored.amount)
        failure = self._commit(
            "delete transaction",
            lambda: self._storage.delete_transaction(stored.id),
            new_settings,
            stored.id,
        )
        if failure is not None:
            return failure

        self._events.log_transaction_deleted(
            transaction_id=stored.id,
            transaction_type=stored.type.value,
            amount=stored.amount,
            balance_after=new_settings.total_balance,
        )
        return OperationResult(success=True, error_message=self._error_message)

    def delete_transactions(self, indices: Iterable[int]) -> list[OperationResult]:
        """
        Delete transactions by their position in the current list.

        Positions are resolved before anything is deleted, so later
        positions are not shifted by earlier deletions. A position outside
        the list (negative ones included) gets a failed result.
        """
        count = len(self._transactions)
        targets = [
            (index, self._transactions[index].id if 0 <= index < count else None)
            for index in indices
        ]

        results = []
        for index, transaction_id in targets:
            if transaction_id is None:
                error = NotFoundError(f"No transaction at position {index}")
                results.append(self._failed("delete transaction", error))
            else:
                results.append(self.delete_transaction(transaction_id))
        return results

    def update_budget_settings(
        self,
        total_balance: Optional[Decimal] = None,
        monthly_target: Optional[Decimal] = None,
    ) -> OperationResult:
        """
        Change the balance and/or the monthly target.

        Omitted fields are left alone. Setting total_balance overrides
        the ledger-derived balance; later transactions build on it.
        """
        try:
            settings = self._require_settings()
        except StorageError as e:
            self._storage.rollback()
            return self._failed("update budget settings", e)

        new_settings = settings.updated(
            total_balance=total_balance,
            monthly_target=monthly_target,
            now=self._clock(),
        )
        failure = self._commit(
            "update budget settings",
            lambda: None,
            new_settings,
            settings.id,
        )
        if failure is not None:
            return failure

        changed_fields = [
            field
            for field, value in (
                ("total_balance", total_balance),
                ("monthly_target", monthly_target),
            )
            if value is not None
        ]
        self._events.log_settings_updated(
            settings_id=new_settings.id,
            total_balance=new_settings.total_balance,
            monthly_target=new_settings.monthly_target,
            changed_fields=changed_fields,
        )
        return OperationResult(success=True, error_message=self._error_message)

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def error_message(self) -> Optional[str]:
        """User-visible message from the last failed operation, if any."""
        return self._error_message

    @property
    def transactions(self) -> list[Transaction]:
        """All transactions, newest first."""
        return [t.model_copy(deep=True) for t in self._transactions]

    @property
    def settings(self) -> Optional[BudgetSettings]:
        if self._settings is None:
            return None
        return self._settings.model_copy(deep=True)

    @property
    def total_balance(self) -> Decimal:
        return self._settings.total_balance if self._settings else metrics.ZERO

    @property
    def monthly_target(self) -> Decimal:
        return self._settings.monthly_target if self._settings else metrics.ZERO

    def recent_transactions(self, limit: Optional[int] = None) -> list[Transaction]:
        """The newest transactions, up to limit (configured default 5)."""
        if limit is None:
            limit = self._config.recent_transactions_limit
        return self.transactions[:limit]

    def transactions_grouped_by_date(self) -> list[TransactionGroup]:
        return metrics.group_by_date(self.transactions)

    # =========================================================================
    # DERIVED METRICS
    # =========================================================================

    def todays_expenses(self) -> list[Transaction]:
        return metrics.todays_expenses(self.transactions, self._clock())

    def todays_total_spending(self) -> Decimal:
        return metrics.todays_total_spending(self._transactions, self._clock())

    def this_months_expenses(self) -> list[Transaction]:
        return metrics.this_months_expenses(self.transactions, self._clock())

    def total_spent_this_month(self) -> Decimal:
        return metrics.total_spent_this_month(self._transactions, self._clock())

    def remaining_budget(self) -> Decimal:
        return metrics.remaining_budget(
            self.monthly_target, self.total_spent_this_month()
        )

    def budget_progress(self) -> Decimal:
        return metrics.budget_progress(
            self.monthly_target, self.total_spent_this_month()
        )

    def total_days_in_month(self) -> int:
        return metrics.total_days_in_month(self._clock())

    def daily_budget_target(self) -> Decimal:
        return metrics.daily_budget_target(self.monthly_target, self._clock())

    def is_daily_budget_exceeded(self) -> bool:
        return metrics.is_daily_budget_exceeded(
            self.daily_budget_target(), self.todays_total_spending()
        )

    def daily_budget_difference(self) -> Decimal:
        return metrics.daily_budget_difference(
            self.daily_budget_target(), self.todays_total_spending()
        )

    def daily_budget_status(self) -> DailyBudgetStatus:
        return metrics.daily_budget_status(
            self.daily_budget_target(), self.todays_total_spending()
        )

    def last_7_days_spending(self) -> list[DailySpending]:
        return metrics.last_7_days_spending(self._transactions, self._clock())

    def budget_summary(self) -> BudgetSummary:
        """Every derived number at once, all computed for the same moment."""
        settings = self._settings or BudgetSettings(
            total_balance=metrics.ZERO,
            monthly_target=metrics.ZERO,
        )
        return metrics.build_budget_summary(
            self.transactions, settings, self._clock()
        )
