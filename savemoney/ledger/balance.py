"""
Balance Maintenance

Keeps total_balance in step with every transaction mutation.

DESIGN DECISION: The maintainer never mutates settings in place. Each
apply returns a new BudgetSettings; the ledger only adopts it once
storage has accepted it. A failed persist therefore leaves the
in-memory balance untouched.

CRITICAL: An edit is a full reversal of the old transaction followed by
applying the new one. It is never a delta of the two amounts, which
gives the wrong balance when the type changes (expense -> income).
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from savemoney.models.ledger import BudgetSettings, TransactionType


def balance_effect(transaction_type: TransactionType, amount: Decimal) -> Decimal:
    """Signed change to the balance caused by a transaction."""
    return -amount if transaction_type.is_expense else amount


class BalanceMaintainer:
    """
    Computes the balance after adding, removing or editing a transaction.

    Every apply refreshes updated_at from the clock.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or datetime.now

    def _with_balance(self, settings: BudgetSettings, balance: Decimal) -> BudgetSettings:
        return settings.model_copy(
            update={"total_balance": balance, "updated_at": self._clock()}
        )

    def apply_add(
        self,
        settings: BudgetSettings,
        transaction_type: TransactionType,
        amount: Decimal,
    ) -> BudgetSettings:
        """Income adds the amount, expense subtracts it."""
        return self._with_balance(
            settings,
            settings.total_balance + balance_effect(transaction_type, amount),
        )

    def apply_remove(
        self,
        settings: BudgetSettings,
        transaction_type: TransactionType,
        amount: Decimal,
    ) -> BudgetSettings:
        """Undo a transaction's earlier effect on the balance."""
        return self._with_balance(
            settings,
            settings.total_balance - balance_effect(transaction_type, amount),
        )

    def apply_edit(
        self,
        settings: BudgetSettings,
        old_type: TransactionType,
        old_amount: Decimal,
        new_type: TransactionType,
        new_amount: Decimal,
    ) -> BudgetSettings:
        """Reverse the old transaction, then apply the new one."""
        reversed_settings = self.apply_remove(settings, old_type, old_amount)
        return self.apply_add(reversed_settings, new_type, new_amount)
