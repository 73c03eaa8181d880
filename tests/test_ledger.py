"""
Tests for the ledger facade.

Flows run against the in-memory store with a fixed clock
(15 January 2025, a 31-day month).
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from savemoney.ledger import LedgerFacade
from savemoney.models.events import LedgerEventType
from savemoney.models.ledger import BudgetSettings, DailyBudgetStatus, TransactionType
from savemoney.services.storage import InMemoryLedgerStorage, StorageError


INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


class TestLoading:
    """Tests for loading transactions and settings."""

    def test_default_settings_created_and_persisted(self, ledger, storage):
        """Test a fresh store gets the default settings record."""
        assert ledger.total_balance == Decimal("0")
        assert ledger.monthly_target == Decimal("1000000")

        stored = storage.fetch_budget_settings()
        assert stored is not None
        assert stored.id == ledger.settings.id
        assert storage.has_pending_changes is False

    def test_settings_created_event(self, ledger, event_logger):
        """Test creating default settings is logged."""
        types = [e.event_type for e in event_logger.recent_events]
        assert LedgerEventType.SETTINGS_CREATED in types

    def test_existing_settings_are_used(self, clock, ledger_config):
        """Test an existing settings record is not replaced."""
        existing = BudgetSettings(total_balance=Decimal("42"), monthly_target=Decimal("7"))
        storage = InMemoryLedgerStorage(settings=existing)
        ledger = LedgerFacade(storage, clock=clock, config=ledger_config)

        assert ledger.load() is True
        assert ledger.settings.id == existing.id
        assert ledger.total_balance == Decimal("42")

    def test_load_failure_is_reported(self, storage, clock, ledger_config):
        """Test a failed fetch sets error_message instead of raising."""
        storage.fail_fetch = True
        ledger = LedgerFacade(storage, clock=clock, config=ledger_config)

        assert ledger.load() is False
        assert "Failed to fetch transactions" in ledger.error_message
        assert ledger.transactions == []

    def test_settings_not_replaced_when_unreadable(self, clock, ledger_config):
        """Test unreadable settings are never overwritten with defaults."""

        class UnreadableSettings(InMemoryLedgerStorage):
            def fetch_budget_settings(self):
                raise StorageError("permission denied")

        storage = UnreadableSettings(settings=BudgetSettings(total_balance=Decimal("900")))
        ledger = LedgerFacade(storage, clock=clock, config=ledger_config)

        assert ledger.load() is False
        assert ledger.settings is None
        assert ledger.total_balance == Decimal("0")

        result = ledger.add_transaction("Lunch", Decimal("10"), EXPENSE)
        assert result.success is False
        assert storage.fetch_all_transactions() == []
        assert storage.has_pending_changes is False


class TestAddTransaction:
    """Tests for adding transactions."""

    def test_spending_scenario(self, ledger):
        """Test expense then income on a fresh ledger."""
        ledger.add_transaction("Lunch", Decimal("25000"), EXPENSE)
        ledger.add_transaction("Salary", Decimal("5000000"), INCOME)

        assert ledger.total_balance == Decimal("4975000")
        assert ledger.todays_total_spending() == Decimal("25000")
        assert ledger.daily_budget_target().quantize(Decimal("0.01")) == Decimal("32258.06")
        assert ledger.is_daily_budget_exceeded() is False
        assert ledger.daily_budget_status() == DailyBudgetStatus.ON_TRACK

    def test_add_returns_stored_transaction(self, ledger, clock):
        """Test the result carries the new transaction with date defaulted to now."""
        result = ledger.add_transaction("Coffee", Decimal("3"), EXPENSE, category=" Drinks ")

        assert result.success is True
        assert result.error_message is None
        assert result.transaction.date == clock.now
        assert result.transaction.category == "Drinks"
        assert [t.id for t in ledger.transactions] == [result.transaction.id]

    def test_add_with_explicit_date(self, ledger, clock):
        """Test a backdated transaction keeps its date."""
        backdated = clock.now - timedelta(days=3)
        result = ledger.add_transaction("Book", Decimal("12"), EXPENSE, date=backdated)

        assert result.transaction.date == backdated
        assert ledger.todays_total_spending() == Decimal("0")
        assert ledger.total_spent_this_month() == Decimal("12")

    def test_add_accepts_type_value(self, ledger):
        """Test the type may be given as its string value."""
        result = ledger.add_transaction("Gift", Decimal("50"), "income")
        assert result.transaction.type is INCOME
        assert ledger.total_balance == Decimal("50")

    def test_invalid_amount_raises_and_changes_nothing(self, ledger, storage):
        """Test a non-positive amount is a caller error."""
        with pytest.raises(ValueError):
            ledger.add_transaction("Broken", Decimal("0"), EXPENSE)

        assert ledger.total_balance == Decimal("0")
        assert storage.has_pending_changes is False

    def test_persist_failure_changes_nothing(self, ledger, storage, event_logger):
        """Test a failed persist keeps balance, settings and cache as they were."""
        ledger.add_transaction("Lunch", Decimal("100"), EXPENSE)
        before_settings = ledger.settings
        before_ids = [t.id for t in ledger.transactions]

        storage.fail_persist = True
        result = ledger.add_transaction("Dinner", Decimal("200"), EXPENSE)

        assert result.success is False
        assert "Failed to save transaction" in result.error_message
        assert ledger.error_message == result.error_message
        assert ledger.total_balance == Decimal("-100")
        assert ledger.settings == before_settings
        assert [t.id for t in ledger.transactions] == before_ids
        assert storage.has_pending_changes is False
        assert event_logger.recent_events[-1].event_type == LedgerEventType.STORAGE_FAILED

    def test_success_after_failure_clears_error(self, ledger, storage):
        """Test error_message is cleared by the next successful mutation."""
        storage.fail_persist = True
        ledger.add_transaction("Lunch", Decimal("100"), EXPENSE)
        assert ledger.error_message is not None

        storage.fail_persist = False
        result = ledger.add_transaction("Lunch", Decimal("100"), EXPENSE)

        assert result.success is True
        assert ledger.error_message is None
        assert ledger.total_balance == Decimal("-100")

    def test_reload_failure_after_commit(self, ledger, storage):
        """Test a committed change whose reload fails is still a success."""
        storage.fail_fetch = True
        result = ledger.add_transaction("Taxi", Decimal("15"), EXPENSE)

        assert result.success is True
        assert "Failed to reload transactions" in result.error_message
        assert ledger.total_balance == Decimal("-15")

    def test_aware_date_mixes_with_local_dates(self, ledger, clock):
        """Test an aware date sits alongside local ones without breaking the reload."""
        ledger.add_transaction("Lunch", Decimal("100"), EXPENSE)
        earlier = clock.now - timedelta(hours=4)

        result = ledger.add_transaction(
            "Salary", Decimal("500"), INCOME,
            date=earlier.astimezone().astimezone(timezone.utc),
        )

        assert result.success is True
        assert result.error_message is None
        assert [t.name for t in ledger.transactions] == ["Lunch", "Salary"]
        assert ledger.transactions[1].date == earlier
        assert ledger.total_balance == Decimal("400")


class TestUpdateTransaction:
    """Tests for editing transactions."""

    def test_expense_to_income_moves_balance_by_200(self, ledger, clock):
        """Test changing type reverses the old effect fully."""
        added = ledger.add_transaction("Refund?", Decimal("100"), EXPENSE).transaction
        before = ledger.total_balance

        result = ledger.update_transaction(
            added, "Refund", Decimal("100"), INCOME, clock.now, None
        )

        assert result.success is True
        assert ledger.total_balance - before == Decimal("200")
        assert ledger.transactions[0].type is INCOME

    def test_update_replaces_all_fields(self, ledger, clock):
        """Test every field is replaced and the id is kept."""
        added = ledger.add_transaction("Bus", Decimal("2"), EXPENSE, category="Travel").transaction
        new_date = clock.now - timedelta(days=1)

        result = ledger.update_transaction(
            added.id, "Train", Decimal("9"), EXPENSE, new_date, "Commute"
        )

        stored = ledger.transactions[0]
        assert stored.id == added.id
        assert stored.name == "Train"
        assert stored.amount == Decimal("9")
        assert stored.date == new_date
        assert stored.category == "Commute"
        assert result.transaction == stored
        assert ledger.total_balance == Decimal("-9")

    def test_empty_category_clears(self, ledger, clock):
        """Test updating with an empty category removes it."""
        added = ledger.add_transaction("Bus", Decimal("2"), EXPENSE, category="Travel").transaction
        ledger.update_transaction(added, "Bus", Decimal("2"), EXPENSE, clock.now, "")
        assert ledger.transactions[0].category is None

    def test_uses_stored_values_not_caller_copy(self, ledger, clock):
        """Test the balance is corrected from the stored transaction."""
        added = ledger.add_transaction("Lunch", Decimal("100"), EXPENSE).transaction
        stale = added.model_copy(update={"amount": Decimal("1")})

        ledger.update_transaction(stale, "Lunch", Decimal("40"), EXPENSE, clock.now)

        assert ledger.total_balance == Decimal("-40")

    def test_update_unknown_transaction(self, ledger, clock):
        """Test updating a missing transaction is reported."""
        result = ledger.update_transaction(uuid4(), "X", Decimal("1"), EXPENSE, clock.now)

        assert result.success is False
        assert "Transaction not found" in result.error_message
        assert ledger.total_balance == Decimal("0")

    def test_update_persist_failure(self, ledger, storage, clock):
        """Test a failed update leaves the old record and balance."""
        added = ledger.add_transaction("Lunch", Decimal("100"), EXPENSE).transaction
        storage.fail_persist = True

        result = ledger.update_transaction(added, "Lunch", Decimal("100"), INCOME, clock.now)

        assert result.success is False
        assert ledger.total_balance == Decimal("-100")
        assert ledger.transactions[0].type is EXPENSE
        assert storage.fetch_all_transactions()[0].type is EXPENSE


class TestDeleteTransaction:
    """Tests for deleting transactions."""

    def test_delete_expense_restores_balance(self, ledger):
        """Test deleting an expense gives its amount back."""
        added = ledger.add_transaction("Shoes", Decimal("50000"), EXPENSE).transaction
        before = ledger.total_balance

        result = ledger.delete_transaction(added)

        assert result.success is True
        assert ledger.total_balance - before == Decimal("50000")
        grouped_ids = [
            t.id for group in ledger.transactions_grouped_by_date() for t in group.transactions
        ]
        assert added.id not in grouped_ids

    def test_delete_income(self, ledger):
        """Test deleting income takes its amount away."""
        added = ledger.add_transaction("Bonus", Decimal("300"), INCOME).transaction
        ledger.delete_transaction(added.id)
        assert ledger.total_balance == Decimal("0")
        assert ledger.transactions == []

    def test_delete_unknown_transaction(self, ledger):
        """Test deleting a missing transaction is reported."""
        result = ledger.delete_transaction(uuid4())
        assert result.success is False
        assert "Transaction not found" in ledger.error_message

    def test_delete_persist_failure(self, ledger, storage):
        """Test a failed delete keeps the transaction and balance."""
        added = ledger.add_transaction("Shoes", Decimal("500"), EXPENSE).transaction
        storage.fail_persist = True

        result = ledger.delete_transaction(added)

        assert result.success is False
        assert ledger.total_balance == Decimal("-500")
        assert [t.id for t in ledger.transactions] == [added.id]

    def test_delete_by_indices(self, ledger, clock):
        """Test positional delete resolves every index before deleting."""
        for days_ago, amount in enumerate(["1", "2", "4", "8"]):
            ledger.add_transaction(
                f"t{days_ago}", Decimal(amount), EXPENSE, date=clock.now - timedelta(days=days_ago)
            )
        # Newest first: t0(1), t1(2), t2(4), t3(8)
        results = ledger.delete_transactions([0, 2])

        assert all(r.success for r in results)
        assert [t.name for t in ledger.transactions] == ["t1", "t3"]
        assert ledger.total_balance == Decimal("-10")

    def test_delete_by_out_of_range_index(self, ledger):
        """Test positions outside the list fail without stopping the others."""
        ledger.add_transaction("Only", Decimal("5"), EXPENSE)

        results = ledger.delete_transactions([3, -1, 0])

        assert [r.success for r in results] == [False, False, True]
        assert "No transaction at position 3" in results[0].error_message
        assert ledger.transactions == []
        assert ledger.total_balance == Decimal("0")


class TestBudgetSettingsUpdate:
    """Tests for editing the balance and target."""

    def test_target_change_keeps_balance(self, ledger):
        """Test a new target leaves the balance and updates derived values."""
        ledger.add_transaction("Lunch", Decimal("25000"), EXPENSE)
        balance = ledger.total_balance

        result = ledger.update_budget_settings(monthly_target=Decimal("2000000"))

        assert result.success is True
        assert ledger.total_balance == balance
        assert ledger.daily_budget_target() == Decimal("2000000") / Decimal(31)
        assert ledger.remaining_budget() == Decimal("1975000")

    def test_balance_reset_rebaselines(self, ledger):
        """Test later transactions build on an explicitly set balance."""
        ledger.add_transaction("Lunch", Decimal("100"), EXPENSE)
        ledger.update_budget_settings(total_balance=Decimal("1000"))
        ledger.add_transaction("Pay", Decimal("250"), INCOME)

        assert ledger.total_balance == Decimal("1250")
        assert ledger.monthly_target == Decimal("1000000")

    def test_updated_at_refreshed(self, ledger, clock):
        """Test updated_at moves to now."""
        clock.now = clock.now + timedelta(hours=1)
        ledger.update_budget_settings(monthly_target=Decimal("10"))
        assert ledger.settings.updated_at == clock.now

    def test_negative_target_raises(self, ledger):
        """Test a negative target is a caller error."""
        with pytest.raises(ValueError):
            ledger.update_budget_settings(monthly_target=Decimal("-1"))
        assert ledger.monthly_target == Decimal("1000000")

    def test_zero_target_suppresses_flags(self, ledger):
        """Test an unset target never flags overspending."""
        ledger.update_budget_settings(monthly_target=Decimal("0"))
        ledger.add_transaction("Big", Decimal("999999"), EXPENSE)

        assert ledger.budget_progress() == Decimal("0")
        assert ledger.is_daily_budget_exceeded() is False
        assert ledger.daily_budget_status() == DailyBudgetStatus.NO_TARGET

    def test_settings_persist_failure(self, ledger, storage):
        """Test a failed settings update changes nothing."""
        storage.fail_persist = True
        result = ledger.update_budget_settings(total_balance=Decimal("5"))

        assert result.success is False
        assert "Failed to update budget settings" in result.error_message
        assert ledger.total_balance == Decimal("0")
        assert storage.fetch_budget_settings().total_balance == Decimal("0")


class TestQueries:
    """Tests for read accessors."""

    def test_recent_transactions_default_limit(self, ledger, clock):
        """Test recent list is the newest five by default."""
        for i in range(7):
            ledger.add_transaction(f"t{i}", Decimal("1"), EXPENSE, date=clock.now - timedelta(hours=i))

        recent = ledger.recent_transactions()
        assert [t.name for t in recent] == ["t0", "t1", "t2", "t3", "t4"]
        assert len(ledger.recent_transactions(limit=2)) == 2

    def test_returned_transactions_are_copies(self, ledger):
        """Test callers cannot change the ledger through returned objects."""
        ledger.add_transaction("Lunch", Decimal("10"), EXPENSE)
        ledger.transactions[0].name = "Changed"
        ledger.transactions.clear()
        assert ledger.transactions[0].name == "Lunch"

    def test_metrics_follow_the_clock(self, ledger, clock):
        """Test derived values are recomputed for the current moment."""
        ledger.add_transaction("Lunch", Decimal("10"), EXPENSE)
        assert ledger.todays_total_spending() == Decimal("10")

        clock.now = clock.now + timedelta(days=1)
        assert ledger.todays_total_spending() == Decimal("0")
        assert ledger.last_7_days_spending()[-2].amount == Decimal("10")

    def test_budget_summary(self, ledger):
        """Test the summary reflects the ledger."""
        ledger.add_transaction("Lunch", Decimal("40000"), EXPENSE)
        summary = ledger.budget_summary()

        assert summary.total_balance == Decimal("-40000")
        assert summary.todays_total_spending == Decimal("40000")
        assert summary.is_daily_budget_exceeded is True
        assert summary.daily_budget_status == DailyBudgetStatus.EXCEEDED
        assert summary.daily_budget_difference < 0

    def test_this_months_and_todays_expenses(self, ledger, clock):
        """Test expense lists exclude income and other months."""
        ledger.add_transaction("Pay", Decimal("100"), INCOME)
        ledger.add_transaction("Old", Decimal("5"), EXPENSE, date=datetime(2024, 12, 20))
        ledger.add_transaction("Lunch", Decimal("7"), EXPENSE)

        assert [t.name for t in ledger.todays_expenses()] == ["Lunch"]
        assert [t.name for t in ledger.this_months_expenses()] == ["Lunch"]
        assert ledger.total_days_in_month() == 31


class TestBalanceInvariant:
    """The balance always equals the baseline plus net transactions."""

    def test_invariant_over_mixed_sequence(self, ledger, clock):
        """Test add/update/delete sequences keep the balance consistent."""
        ledger.update_budget_settings(total_balance=Decimal("1000"))

        a = ledger.add_transaction("a", Decimal("100"), EXPENSE).transaction
        b = ledger.add_transaction("b", Decimal("250.50"), INCOME).transaction
        c = ledger.add_transaction("c", Decimal("75"), EXPENSE).transaction
        ledger.update_transaction(a, "a", Decimal("100"), INCOME, clock.now)
        ledger.update_transaction(b, "b", Decimal("20"), EXPENSE, clock.now)
        ledger.delete_transaction(c)
        ledger.add_transaction("d", Decimal("5"), EXPENSE)

        net = sum((t.signed_amount for t in ledger.transactions), Decimal("0"))
        assert ledger.total_balance == Decimal("1000") + net
        assert ledger.total_balance == Decimal("1075")

    def test_invariant_survives_failures(self, ledger, storage, clock):
        """Test failed mutations do not disturb the invariant."""
        a = ledger.add_transaction("a", Decimal("60"), EXPENSE).transaction

        storage.fail_persist = True
        ledger.add_transaction("b", Decimal("10"), INCOME)
        ledger.update_transaction(a, "a", Decimal("60"), INCOME, clock.now)
        ledger.delete_transaction(a)
        storage.fail_persist = False

        net = sum((t.signed_amount for t in ledger.transactions), Decimal("0"))
        assert ledger.total_balance == net == Decimal("-60")
        assert storage.fetch_budget_settings().total_balance == Decimal("-60")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
