"""
Shared fixtures for SaveMoney tests.

All tests run against a fixed clock in a 31-day month (January 2025)
and never touch the network.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from savemoney.config import LedgerSettings
from savemoney.events import LedgerEventLogger
from savemoney.ledger import BalanceMaintainer, LedgerFacade
from savemoney.services.storage import InMemoryLedgerStorage, StorageError


NOW = datetime(2025, 1, 15, 14, 30)


class FixedClock:
    """A clock tests can move by hand."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FlakyStorage(InMemoryLedgerStorage):
    """In-memory store whose persist/fetch can be made to fail."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_persist = False
        self.fail_fetch = False

    def persist(self) -> None:
        if self.fail_persist:
            raise StorageError("disk full")
        super().persist()

    def fetch_all_transactions(self):
        if self.fail_fetch:
            raise StorageError("read timeout")
        return super().fetch_all_transactions()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def ledger_config() -> LedgerSettings:
    return LedgerSettings(
        default_total_balance=Decimal("0"),
        default_monthly_target=Decimal("1000000"),
        recent_transactions_limit=5,
    )


@pytest.fixture
def storage() -> FlakyStorage:
    return FlakyStorage()


@pytest.fixture
def event_logger() -> LedgerEventLogger:
    return LedgerEventLogger()


@pytest.fixture
def ledger(storage, clock, ledger_config, event_logger) -> LedgerFacade:
    facade = LedgerFacade(
        storage=storage,
        balance_maintainer=BalanceMaintainer(clock),
        event_logger=event_logger,
        clock=clock,
        config=ledger_config,
    )
    facade.load()
    return facade
