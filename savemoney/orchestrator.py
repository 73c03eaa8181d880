"""
Component Factory for SaveMoney

Wires storage, balance maintenance, logging and configuration into a
ready-to-use LedgerFacade.

DESIGN DECISION: The backend is chosen from configuration, so callers
(a UI, a CLI, tests) never construct storage classes themselves.
"""

from datetime import datetime
from typing import Callable, Optional

from savemoney.config import LedgerSettings, get_settings
from savemoney.events import LedgerEventLogger, configure_logging
from savemoney.ledger import BalanceMaintainer, LedgerFacade
from savemoney.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
)


def create_storage(backend: str) -> LedgerStorageInterface:
    """Build the ledger store named by backend."""
    if backend == "memory":
        return InMemoryLedgerStorage()
    if backend == "google_sheets":
        return GoogleSheetsLedgerStorage(GoogleSheetsClient())
    raise ValueError(f"Unknown storage backend: {backend}")


def create_ledger(
    backend: Optional[str] = None,
    storage: Optional[LedgerStorageInterface] = None,
    config: Optional[LedgerSettings] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> LedgerFacade:
    """
    Factory function to create a loaded ledger.

    Args:
        backend: 'memory' or 'google_sheets'. Defaults to configuration.
        storage: A ready store; overrides backend when given.
        config: Ledger settings. Defaults to environment configuration.
        clock: Source of "now". Defaults to the local clock.

    Returns:
        A LedgerFacade with transactions and settings already loaded.
        If loading failed, the facade's error_message says why.
    """
    config = config or get_settings().ledger
    configure_logging(config.log_level)

    if storage is None:
        storage = create_storage(backend or config.storage_backend)

    ledger = LedgerFacade(
        storage=storage,
        balance_maintainer=BalanceMaintainer(clock),
        event_logger=LedgerEventLogger(),
        clock=clock,
        config=config,
    )
    ledger.load()
    return ledger
