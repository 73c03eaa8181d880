"""Ledger event logging package."""

from savemoney.events.logger import LedgerEventLogger, configure_logging

__all__ = ["LedgerEventLogger", "configure_logging"]
