"""Ledger package: balance maintenance and the ledger facade."""

from savemoney.ledger.balance import BalanceMaintainer, balance_effect
from savemoney.ledger.facade import LedgerFacade

__all__ = ["BalanceMaintainer", "LedgerFacade", "balance_effect"]
