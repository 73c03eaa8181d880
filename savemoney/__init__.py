"""
SaveMoney - Ledger Package

The ledger and budget engine behind a personal money tracker.
Records income and expense transactions, keeps a running balance
and derives daily/monthly budget status from them.

DESIGN PRINCIPLES:
1. The balance always equals the last set balance plus net transactions
2. Nothing changes in memory until storage has accepted it
3. Derived numbers are computed on demand, never cached
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SaveMoney Team"
