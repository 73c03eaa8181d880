"""
Data Models Package

This package contains all Pydantic models used in the SaveMoney ledger.
All data flowing through the system must conform to these schemas.
"""

from savemoney.models.ledger import (
    BudgetSettings,
    BudgetSummary,
    CalendarDay,
    DailyBudgetStatus,
    DailySpending,
    OperationResult,
    Transaction,
    TransactionGroup,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    to_local_naive,
)
from savemoney.models.events import (
    EventSeverity,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)

__all__ = [
    # Ledger models
    "BudgetSettings",
    "BudgetSummary",
    "CalendarDay",
    "DailyBudgetStatus",
    "DailySpending",
    "OperationResult",
    "Transaction",
    "TransactionGroup",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    "to_local_naive",
    # Event models
    "EventSeverity",
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
]
