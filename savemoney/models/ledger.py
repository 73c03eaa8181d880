"""
Core Data Models for SaveMoney

These models define the strict schemas for all ledger data.
They are designed to:
1. Enforce the amount and target invariants at construction time
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Money is held as Decimal and never rounded here.
Rounding and currency formatting belong to whoever displays the numbers.

DESIGN DECISION: Amounts are magnitudes only. The direction of a
transaction's effect on the balance comes from its type, never its sign.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# Alias so models with a field called ``date`` can still name the type.
CalendarDay = date


def to_local_naive(moment: datetime) -> datetime:
    """Aware timestamps become naive local time; naive ones are already local."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """
    Direction of a transaction.

    Income adds to the balance, expense subtracts from it.
    """
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def is_expense(self) -> bool:
        return self is TransactionType.EXPENSE


class DailyBudgetStatus(str, Enum):
    """Where today's spending stands against the daily target."""
    NO_TARGET = "no_target"  # Monthly target unset or zero
    EXCEEDED = "exceeded"    # Spent more than the daily target
    ON_TRACK = "on_track"    # Still within the daily target


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense entry.

    The id is assigned once on creation and can never be reassigned.
    Every other field may be replaced through the ledger's update operation.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        frozen=True,
        description="Unique transaction ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display label"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Magnitude of the transaction; sign comes from type"
    )
    date: datetime = Field(
        default_factory=datetime.now,
        description="When the transaction happened (may be back- or postdated)"
    )
    type: TransactionType = Field(
        ...,
        description="Income or expense"
    )
    category: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Free-text category tag"
    )

    @field_validator('category', mode='before')
    @classmethod
    def blank_category_is_none(cls, v: Optional[str]) -> Optional[str]:
        """An empty or whitespace-only category means no category."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('date', mode='after')
    @classmethod
    def date_in_local_time(cls, v: datetime) -> datetime:
        """Calendar days are local, so store the local wall-clock time."""
        return to_local_naive(v)

    @property
    def signed_amount(self) -> Decimal:
        """Effect of this transaction on the balance."""
        return -self.amount if self.type.is_expense else self.amount

    @property
    def day(self) -> CalendarDay:
        """Calendar day the transaction belongs to."""
        return self.date.date()


class BudgetSettings(BaseModel):
    """
    The ledger's balance and monthly spending target.

    CRITICAL: Exactly one of these exists per ledger. Stores keep it in a
    single slot rather than a collection.

    total_balance may go negative. monthly_target of zero means
    "no budget set".
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique settings ID"
    )
    total_balance: Decimal = Field(
        default=Decimal("0"),
        description="Running balance"
    )
    monthly_target: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Monthly spending target (0 = unset)"
    )
    created_at: datetime = Field(
        default_factory=datetime.now,
        description="When the settings record was created"
    )
    updated_at: datetime = Field(
        default_factory=datetime.now,
        description="Last update timestamp"
    )

    def updated(
        self,
        total_balance: Optional[Decimal] = None,
        monthly_target: Optional[Decimal] = None,
        now: Optional[datetime] = None,
    ) -> "BudgetSettings":
        """
        Return a validated copy with the supplied fields replaced.

        Omitted (None) fields keep their current value. updated_at is
        always refreshed.
        """
        data = self.model_dump()
        if total_balance is not None:
            data["total_balance"] = total_balance
        if monthly_target is not None:
            data["monthly_target"] = monthly_target
        data["updated_at"] = now or datetime.now()
        return BudgetSettings.model_validate(data)


# =============================================================================
# DERIVED VIEW MODELS
# =============================================================================

class DailySpending(BaseModel):
    """Total expenses for one calendar day, for the 7-day chart."""

    day: str = Field(
        ...,
        description="Short label for the day (e.g. 'Mon', 'Today')"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Sum of that day's expenses"
    )
    date: CalendarDay = Field(
        ...,
        description="The calendar day"
    )


class TransactionGroup(BaseModel):
    """Transactions that fall on one calendar day."""

    date: CalendarDay
    transactions: list[Transaction] = Field(default_factory=list)

    @property
    def total_expenses(self) -> Decimal:
        return sum(
            (t.amount for t in self.transactions if t.type.is_expense),
            Decimal("0"),
        )


class BudgetSummary(BaseModel):
    """
    One snapshot of every derived budget number.

    Built fresh on each request; nothing here is stored.
    """

    computed_at: datetime
    total_balance: Decimal
    monthly_target: Decimal

    todays_total_spending: Decimal
    total_spent_this_month: Decimal
    remaining_budget: Decimal
    budget_progress: Decimal = Field(ge=0, le=1)

    total_days_in_month: int = Field(ge=0)
    daily_budget_target: Decimal
    daily_budget_difference: Decimal
    is_daily_budget_exceeded: bool
    daily_budget_status: DailyBudgetStatus

    last_7_days_spending: list[DailySpending] = Field(default_factory=list)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of checking user input before it reaches the ledger.

    Errors block saving. Warnings are shown but do not block.
    """

    validated_at: datetime = Field(
        default_factory=datetime.now
    )
    is_valid: bool = Field(
        ...,
        description="True when there are no error-level issues"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")


# =============================================================================
# OPERATION RESULTS
# =============================================================================

class OperationResult(BaseModel):
    """
    Outcome of a ledger mutation.

    Storage failures are reported here instead of being raised.
    """

    success: bool
    error_message: Optional[str] = None
    transaction: Optional[Transaction] = Field(
        default=None,
        description="The transaction as stored after the operation, if any"
    )
