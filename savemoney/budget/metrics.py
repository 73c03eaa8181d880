"""
Budget Metrics Engine

Pure functions deriving budget status from the transaction list, the
budget settings and the current moment. Nothing here mutates its
inputs or keeps state between calls.

Day bucketing uses the calendar date of each timestamp, never a rolling
24-hour window: 23:59 and 00:01 belong to different days.
Timezone-aware moments are converted to local time first.

Amounts are never rounded here. Rounding is a display concern.
"""

import calendar
from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable

from savemoney.models.ledger import (
    BudgetSettings,
    BudgetSummary,
    CalendarDay,
    DailyBudgetStatus,
    DailySpending,
    Transaction,
    TransactionGroup,
    to_local_naive,
)


ZERO = Decimal("0")
ONE = Decimal("1")

TODAY_LABEL = "Today"


def _sum_amounts(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def _local_today(now: datetime) -> CalendarDay:
    return to_local_naive(now).date()


def _expenses(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.type.is_expense]


def start_of_month(now: datetime) -> CalendarDay:
    """First calendar day of the month containing now."""
    return _local_today(now).replace(day=1)


# =============================================================================
# TODAY
# =============================================================================

def todays_expenses(
    transactions: Iterable[Transaction],
    now: datetime,
) -> list[Transaction]:
    """Expenses dated on the same calendar day as now."""
    today = _local_today(now)
    return [t for t in _expenses(transactions) if t.day == today]


def todays_total_spending(
    transactions: Iterable[Transaction],
    now: datetime,
) -> Decimal:
    return _sum_amounts(todays_expenses(transactions, now))


# =============================================================================
# THIS MONTH
# =============================================================================

def this_months_expenses(
    transactions: Iterable[Transaction],
    now: datetime,
) -> list[Transaction]:
    """
    Expenses dated on or after the first day of now's month.

    There is no upper bound, so postdated expenses count too.
    """
    first_day = start_of_month(now)
    return [t for t in _expenses(transactions) if t.day >= first_day]


def total_spent_this_month(
    transactions: Iterable[Transaction],
    now: datetime,
) -> Decimal:
    return _sum_amounts(this_months_expenses(transactions, now))


def remaining_budget(monthly_target: Decimal, spent_this_month: Decimal) -> Decimal:
    """What is left of the monthly target. Never negative."""
    return max(ZERO, monthly_target - spent_this_month)


def budget_progress(monthly_target: Decimal, spent_this_month: Decimal) -> Decimal:
    """
    Fraction of the monthly target spent, clamped to [0, 1].

    A zero target means "unset" and always reports 0.
    """
    if monthly_target <= 0:
        return ZERO
    return min(ONE, spent_this_month / monthly_target)


# =============================================================================
# DAILY TARGET
# =============================================================================

def total_days_in_month(now: datetime) -> int:
    local = to_local_naive(now)
    return calendar.monthrange(local.year, local.month)[1]


def daily_budget_target(monthly_target: Decimal, now: datetime) -> Decimal:
    """Monthly target spread evenly over the days of now's month."""
    days = total_days_in_month(now)
    if days == 0:
        return ZERO
    return monthly_target / Decimal(days)


def is_daily_budget_exceeded(daily_target: Decimal, spent_today: Decimal) -> bool:
    """Only a positive daily target can be exceeded."""
    return spent_today > daily_target and daily_target > 0


def daily_budget_difference(daily_target: Decimal, spent_today: Decimal) -> Decimal:
    """Positive when under the daily target, negative when over."""
    return daily_target - spent_today


def daily_budget_status(daily_target: Decimal, spent_today: Decimal) -> DailyBudgetStatus:
    if daily_target <= 0:
        return DailyBudgetStatus.NO_TARGET
    if is_daily_budget_exceeded(daily_target, spent_today):
        return DailyBudgetStatus.EXCEEDED
    return DailyBudgetStatus.ON_TRACK


# =============================================================================
# HISTORY AND GROUPING
# =============================================================================

def last_7_days_spending(
    transactions: Iterable[Transaction],
    now: datetime,
) -> list[DailySpending]:
    """
    Expense totals for the 7 calendar days ending today, oldest first.

    Days without expenses are included with a zero amount.
    """
    totals: dict[CalendarDay, Decimal] = defaultdict(lambda: ZERO)
    for t in _expenses(transactions):
        totals[t.day] += t.amount

    today = _local_today(now)
    result = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        label = TODAY_LABEL if offset == 0 else day.strftime("%a")
        result.append(DailySpending(day=label, amount=totals[day], date=day))
    return result


def group_by_date(transactions: Iterable[Transaction]) -> list[TransactionGroup]:
    """
    Group transactions by calendar day, newest day first.

    Order within a group follows the input order.
    """
    groups: dict[CalendarDay, list[Transaction]] = {}
    for t in transactions:
        groups.setdefault(t.day, []).append(t)

    return [
        TransactionGroup(date=day, transactions=groups[day])
        for day in sorted(groups, reverse=True)
    ]


# =============================================================================
# SUMMARY
# =============================================================================

def build_budget_summary(
    transactions: list[Transaction],
    settings: BudgetSettings,
    now: datetime,
) -> BudgetSummary:
    """Every derived budget number for one moment."""
    now = to_local_naive(now)
    spent_today = todays_total_spending(transactions, now)
    spent_month = total_spent_this_month(transactions, now)
    daily_target = daily_budget_target(settings.monthly_target, now)

    return BudgetSummary(
        computed_at=now,
        total_balance=settings.total_balance,
        monthly_target=settings.monthly_target,
        todays_total_spending=spent_today,
        total_spent_this_month=spent_month,
        remaining_budget=remaining_budget(settings.monthly_target, spent_month),
        budget_progress=budget_progress(settings.monthly_target, spent_month),
        total_days_in_month=total_days_in_month(now),
        daily_budget_target=daily_target,
        daily_budget_difference=daily_budget_difference(daily_target, spent_today),
        is_daily_budget_exceeded=is_daily_budget_exceeded(daily_target, spent_today),
        daily_budget_status=daily_budget_status(daily_target, spent_today),
        last_7_days_spending=last_7_days_spending(transactions, now),
    )
