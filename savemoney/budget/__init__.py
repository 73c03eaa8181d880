"""Budget metrics package."""

from savemoney.budget.metrics import (
    budget_progress,
    build_budget_summary,
    daily_budget_difference,
    daily_budget_status,
    daily_budget_target,
    group_by_date,
    is_daily_budget_exceeded,
    last_7_days_spending,
    remaining_budget,
    start_of_month,
    this_months_expenses,
    todays_expenses,
    todays_total_spending,
    total_days_in_month,
    total_spent_this_month,
)

__all__ = [
    "budget_progress",
    "build_budget_summary",
    "daily_budget_difference",
    "daily_budget_status",
    "daily_budget_target",
    "group_by_date",
    "is_daily_budget_exceeded",
    "last_7_days_spending",
    "remaining_budget",
    "start_of_month",
    "this_months_expenses",
    "todays_expenses",
    "todays_total_spending",
    "total_days_in_month",
    "total_spent_this_month",
]
