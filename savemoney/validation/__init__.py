"""Input validation package."""

from savemoney.validation.validator import TransactionValidator

__all__ = ["TransactionValidator"]
