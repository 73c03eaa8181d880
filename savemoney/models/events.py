"""
Ledger Event Models for SaveMoney

Every ledger mutation produces one structured event for the local log.
This provides:
1. Debugging information when a persist fails
2. A readable trace of what changed the balance and when

DESIGN DECISION: Events only go to the structured log. They are not
persisted and are not an edit history of the ledger.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of events the ledger emits."""
    # Settings
    SETTINGS_CREATED = "settings_created"
    SETTINGS_UPDATED = "settings_updated"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Cache
    LEDGER_RELOADED = "ledger_reloaded"

    # Failures
    STORAGE_FAILED = "storage_failed"


class EventSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """
    A single ledger event.

    Every mutation creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: LedgerEventType = Field(
        ...,
        description="Type of event"
    )
    severity: EventSeverity = Field(
        default=EventSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity ('transaction' or 'settings')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.transaction_added(transaction_id, "expense", amount, balance)
        event = LedgerEventBuilder.storage_failed("add_transaction", str(error))
    """

    @staticmethod
    def settings_created(
        settings_id: UUID,
        total_balance: Decimal,
        monthly_target: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SETTINGS_CREATED,
            entity_type="settings",
            entity_id=settings_id,
            description="Default budget settings created",
            details={
                "total_balance": str(total_balance),
                "monthly_target": str(monthly_target),
            },
        )

    @staticmethod
    def settings_updated(
        settings_id: UUID,
        total_balance: Decimal,
        monthly_target: Decimal,
        changed_fields: list[str],
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SETTINGS_UPDATED,
            entity_type="settings",
            entity_id=settings_id,
            description=f"Budget settings updated: {', '.join(changed_fields) or 'nothing'}",
            details={
                "total_balance": str(total_balance),
                "monthly_target": str(monthly_target),
                "changed_fields": changed_fields,
            },
        )

    @staticmethod
    def transaction_added(
        transaction_id: UUID,
        transaction_type: str,
        amount: Decimal,
        balance_after: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction added: {transaction_type} {amount}",
            details={
                "type": transaction_type,
                "amount": str(amount),
                "balance_after": str(balance_after),
            },
        )

    @staticmethod
    def transaction_updated(
        transaction_id: UUID,
        old_type: str,
        old_amount: Decimal,
        new_type: str,
        new_amount: Decimal,
        balance_after: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=(
                f"Transaction updated: {old_type} {old_amount} -> "
                f"{new_type} {new_amount}"
            ),
            details={
                "old_type": old_type,
                "old_amount": str(old_amount),
                "new_type": new_type,
                "new_amount": str(new_amount),
                "balance_after": str(balance_after),
            },
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: UUID,
        transaction_type: str,
        amount: Decimal,
        balance_after: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction deleted: {transaction_type} {amount}",
            details={
                "type": transaction_type,
                "amount": str(amount),
                "balance_after": str(balance_after),
            },
        )

    @staticmethod
    def ledger_reloaded(transaction_count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_RELOADED,
            severity=EventSeverity.DEBUG,
            description=f"Ledger reloaded with {transaction_count} transactions",
            details={
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def storage_failed(
        operation: str,
        error_message: str,
        entity_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STORAGE_FAILED,
            severity=EventSeverity.ERROR,
            entity_id=entity_id,
            description=f"Storage failure during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )
