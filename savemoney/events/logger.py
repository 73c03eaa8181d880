"""
Ledger Event Logger

DESIGN DECISION: Every ledger mutation is logged.
This provides:
1. Traceability of every change to the balance
2. Debugging capability when storage misbehaves

The logger:
- Writes to the local structured log only
- Never raises (a logging failure must not break a ledger operation)
"""

import logging
import sys
from decimal import Decimal
from typing import Optional
from uuid import UUID

import structlog

from savemoney.models.events import EventSeverity, LedgerEvent, LedgerEventBuilder


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog on top of the standard library logger.

    Called by the component factory. Only the "savemoney" logger
    hierarchy gets the level; calling again just changes it.
    """
    logging.basicConfig(format="%(message)s", stream=sys.stdout)
    logging.getLogger("savemoney").setLevel(
        getattr(logging, level.upper(), logging.INFO)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class LedgerEventLogger:
    """
    Central logging service for ledger events.

    Keeps the most recent events in memory so callers (and tests) can
    inspect what happened without parsing log output.
    """

    def __init__(self, history_size: int = 100):
        self._logger = structlog.get_logger("savemoney.ledger")
        self._history: list[LedgerEvent] = []
        self._history_size = history_size

    @property
    def recent_events(self) -> list[LedgerEvent]:
        """Most recent events, oldest first."""
        return list(self._history)

    def log(self, event: LedgerEvent) -> None:
        """Log a ledger event at its own severity."""
        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[0]

        log_dict = event.to_log_dict()
        try:
            if event.severity == EventSeverity.ERROR:
                self._logger.error("ledger_event", **log_dict)
            elif event.severity == EventSeverity.WARNING:
                self._logger.warning("ledger_event", **log_dict)
            elif event.severity == EventSeverity.DEBUG:
                self._logger.debug("ledger_event", **log_dict)
            else:
                self._logger.info("ledger_event", **log_dict)
        except Exception as e:
            # Last resort, the ledger operation already succeeded
            print(f"WARNING: Failed to write ledger event: {e}", file=sys.stderr)

    def log_settings_created(
        self,
        settings_id: UUID,
        total_balance: Decimal,
        monthly_target: Decimal,
    ) -> None:
        self.log(LedgerEventBuilder.settings_created(
            settings_id=settings_id,
            total_balance=total_balance,
            monthly_target=monthly_target,
        ))

    def log_settings_updated(
        self,
        settings_id: UUID,
        total_balance: Decimal,
        monthly_target: Decimal,
        changed_fields: list[str],
    ) -> None:
        self.log(LedgerEventBuilder.settings_updated(
            settings_id=settings_id,
            total_balance=total_balance,
            monthly_target=monthly_target,
            changed_fields=changed_fields,
        ))

    def log_transaction_added(
        self,
        transaction_id: UUID,
        transaction_type: str,
        amount: Decimal,
        balance_after: Decimal,
    ) -> None:
        self.log(LedgerEventBuilder.transaction_added(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            balance_after=balance_after,
        ))

    def log_transaction_updated(
        self,
        transaction_id: UUID,
        old_type: str,
        old_amount: Decimal,
        new_type: str,
        new_amount: Decimal,
        balance_after: Decimal,
    ) -> None:
        self.log(LedgerEventBuilder.transaction_updated(
            transaction_id=transaction_id,
            old_type=old_type,
            old_amount=old_amount,
            new_type=new_type,
            new_amount=new_amount,
            balance_after=balance_after,
        ))

    def log_transaction_deleted(
        self,
        transaction_id: UUID,
        transaction_type: str,
        amount: Decimal,
        balance_after: Decimal,
    ) -> None:
        self.log(LedgerEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            balance_after=balance_after,
        ))

    def log_ledger_reloaded(self, transaction_count: int) -> None:
        self.log(LedgerEventBuilder.ledger_reloaded(transaction_count))

    def log_storage_failed(
        self,
        operation: str,
        error_message: str,
        entity_id: Optional[UUID] = None,
    ) -> None:
        self.log(LedgerEventBuilder.storage_failed(
            operation=operation,
            error_message=error_message,
            entity_id=entity_id,
        ))
