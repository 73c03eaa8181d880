"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the durable storage backend because:
1. Users can view their ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for a personal ledger)
- No transactions (persist() applies changes in a fixed order and
  checks every update target before writing anything)
- Limited query capabilities (we sort and filter in Python)

The implementation follows the abstract interface, so we can swap
to PostgreSQL/SQLite later without changing ledger logic.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from savemoney.config import GoogleSheetsSettings, get_settings
from savemoney.models.ledger import BudgetSettings, Transaction, TransactionType
from savemoney.services.storage.interface import (
    ConnectionError,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)


# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "name",
    "amount",
    "date",
    "type",
    "category",
]

# Column mappings for BudgetSettings sheet (header + exactly one data row)
SETTINGS_COLUMNS = [
    "id",
    "total_balance",
    "monthly_target",
    "created_at",
    "updated_at",
]

# Only API errors are worth retrying; anything else fails straight away
sheets_retry = retry(
    retry=retry_if_exception_type(gspread.exceptions.APIError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)

logger = structlog.get_logger("savemoney.storage.google_sheets")


def _column_letter(count: int) -> str:
    """Sheet column letter for a 1-based column count (up to Z)."""
    return chr(ord("A") + count - 1)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @sheets_retry
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except gspread.exceptions.APIError:
                raise
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        return self._get_or_create_sheet(
            self._settings.transactions_sheet_name,
            TRANSACTION_COLUMNS,
            rows=1000,
        )

    def get_settings_sheet(self) -> gspread.Worksheet:
        """Get or create the BudgetSettings worksheet."""
        return self._get_or_create_sheet(
            self._settings.settings_sheet_name,
            SETTINGS_COLUMNS,
            rows=2,
        )


class GoogleSheetsLedgerStorage(LedgerStorageInterface):
    """
    Google Sheets implementation of ledger storage.

    Transactions are stored one per row. The budget settings occupy the
    single data row under the header of their own worksheet.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
        self._pending_inserts: list[Transaction] = []
        self._pending_updates: dict[UUID, Transaction] = {}
        self._pending_deletes: list[UUID] = []
        self._pending_settings: Optional[BudgetSettings] = None

    # ─── Row mapping ─────────────────────────────────────────────────────────

    def _transaction_to_row(self, transaction: Transaction) -> list:
        """Convert a Transaction to a spreadsheet row."""
        return [
            str(transaction.id),
            transaction.name,
            str(transaction.amount),
            transaction.date.isoformat(),
            transaction.type.value,
            transaction.category or "",
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a Transaction."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return Transaction(
            id=UUID(safe_get(0)),
            name=safe_get(1),
            amount=Decimal(safe_get(2)),
            date=datetime.fromisoformat(safe_get(3)),
            type=TransactionType(safe_get(4)),
            category=safe_get(5) or None,
        )

    def _settings_to_row(self, settings: BudgetSettings) -> list:
        """Convert BudgetSettings to a spreadsheet row."""
        return [
            str(settings.id),
            str(settings.total_balance),
            str(settings.monthly_target),
            settings.created_at.isoformat(),
            settings.updated_at.isoformat(),
        ]

    def _row_to_settings(self, row: list) -> BudgetSettings:
        """Convert a spreadsheet row to BudgetSettings."""
        return BudgetSettings(
            id=UUID(row[0]),
            total_balance=Decimal(row[1]),
            monthly_target=Decimal(row[2]),
            created_at=datetime.fromisoformat(row[3]),
            updated_at=datetime.fromisoformat(row[4]),
        )

    # ─── Reads ───────────────────────────────────────────────────────────────

    @sheets_retry
    def _read_values(self, sheet: gspread.Worksheet) -> list[list]:
        return sheet.get_all_values()

    def fetch_all_transactions(self) -> list[Transaction]:
        """Fetch all transactions, newest first."""
        try:
            sheet = self._client.get_transactions_sheet()
            all_rows = self._read_values(sheet)[1:]  # Skip header
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to fetch transactions: {e}")

        transactions = []
        for row in all_rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                transactions.append(self._row_to_transaction(row))
            except (ValueError, InvalidOperation) as e:
                logger.warning("malformed_transaction_row", row_id=row[0], error=str(e))

        # Sort by date descending (newest first)
        transactions.sort(key=lambda t: t.date, reverse=True)
        return transactions

    def fetch_budget_settings(self) -> Optional[BudgetSettings]:
        """Fetch the settings row, if one has been written."""
        try:
            sheet = self._client.get_settings_sheet()
            all_rows = self._read_values(sheet)[1:]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to fetch budget settings: {e}")

        if not all_rows or not all_rows[0] or not all_rows[0][0]:
            return None
        try:
            return self._row_to_settings(all_rows[0])
        except (ValueError, IndexError, InvalidOperation) as e:
            raise StorageError(f"Budget settings row is malformed: {e}")

    # ─── Staged writes ───────────────────────────────────────────────────────

    def insert_transaction(self, transaction: Transaction) -> None:
        self._pending_inserts.append(transaction.model_copy(deep=True))

    def update_transaction(self, transaction: Transaction) -> None:
        self._pending_updates[transaction.id] = transaction.model_copy(deep=True)

    def delete_transaction(self, transaction_id: UUID) -> None:
        self._pending_deletes.append(transaction_id)

    def save_budget_settings(self, settings: BudgetSettings) -> None:
        self._pending_settings = settings.model_copy(deep=True)

    # ─── Commit / rollback ───────────────────────────────────────────────────

    @sheets_retry
    def _update_row(self, sheet: gspread.Worksheet, row_number: int, row: list) -> None:
        last_column = _column_letter(len(row))
        sheet.update(
            range_name=f"A{row_number}:{last_column}{row_number}",
            values=[row],
            value_input_option="RAW",
        )

    @sheets_retry
    def _delete_row(self, sheet: gspread.Worksheet, row_number: int) -> None:
        sheet.delete_rows(row_number)

    @sheets_retry
    def _append_rows(self, sheet: gspread.Worksheet, rows: list[list]) -> None:
        sheet.append_rows(rows, value_input_option="RAW")

    def persist(self) -> None:
        """
        Write staged changes to the spreadsheet.

        Order: updates, deletes (bottom row first so row numbers stay
        valid), inserts, then the settings row. Every update target is
        located before anything is written.

        Sheets has no transactions. If a write fails after earlier ones
        landed (say the rows were appended but the settings row was not),
        StorageError is raised and the staged changes are kept. The sheet
        may then hold rows whose effect is missing from the balance: the
        caller should reload and re-baseline the balance with
        save_budget_settings.
        """
        if not self.has_pending_changes:
            return

        try:
            sheet = self._client.get_transactions_sheet()
            all_rows = self._read_values(sheet)

            # Row numbers are 1-based and row 1 is the header
            row_numbers = {
                row[0]: idx
                for idx, row in enumerate(all_rows[1:], start=2)
                if row and row[0]
            }

            for transaction_id in self._pending_updates:
                if str(transaction_id) not in row_numbers:
                    raise NotFoundError(f"Transaction not found: {transaction_id}")

            for transaction_id, transaction in self._pending_updates.items():
                self._update_row(
                    sheet,
                    row_numbers[str(transaction_id)],
                    self._transaction_to_row(transaction),
                )

            delete_rows = sorted(
                {
                    row_numbers[str(transaction_id)]
                    for transaction_id in self._pending_deletes
                    if str(transaction_id) in row_numbers
                },
                reverse=True,
            )
            for row_number in delete_rows:
                self._delete_row(sheet, row_number)

            if self._pending_inserts:
                self._append_rows(
                    sheet,
                    [self._transaction_to_row(t) for t in self._pending_inserts],
                )

            if self._pending_settings is not None:
                settings_sheet = self._client.get_settings_sheet()
                self._update_row(
                    settings_sheet,
                    2,
                    self._settings_to_row(self._pending_settings),
                )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to persist ledger changes: {e}")

        self.rollback()

    def rollback(self) -> None:
        self._pending_inserts = []
        self._pending_updates = {}
        self._pending_deletes = []
        self._pending_settings = None

    @property
    def has_pending_changes(self) -> bool:
        return bool(
            self._pending_inserts
            or self._pending_updates
            or self._pending_deletes
            or self._pending_settings is not None
        )
