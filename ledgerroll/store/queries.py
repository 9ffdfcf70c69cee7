"""Database query functions."""

import json
import sqlite3
from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

from ledgerroll.domain.errors import ConfigurationError
from ledgerroll.domain.ledger import LedgerRow
from ledgerroll.domain.models import Account, AccountName, Money
from ledgerroll.domain.transactions import parse_amount
from ledgerroll.store.schema import get_db_path


def _connect(db_path: Path | None = None) -> sqlite3.Connection:
    """Create a database connection with row factory.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Database connection with row_factory configured.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def _money_text(amount: Decimal | None) -> str | None:
    return None if amount is None else str(amount)


def load_account_registry(accounts: Sequence[AccountName], db_path: Path | None = None) -> list[Account]:
    """Load account balances in account-axis order.

    Args:
        accounts: Ordered tracked account names.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        One Account per tracked name; names missing from the registry get 0.

    Raises:
        ConfigurationError: If the registry has no accounts at all.
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT name, balance FROM accounts")
        rows = cursor.fetchall()

    if not rows:
        raise ConfigurationError("No accounts found in the account registry")

    balances = {row["name"]: parse_amount(row["balance"]) for row in rows}
    return [Account(name=name, balance=balances.get(name, Money(Decimal("0")))) for name in accounts]


def get_all_accounts(db_path: Path | None = None) -> list[dict[str, Any]]:
    """Get every registry row, including untracked accounts.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT name, type, balance FROM accounts ORDER BY name")
        return [dict(row) for row in cursor.fetchall()]


def upsert_account(name: str, balance: Decimal, account_type: str | None = None, db_path: Path | None = None) -> None:
    """Insert an account or update its balance and type.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                INSERT INTO accounts (name, type, balance) VALUES (?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET type = excluded.type, balance = excluded.balance
                """,
                (name, account_type, str(balance)),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


def load_recurring_rules(db_path: Path | None = None) -> list[dict[str, Any]]:
    """Get raw recurring rule rows in entry order.

    Divider and inactive rows are included; the normalizer filters them.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT id, description, category, amount, account, frequency, start_date, end_date,
                   day_of_month, day_of_week, active
            FROM recurring_rules ORDER BY id
            """
        )
        rows = [dict(row) for row in cursor.fetchall()]

    for row in rows:
        row["active"] = bool(row["active"])
    return rows


def insert_recurring_rule(
    description: str,
    category: str,
    amount: Decimal,
    account: str,
    frequency: str,
    start_date: date | None,
    end_date: date | None = None,
    day_of_month: int | None = None,
    day_of_week: str | None = None,
    active: bool = True,
    db_path: Path | None = None,
) -> int:
    """Insert a recurring rule.

    Returns:
        ID of the new rule.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                INSERT INTO recurring_rules
                    (description, category, amount, account, frequency, start_date, end_date,
                     day_of_month, day_of_week, active)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    description,
                    category,
                    str(amount),
                    account,
                    frequency,
                    start_date.isoformat() if start_date else None,
                    end_date.isoformat() if end_date else None,
                    day_of_month,
                    day_of_week,
                    int(active),
                ),
            )
            conn.commit()
            return int(cursor.lastrowid or 0)
        except sqlite3.Error:
            conn.rollback()
            raise


def load_one_off_transactions(db_path: Path | None = None) -> list[dict[str, Any]]:
    """Get raw one-off transaction rows, unfiltered by month.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT id, date, description, category, account, amount, transfer_to, notes
            FROM single_transactions ORDER BY id
            """
        )
        return [dict(row) for row in cursor.fetchall()]


def insert_single_transaction(
    txn_date: date,
    description: str,
    category: str,
    account: str,
    amount: Decimal,
    transfer_to: str | None = None,
    notes: str | None = None,
    db_path: Path | None = None,
) -> int:
    """Insert a one-off transaction.

    Returns:
        ID of the new transaction.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                INSERT INTO single_transactions
                    (date, description, category, account, amount, transfer_to, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (txn_date.isoformat(), description, category, account, str(amount), transfer_to, notes),
            )
            conn.commit()
            return int(cursor.lastrowid or 0)
        except sqlite3.Error:
            conn.rollback()
            raise


def get_month_names(db_path: Path | None = None) -> list[str]:
    """Get registered month names in calendar order.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT name FROM months ORDER BY position")
        return [row["name"] for row in cursor.fetchall()]


def write_month_ledger(month_name: str, rows: Sequence[LedgerRow], db_path: Path | None = None) -> None:
    """Replace all stored rows for a month in one transaction.

    Args:
        month_name: Registered month identifier.
        rows: Ledger rows in order.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        ConfigurationError: If the month is not registered.
        sqlite3.Error: If database operation fails (nothing is written).
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("SELECT 1 FROM months WHERE name = ?", (month_name,))
            if cursor.fetchone() is None:
                raise ConfigurationError(f"Month '{month_name}' not found")

            cursor.execute("DELETE FROM ledger_rows WHERE month = ?", (month_name,))
            cursor.executemany(
                """
                INSERT INTO ledger_rows
                    (month, position, date, description, category, account, amount, source, balances, net_worth)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        month_name,
                        position,
                        row.date.isoformat(),
                        row.description,
                        row.category,
                        row.account,
                        _money_text(row.amount),
                        row.source.value,
                        json.dumps([str(b) for b in row.balances]),
                        str(row.net_worth),
                    )
                    for position, row in enumerate(rows)
                ],
            )
            conn.commit()
        except (sqlite3.Error, ConfigurationError):
            conn.rollback()
            raise


def clear_all_months(db_path: Path | None = None) -> None:
    """Remove every stored ledger row. Safe to call repeatedly.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("DELETE FROM ledger_rows")
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


def get_month_ledger(month_name: str, db_path: Path | None = None) -> list[dict[str, Any]]:
    """Get stored rows for a month, balances decoded to Decimals.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT date, description, category, account, amount, source, balances, net_worth
            FROM ledger_rows WHERE month = ? ORDER BY position
            """,
            (month_name,),
        )
        rows = [dict(row) for row in cursor.fetchall()]

    for row in rows:
        row["amount"] = Decimal(row["amount"]) if row["amount"] is not None else None
        row["balances"] = [Decimal(b) for b in json.loads(row["balances"])]
        row["net_worth"] = Decimal(row["net_worth"])
    return rows


BACKUP_TABLES = ("accounts", "recurring_rules", "single_transactions", "ledger_rows")


def count_rows(db_path: Path | None = None) -> dict[str, int]:
    """Count rows in each data table.

    Returns:
        Row count per table name, in BACKUP_TABLES order.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        counts = {}
        for table in BACKUP_TABLES:
            cursor.execute(f"SELECT COUNT(*) FROM {table}")
            counts[table] = cursor.fetchone()[0]
        return counts


def backup_database(destination: Path, db_path: Path | None = None) -> None:
    """Copy the database with SQLite's online backup API.

    The copy is a consistent snapshot even if another process is writing.

    Args:
        destination: Path of the new backup file.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If the backup fails.
    """
    source = _connect(db_path)
    target = sqlite3.connect(destination)
    try:
        source.backup(target)
    finally:
        target.close()
        source.close()
