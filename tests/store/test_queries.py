"""Tests for ledgerroll.store against a temporary SQLite file."""

import sqlite3
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from ledgerroll.domain.errors import ConfigurationError
from ledgerroll.domain.ledger import build_month_ledger
from ledgerroll.domain.models import TransactionSource
from ledgerroll.domain.transactions import Transaction, parse_rule_rows
from ledgerroll.store import (
    backup_database,
    clear_all_months,
    count_rows,
    database_exists,
    get_all_accounts,
    get_month_ledger,
    get_month_names,
    init_database,
    insert_recurring_rule,
    insert_single_transaction,
    load_account_registry,
    load_one_off_transactions,
    load_recurring_rules,
    upsert_account,
    write_month_ledger,
)

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
AXIS = ("Checking", "Savings")


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "ledger.db"
    init_database(MONTHS, path)
    return path


def sample_ledger():
    income = Transaction(
        date=date(2025, 9, 1),
        description="Paycheck",
        category="Income",
        account="Checking",
        amount=Decimal("2000.00"),
        source=TransactionSource.RECURRING,
    )
    ledger = build_month_ledger(AXIS, "Sep", 2025, 9, [income], [], (Decimal("1000.50"), Decimal("500")))
    assert ledger is not None
    return ledger


class TestSchema:
    """Tests for init_database."""

    def test_creates_file_and_registers_months(self, db_path: Path) -> None:
        """Should create the database with months in calendar order."""
        assert database_exists(db_path)
        assert get_month_names(db_path) == list(MONTHS)

    def test_rerun_is_safe(self, db_path: Path) -> None:
        """Should keep data and re-register months when run again."""
        upsert_account("Checking", Decimal("10"), db_path=db_path)
        init_database(MONTHS, db_path)
        assert get_month_names(db_path) == list(MONTHS)
        assert len(get_all_accounts(db_path)) == 1

    def test_missing_database(self, tmp_path: Path) -> None:
        """Should report a missing file."""
        assert not database_exists(tmp_path / "absent.db")


class TestAccountRegistry:
    """Tests for the account registry queries."""

    def test_axis_order_and_defaults(self, db_path: Path) -> None:
        """Should return accounts in axis order, defaulting missing ones to zero."""
        upsert_account("Savings", Decimal("500.25"), "savings", db_path=db_path)
        upsert_account("Brokerage", Decimal("9000"), db_path=db_path)

        registry = load_account_registry(AXIS, db_path)

        assert [a.name for a in registry] == ["Checking", "Savings"]
        assert registry[0].balance == Decimal("0")
        assert registry[1].balance == Decimal("500.25")

    def test_empty_registry(self, db_path: Path) -> None:
        """Should refuse to seed from an empty registry."""
        with pytest.raises(ConfigurationError):
            load_account_registry(AXIS, db_path)

    def test_upsert_updates_balance(self, db_path: Path) -> None:
        """Should overwrite an existing balance."""
        upsert_account("Checking", Decimal("1"), db_path=db_path)
        upsert_account("Checking", Decimal("2"), "checking", db_path=db_path)
        rows = get_all_accounts(db_path)
        assert rows == [{"name": "Checking", "type": "checking", "balance": "2"}]


class TestRecurringRules:
    """Tests for recurring rule storage."""

    def test_raw_rows_include_dividers(self, db_path: Path) -> None:
        """Should return every stored row so the parser can filter."""
        insert_recurring_rule("=== INCOME ===", "", Decimal("0"), "", "", None, db_path=db_path)
        insert_recurring_rule(
            "Paycheck", "Income", Decimal("2000"), "Checking", "monthly", date(2025, 1, 1),
            day_of_month=1, db_path=db_path,
        )
        insert_recurring_rule(
            "Gym", "Health", Decimal("40"), "Checking", "monthly", date(2025, 1, 1),
            day_of_month=5, active=False, db_path=db_path,
        )

        rows = load_recurring_rules(db_path)
        assert [r["description"] for r in rows] == ["=== INCOME ===", "Paycheck", "Gym"]
        assert rows[2]["active"] is False

        rules = parse_rule_rows(rows)
        assert [r.description for r in rules] == ["Paycheck", "Gym"]
        assert rules[0].start_date == date(2025, 1, 1)
        assert rules[0].amount == Decimal("2000")


class TestSingleTransactions:
    """Tests for one-off transaction storage."""

    def test_insert_and_load(self, db_path: Path) -> None:
        """Should round-trip a transfer one-off."""
        txn_id = insert_single_transaction(
            date(2025, 9, 20), "Card payment", "Transfer", "Checking", Decimal("-300"),
            transfer_to="Visa", db_path=db_path,
        )
        rows = load_one_off_transactions(db_path)
        assert txn_id == rows[0]["id"]
        assert rows[0]["date"] == "2025-09-20"
        assert rows[0]["amount"] == "-300"
        assert rows[0]["transfer_to"] == "Visa"
        assert rows[0]["notes"] is None


class TestMonthLedgerStorage:
    """Tests for write_month_ledger, get_month_ledger and clear_all_months."""

    def test_write_and_read(self, db_path: Path) -> None:
        """Should store rows in order with exact decimal balances."""
        ledger = sample_ledger()
        write_month_ledger("Sep", ledger.rows, db_path)

        stored = get_month_ledger("Sep", db_path)
        assert [r["description"] for r in stored] == ["Starting Balance", "Paycheck"]
        assert stored[0]["amount"] is None
        assert stored[0]["source"] == "Initial"
        assert stored[1]["balances"] == [Decimal("3000.50"), Decimal("500")]
        assert stored[1]["net_worth"] == Decimal("3500.50")
        assert stored[1]["date"] == "2025-09-01"

    def test_write_replaces_previous_rows(self, db_path: Path) -> None:
        """Should overwrite a month rather than append to it."""
        ledger = sample_ledger()
        write_month_ledger("Sep", ledger.rows, db_path)
        write_month_ledger("Sep", ledger.rows[:1], db_path)
        assert len(get_month_ledger("Sep", db_path)) == 1

    def test_unregistered_month(self, db_path: Path) -> None:
        """Should fail without writing anything."""
        with pytest.raises(ConfigurationError, match="not found"):
            write_month_ledger("Septembre", sample_ledger().rows, db_path)

        with sqlite3.connect(db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM ledger_rows").fetchone()[0]
        assert count == 0

    def test_clear_all_months_idempotent(self, db_path: Path) -> None:
        """Should leave every month empty, however often it runs."""
        write_month_ledger("Sep", sample_ledger().rows, db_path)
        clear_all_months(db_path)
        clear_all_months(db_path)
        assert get_month_ledger("Sep", db_path) == []


class TestBackup:
    """Tests for count_rows and backup_database."""

    def test_count_rows(self, db_path: Path) -> None:
        """Should count every data table."""
        upsert_account("Checking", Decimal("1"), db_path=db_path)
        write_month_ledger("Sep", sample_ledger().rows, db_path)
        assert count_rows(db_path) == {
            "accounts": 1,
            "recurring_rules": 0,
            "single_transactions": 0,
            "ledger_rows": 2,
        }

    def test_backup_is_complete_copy(self, db_path: Path, tmp_path: Path) -> None:
        """Should produce a database with the same rows."""
        upsert_account("Checking", Decimal("1"), db_path=db_path)
        write_month_ledger("Sep", sample_ledger().rows, db_path)
        target = tmp_path / "copy.db"

        backup_database(target, db_path)

        assert count_rows(target) == count_rows(db_path)
        assert get_month_ledger("Sep", target) == get_month_ledger("Sep", db_path)
