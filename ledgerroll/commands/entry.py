"""Data entry commands: accounts, recurring rules, one-off transactions, CSV import."""

import csv
import re
import sqlite3
import sys
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from rich.console import Console

from ledgerroll.config import get_ledger_config
from ledgerroll.dates import coerce_date, parse_date
from ledgerroll.domain.errors import LedgerError
from ledgerroll.domain.models import format_money
from ledgerroll.domain.recurrence import Frequency, parse_frequency
from ledgerroll.domain.transactions import apply_category_sign, parse_active, parse_amount, parse_day_of_month
from ledgerroll.store.queries import insert_recurring_rule, insert_single_transaction, upsert_account
from ledgerroll.store.schema import get_db_path

console = Console()

IMPORT_KINDS = ("accounts", "rules", "transactions")

# Spreadsheet-style headers mapped onto store column names
_COLUMN_ALIASES = {
    "account_name": "name",
    "current_balance": "balance",
    "transfer_to_account": "transfer_to",
    "transfer": "transfer_to",
    "start": "start_date",
    "end": "end_date",
    "day": "day_of_month",
}


@dataclass
class ImportStats:
    """Statistics from importing a CSV file."""

    inserted: int
    skipped: int


def parse_decimal(amount: str) -> Decimal:
    """Parse a user-entered amount strictly.

    Raises:
        ValueError: If the amount is not a number.
    """
    try:
        value = Decimal(amount.strip().replace("$", "").replace(",", ""))
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount '{amount}'") from e
    if not value.is_finite():
        raise ValueError(f"Invalid amount '{amount}'")
    return value


def column_key(header: str) -> str:
    """Normalize a CSV header (e.g. "Start Date" -> "start_date")."""
    key = re.sub(r"[^a-z0-9]+", "_", header.strip().lower()).strip("_")
    return _COLUMN_ALIASES.get(key, key)


def normalize_csv_row(row: dict[str, Any]) -> dict[str, str]:
    """Re-key a csv.DictReader row by normalized column names."""
    return {column_key(k): (v or "").strip() for k, v in row.items() if k is not None}


def _warn_untracked(account: str, tracked: tuple[str, ...]) -> None:
    if account and account not in tracked:
        console.print(f"[yellow]'{account}' is not a tracked account; it won't move any balance[/yellow]")


def add_account_command(name: str, balance: str, account_type: str | None = None) -> None:
    """Add an account to the registry or update its balance."""
    db_path = get_db_path()

    try:
        amount = parse_decimal(balance)
        config = get_ledger_config()
        upsert_account(name, amount, account_type, db_path)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except LedgerError as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] {name}: {format_money(amount)}")
    _warn_untracked(name, config.accounts)


def add_rule_command(
    description: str,
    category: str,
    amount: str,
    account: str,
    frequency: str,
    start_date: str,
    end_date: str | None = None,
    day_of_month: int | None = None,
    inactive: bool = False,
) -> None:
    """Add a recurring transaction rule."""
    db_path = get_db_path()

    parsed_frequency = parse_frequency(frequency)
    if parsed_frequency is None:
        console.print(f"[red]Unknown frequency '{frequency}'[/red]")
        console.print("[dim]Use monthly, biweekly, weekly or yearly[/dim]")
        sys.exit(1)

    if parsed_frequency is Frequency.MONTHLY and day_of_month is None:
        console.print("[red]Monthly rules need --day[/red]")
        sys.exit(1)

    if day_of_month is not None and not 1 <= day_of_month <= 31:
        console.print("[red]--day must be between 1 and 31[/red]")
        sys.exit(1)

    try:
        magnitude = abs(parse_decimal(amount))
        start = parse_date(start_date)
        end = parse_date(end_date) if end_date else None
        config = get_ledger_config()
        rule_id = insert_recurring_rule(
            description,
            category,
            magnitude,
            account,
            parsed_frequency.value,
            start,
            end,
            day_of_month,
            active=not inactive,
            db_path=db_path,
        )
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except LedgerError as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Rule {rule_id} added:")
    console.print(f"  Description: {description}")
    console.print(f"  Amount: {format_money(apply_category_sign(category, magnitude))} ({category})")
    console.print(f"  Account: {account}")
    console.print(f"  Frequency: {frequency} from {start}" + (f" to {end}" if end else ""))
    if inactive:
        console.print("  [dim]Inactive[/dim]")
    _warn_untracked(account, config.accounts)


def add_transaction_command(
    date: str,
    description: str,
    category: str,
    account: str,
    amount: str,
    transfer_to: str | None = None,
    notes: str | None = None,
) -> None:
    """Add a one-off transaction."""
    db_path = get_db_path()

    try:
        txn_date = parse_date(date)
        value = parse_decimal(amount)
        config = get_ledger_config()
        txn_id = insert_single_transaction(txn_date, description, category, account, value, transfer_to, notes, db_path)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        console.print("[dim]Accepted date formats: YYYY-MM-DD, MM/DD/YYYY, etc.[/dim]")
        sys.exit(1)
    except LedgerError as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Transaction {txn_id} added:")
    console.print(f"  Date: {txn_date.isoformat()}")
    console.print(f"  Description: {description}")
    console.print(f"  Amount: {format_money(apply_category_sign(category, value))} ({category})")
    console.print(f"  Account: {account}")
    if transfer_to:
        console.print(f"  Transfer to: {transfer_to}")
        _warn_untracked(transfer_to, config.accounts)
    _warn_untracked(account, config.accounts)


def import_accounts(rows: list[dict[str, str]], db_path: Path) -> ImportStats:
    """Upsert registry rows; rows without a name are skipped."""
    stats = ImportStats(inserted=0, skipped=0)
    for row in rows:
        name = row.get("name", "")
        if not name:
            stats.skipped += 1
            continue
        upsert_account(name, parse_amount(row.get("balance")), row.get("type") or None, db_path)
        stats.inserted += 1
    return stats


def import_rules(rows: list[dict[str, str]], db_path: Path) -> ImportStats:
    """Store rule rows as entered, dividers and inactive rules included."""
    stats = ImportStats(inserted=0, skipped=0)
    for row in rows:
        if not any(row.values()):
            stats.skipped += 1
            continue
        start = coerce_date(row.get("start_date"))
        end = coerce_date(row.get("end_date"))
        insert_recurring_rule(
            row.get("description", ""),
            row.get("category", ""),
            parse_amount(row.get("amount")),
            row.get("account", ""),
            row.get("frequency", ""),
            start,
            end,
            parse_day_of_month(row.get("day_of_month")),
            row.get("day_of_week") or None,
            active=parse_active(row.get("active")),
            db_path=db_path,
        )
        stats.inserted += 1
    return stats


def import_transactions(rows: list[dict[str, str]], db_path: Path) -> ImportStats:
    """Store one-off rows; rows without a readable date are skipped."""
    stats = ImportStats(inserted=0, skipped=0)
    for row in rows:
        txn_date = coerce_date(row.get("date"))
        if txn_date is None:
            stats.skipped += 1
            continue
        insert_single_transaction(
            txn_date,
            row.get("description", ""),
            row.get("category", ""),
            row.get("account", ""),
            parse_amount(row.get("amount")),
            row.get("transfer_to") or None,
            row.get("notes") or None,
            db_path,
        )
        stats.inserted += 1
    return stats


_IMPORTERS = {
    "accounts": import_accounts,
    "rules": import_rules,
    "transactions": import_transactions,
}


def import_command(kind: str, path: str) -> None:
    """Import accounts, recurring rules or one-off transactions from a CSV file."""
    db_path = get_db_path()

    if kind not in _IMPORTERS:
        console.print(f"[red]Unknown import kind '{kind}'. Use one of: {', '.join(IMPORT_KINDS)}[/red]")
        sys.exit(1)

    csv_path = Path(path).expanduser()
    if not csv_path.exists():
        console.print(f"[red]File not found: {csv_path}[/red]")
        sys.exit(1)

    try:
        with open(csv_path, encoding="utf-8-sig", newline="") as f:
            rows = [normalize_csv_row(row) for row in csv.DictReader(f)]

        if not rows:
            console.print(f"[yellow]No rows in {csv_path.name}[/yellow]")
            return

        stats = _IMPORTERS[kind](rows, db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Could not read {csv_path}: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Imported {stats.inserted} {kind} from {csv_path.name}")
    if stats.skipped:
        console.print(f"[dim]Skipped {stats.skipped} empty or undated row(s)[/dim]")
