"""Ledger viewing and recurring-rule preview commands."""

import sqlite3
import sys
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any

from rich.console import Console
from rich.table import Table

from ledgerroll.config import get_ledger_config
from ledgerroll.dates import month_label
from ledgerroll.domain.errors import ConfigurationError, LedgerError
from ledgerroll.domain.models import format_money
from ledgerroll.domain.rollforward import LedgerConfig
from ledgerroll.domain.transactions import Transaction, parse_rule_rows, recurring_transactions_for_month
from ledgerroll.store.queries import get_month_ledger, load_recurring_rules
from ledgerroll.store.schema import get_db_path

console = Console()


def resolve_month(config: LedgerConfig, month: str) -> int:
    """Resolve a month given as a number or a configured name.

    Args:
        config: Ledger configuration.
        month: "9", "09" or a name such as "Sep" (case-insensitive).

    Returns:
        Month number (1-12).

    Raises:
        ConfigurationError: If the month cannot be resolved.
    """
    text = month.strip()
    if text.isdigit() and 1 <= int(text) <= 12:
        return int(text)
    for index, name in enumerate(config.months, start=1):
        if name.lower() == text.lower():
            return index
    raise ConfigurationError(f"Unknown month '{month}'. Use 1-12 or one of: {', '.join(config.months)}")


def _money_cell(amount: Decimal | None) -> str:
    if amount is None:
        return ""
    if amount < 0:
        return f"[red]{format_money(amount)}[/red]"
    return format_money(amount)


def render_month_ledger(config: LedgerConfig, month_name: str, rows: list[dict[str, Any]]) -> None:
    """Print stored ledger rows with one column per tracked account."""
    table = Table(title=f"{month_name} {config.year}")
    table.add_column("Date", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Category", style="magenta")
    table.add_column("Account")
    table.add_column("Amount", justify="right")
    table.add_column("Source", style="dim")
    for name in config.accounts:
        table.add_column(name, justify="right")
    table.add_column("Net Worth", justify="right", style="bold")

    for row in rows:
        balances = [_money_cell(b) for b in row["balances"]]
        # Stored rows may predate a config change that altered the axis
        balances = (balances + [""] * len(config.accounts))[: len(config.accounts)]
        table.add_row(
            row["date"],
            row["description"],
            row["category"],
            row["account"],
            _money_cell(row["amount"]),
            row["source"],
            *balances,
            _money_cell(row["net_worth"]),
        )

    console.print(table)


def show_command(month: str) -> None:
    """Show the stored ledger for a month."""
    db_path = get_db_path()

    try:
        config = get_ledger_config()
        month_name = config.month_name(resolve_month(config, month))
        rows = get_month_ledger(month_name, db_path)
    except LedgerError as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)

    if not rows:
        console.print(f"[yellow]No ledger rows for {month_name}. Run 'ledgerroll rebuild'.[/yellow]")
        return

    render_month_ledger(config, month_name, rows)


def group_by_date(transactions: list[Transaction]) -> dict[date, list[Transaction]]:
    """Group transactions by date, dates in ascending order."""
    grouped: dict[date, list[Transaction]] = defaultdict(list)
    for txn in transactions:
        grouped[txn.date].append(txn)
    return dict(sorted(grouped.items()))


def preview_command(month: str | None = None) -> None:
    """Preview the recurring transactions a month would receive."""
    db_path = get_db_path()

    try:
        config = get_ledger_config()
        month_number = resolve_month(config, month) if month else config.start_month
        rules = parse_rule_rows(load_recurring_rules(db_path))
    except LedgerError as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)

    transactions = recurring_transactions_for_month(rules, config.year, month_number)
    label = month_label(config.year, month_number)

    if not transactions:
        console.print(f"[yellow]No recurring transactions in {label}[/yellow]")
        return

    console.print(f"[bold cyan]{label} Recurring Transactions:[/bold cyan]\n")
    for txn_date, txns in group_by_date(transactions).items():
        console.print(f"[cyan]{txn_date.strftime('%m/%d/%Y')}:[/cyan]")
        for txn in txns:
            console.print(f"  • {txn.description}: {_money_cell(txn.amount)}")
        console.print()

    total = sum((t.amount for t in transactions), Decimal("0"))
    console.print(f"[dim]{len(transactions)} transaction(s), net {format_money(total)}[/dim]")
