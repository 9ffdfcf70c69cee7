"""Rebuild commands: roll balances forward and write every month ledger."""

import sqlite3
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ledgerroll.config import get_ledger_config
from ledgerroll.domain.errors import LedgerError
from ledgerroll.domain.ledger import MonthLedger
from ledgerroll.domain.models import BalanceVector, format_money, net_worth
from ledgerroll.domain.rollforward import LedgerConfig, YearRollforward, seed_balances
from ledgerroll.domain.transactions import parse_one_off_rows, parse_rule_rows
from ledgerroll.logging_setup import get_logger
from ledgerroll.store.queries import (
    clear_all_months,
    load_account_registry,
    load_one_off_transactions,
    load_recurring_rules,
    write_month_ledger,
)
from ledgerroll.store.schema import get_db_path

console = Console()
logger = get_logger(__name__)


@dataclass
class RebuildResult:
    """Months written by a rebuild and the final balances."""

    months: list[MonthLedger]
    final_balances: BalanceVector | None


def run_rebuild(config: LedgerConfig, db_path: Path) -> RebuildResult:
    """Clear all months and rewrite them from rules, one-offs and the registry.

    Inputs are loaded before anything is cleared, so a missing registry
    leaves the stored months untouched. Each month is written as soon as it
    is built; a failure stops the run and later months stay empty.

    Args:
        config: Ledger configuration.
        db_path: Path to the database file.

    Returns:
        RebuildResult with every written month.

    Raises:
        LedgerError: On configuration errors.
        sqlite3.Error: If database operation fails.
    """
    registry = load_account_registry(config.accounts, db_path)
    initial = seed_balances(config.accounts, registry)
    rules = parse_rule_rows(load_recurring_rules(db_path))
    one_offs = parse_one_off_rows(load_one_off_transactions(db_path))

    clear_all_months(db_path)

    rollforward = YearRollforward(config)
    written: list[MonthLedger] = []
    for ledger in rollforward.run(rules, one_offs, initial):
        write_month_ledger(ledger.month_name, ledger.rows, db_path)
        logger.debug("Wrote %d rows to %s", len(ledger.rows), ledger.month_name)
        written.append(ledger)

    return RebuildResult(months=written, final_balances=rollforward.final_balances)


def render_rebuild_summary(config: LedgerConfig, result: RebuildResult) -> None:
    """Print the months written and the final balances."""
    table = Table(title=f"Ledger {config.year}")
    table.add_column("Month", style="cyan")
    table.add_column("Rows", justify="right")
    table.add_column("Start Net Worth", justify="right")
    table.add_column("End Net Worth", justify="right")

    for ledger in result.months:
        table.add_row(
            ledger.month_name,
            str(len(ledger.rows)),
            format_money(net_worth(ledger.starting_balances)),
            format_money(net_worth(ledger.ending_balances)),
        )

    console.print(table)

    if result.final_balances is not None:
        console.print("\n[bold]Ending balances[/bold]")
        for name, balance in zip(config.accounts, result.final_balances):
            colour = "red" if balance < 0 else "green"
            console.print(f"  {name:28} [{colour}]{format_money(balance)}[/{colour}]")


def rebuild_command() -> None:
    """Rebuild every month ledger from scratch."""
    db_path = get_db_path()

    try:
        config = get_ledger_config()
        result = run_rebuild(config, db_path)
    except LedgerError as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)

    if not result.months:
        console.print("[yellow]No months had data[/yellow]")
        return

    render_rebuild_summary(config, result)
    console.print(f"\n[green]✓[/green] {len(result.months)} month(s) updated")


def update_current_command(today: datetime | None = None) -> None:
    """Update the ledger if the current month is inside the tracked range.

    Balances carry across months, so this runs a full rebuild.
    """
    try:
        config = get_ledger_config()
    except LedgerError as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)

    now = today or datetime.now()
    if (now.year, now.month) < (config.year, config.start_month):
        start_name = config.month_name(config.start_month)
        console.print(f"[yellow]No data available before {start_name} {config.year}[/yellow]")
        return

    rebuild_command()
