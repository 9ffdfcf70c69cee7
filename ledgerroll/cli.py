"""CLI entry point for ledgerroll."""

import typer

from ledgerroll.commands.admin import backup_command, config_command, init_command
from ledgerroll.commands.entry import (
    add_account_command,
    add_rule_command,
    add_transaction_command,
    import_command,
)
from ledgerroll.commands.ledger import preview_command, show_command
from ledgerroll.commands.rebuild import rebuild_command, update_current_command
from ledgerroll.logging_setup import configure_logging

app = typer.Typer(
    name="ledgerroll",
    help="Roll recurring and one-off transactions into monthly running-balance ledgers",
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log skipped rows and anomalies"),
) -> None:
    """Roll recurring and one-off transactions into monthly running-balance ledgers."""
    configure_logging("DEBUG" if verbose else None)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
    migrate: bool = typer.Option(False, "--migrate", help="Update database schema and month names only"),
) -> None:
    """Initialize ledgerroll database and configuration."""
    init_command(force, migrate)


@app.command(name="backup")
def backup(
    output_dir: str = typer.Option(
        None, "--output", "-o", help="Backup directory (default: backups/ beside the database)"
    ),
) -> None:
    """Backup your database and configuration files."""
    backup_command(output_dir)


@app.command(name="config")
def config() -> None:
    """Show the year, start month, tracked accounts and month names."""
    config_command()


@app.command()
def rebuild() -> None:
    """Clear and rebuild every month ledger, carrying balances forward."""
    rebuild_command()


@app.command(name="update-current")
def update_current() -> None:
    """Update the ledger if the current month has data."""
    update_current_command()


@app.command()
def preview(
    month: str = typer.Option(None, "--month", "-m", help="Month number or name (default: start month)"),
) -> None:
    """Preview the recurring transactions for a month."""
    preview_command(month)


@app.command()
def show(month: str) -> None:
    """Show the ledger for a month (number or name)."""
    show_command(month)


@app.command(name="add-account")
def add_account(
    name: str,
    balance: str,
    account_type: str = typer.Option(None, "--type", help="Account type (e.g. Checking, Credit Card)"),
) -> None:
    """Add an account to the registry or update its balance."""
    add_account_command(name, balance, account_type)


@app.command(name="add-rule")
def add_rule(
    description: str,
    category: str,
    amount: str,
    account: str,
    frequency: str = typer.Option(..., "--frequency", help="monthly, biweekly, weekly or yearly"),
    start_date: str = typer.Option(..., "--start", help="First date the rule applies"),
    end_date: str = typer.Option(None, "--end", help="Last date the rule applies"),
    day_of_month: int = typer.Option(None, "--day", help="Day of month for monthly rules"),
    inactive: bool = typer.Option(False, "--inactive", help="Store the rule but don't apply it"),
) -> None:
    """Add a recurring transaction rule."""
    add_rule_command(description, category, amount, account, frequency, start_date, end_date, day_of_month, inactive)


@app.command(name="add-transaction")
def add_transaction(
    date: str,
    description: str,
    category: str,
    account: str,
    amount: str,
    transfer_to: str = typer.Option(None, "--transfer-to", help="Account credited with the amount"),
    notes: str = typer.Option(None, "--notes", help="Free-form notes"),
) -> None:
    """Add a one-off transaction."""
    add_transaction_command(date, description, category, account, amount, transfer_to, notes)


@app.command(name="import")
def import_csv(
    kind: str = typer.Argument(..., help="accounts, rules or transactions"),
    path: str = typer.Argument(..., help="CSV file to import"),
) -> None:
    """Import accounts, recurring rules or one-off transactions from CSV."""
    import_command(kind, path)


if __name__ == "__main__":
    app()
