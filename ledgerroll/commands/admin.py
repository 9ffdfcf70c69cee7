"""Admin commands for backup, init, and showing the configuration."""

import shutil
import sqlite3
import sys
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ledgerroll.config import DEFAULT_MONTHS, create_default_config, get_config_path, get_ledger_config
from ledgerroll.domain.errors import LedgerError
from ledgerroll.store.queries import backup_database, count_rows
from ledgerroll.store.schema import get_db_path, init_database

console = Console()


def default_backup_dir() -> Path:
    """Backups live next to the database unless --output is given."""
    return get_db_path().parent / "backups"


def render_backup_summary(counts: dict[str, int]) -> None:
    """Print the number of rows captured per table."""
    table = Table(title="Backed Up Rows")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    console.print(table)


def run_backup(db_path: Path, config_path: Path, backup_dir: Path, stamp: str) -> tuple[Path, Path, dict[str, int]]:
    """Snapshot the database and copy the config, then check the snapshot.

    Args:
        db_path: Live database.
        config_path: Live config file.
        backup_dir: Directory to write into (created if missing).
        stamp: Suffix shared by both backup files.

    Returns:
        Tuple of (database backup, config backup, row counts per table).

    Raises:
        LedgerError: If the snapshot's row counts differ from the live database.
        sqlite3.Error: If the database backup fails.
        OSError: If files cannot be written.
    """
    backup_dir.mkdir(parents=True, exist_ok=True)
    db_backup = backup_dir / f"ledgerroll_{stamp}.db"
    config_backup = backup_dir / f"config_{stamp}.toml"

    expected = count_rows(db_path)
    backup_database(db_backup, db_path)
    copied = count_rows(db_backup)
    if copied != expected:
        raise LedgerError(f"Backup row counts {copied} do not match the database {expected}")

    shutil.copy2(config_path, config_backup)
    return db_backup, config_backup, copied


def backup_command(output_dir: str | None = None) -> None:
    """Snapshot the database and config, and report the rows captured."""
    db_path = get_db_path()
    config_path = get_config_path()

    if not db_path.exists():
        console.print("[red]Database not found. Run 'ledgerroll init' first.[/red]", style="bold")
        sys.exit(1)

    if not config_path.exists():
        console.print("[red]Config not found. Run 'ledgerroll init' first.[/red]", style="bold")
        sys.exit(1)

    backup_dir = Path(output_dir).expanduser() if output_dir else default_backup_dir()
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    try:
        db_backup, config_backup, counts = run_backup(db_path, config_path, backup_dir, stamp)
    except LedgerError as e:
        console.print(f"[red]Backup failed: {e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Backup failed: {e}[/red]", style="bold")
        sys.exit(1)

    render_backup_summary(counts)
    console.print(f"[green]✓[/green] Database: {db_backup}")
    console.print(f"[green]✓[/green] Config: {config_backup}")
    console.print(f"\n[green]Backup complete![/green] {sum(counts.values())} rows", style="bold")


def run_migration(db_path: Path) -> None:
    """Re-apply the schema and re-register month names from the config."""
    console.print(f"[cyan]Running migrations on {db_path}...[/cyan]")
    try:
        months = list(get_ledger_config().months)
    except LedgerError:
        months = list(DEFAULT_MONTHS)
    init_database(months, db_path)
    console.print("[green]✓[/green] Migrations complete")
    console.print("[dim]Database schema is up to date[/dim]")


def run_full_init(db_path: Path, config_path: Path) -> None:
    """Initialize new config and database."""
    console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
    create_default_config(config_path)
    console.print("[green]✓[/green] Config file created (permissions: 600)")

    console.print(f"[cyan]Initializing database at {db_path}...[/cyan]")
    init_database(list(get_ledger_config(config_path).months), db_path)
    console.print("[green]✓[/green] Database initialized")

    console.print("\n[green]Initialization complete![/green]", style="bold")
    console.print(f"[dim]Database: {db_path}[/dim]")
    console.print(f"[dim]Config: {config_path}[/dim]")
    console.print("[dim]Edit the config to set your year, start month and accounts[/dim]")


def init_command(force: bool = False, migrate: bool = False) -> None:
    """Initialize ledgerroll database and configuration."""
    db_path = get_db_path()
    config_path = get_config_path()

    db_exists = db_path.exists()
    config_exists = config_path.exists()

    try:
        if migrate:
            if not db_exists:
                console.print("[red]No database found to migrate[/red]", style="bold")
                console.print(f"[dim]Expected location: {db_path}[/dim]")
                sys.exit(1)
            run_migration(db_path)
            return

        if not force and (db_exists or config_exists):
            console.print("[red]Initialization failed:[/red]", style="bold")
            if db_exists:
                console.print(f"  Database already exists: {db_path}")
            if config_exists:
                console.print(f"  Config already exists: {config_path}")
            console.print("\n[yellow]Use 'ledgerroll init --force' to overwrite[/yellow]")
            console.print("[yellow]Or 'ledgerroll init --migrate' to update database schema only[/yellow]")
            sys.exit(1)

        run_full_init(db_path, config_path)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except LedgerError as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)


def config_command() -> None:
    """Show the current ledger configuration."""
    try:
        config = get_ledger_config()
    except LedgerError as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[bold]Year:[/bold] {config.year}")
    console.print(f"[bold]Start month:[/bold] {config.month_name(config.start_month)} ({config.start_month})")
    console.print(f"[dim]Config: {get_config_path()}[/dim]\n")

    table = Table(title="Accounts Tracked")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Account", style="cyan")
    for index, name in enumerate(config.accounts, start=1):
        table.add_row(str(index), name)
    console.print(table)

    console.print(f"\n[bold]Months:[/bold] {', '.join(config.months)}")
