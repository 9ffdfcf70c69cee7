"""Database schema initialization and migrations."""

import os
import sqlite3
from collections.abc import Sequence
from pathlib import Path


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_db_path() -> Path:
    """Get the default database path (XDG compliant)."""
    return get_xdg_data_home() / "ledgerroll" / "ledgerroll.db"


def database_exists(db_path: Path | None = None) -> bool:
    """Check if the database file exists.

    Args:
        db_path: Path to check. If None, uses default location.

    Returns:
        True if database exists, False otherwise.
    """
    if db_path is None:
        db_path = get_db_path()
    return db_path.exists()


def init_database(month_names: Sequence[str], db_path: Path | None = None) -> None:
    """Initialize the database with the required schema.

    Month names are registered so ledger writes can be checked against them.
    Re-running is safe and re-registers the given months.

    Args:
        month_names: Month identifiers, January first.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database initialization fails.
    """
    if db_path is None:
        db_path = get_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS accounts (
                name TEXT PRIMARY KEY,
                type TEXT,
                balance TEXT NOT NULL DEFAULT '0'
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS recurring_rules (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                description TEXT,
                category TEXT,
                amount TEXT,
                account TEXT,
                frequency TEXT,
                start_date TEXT,
                end_date TEXT,
                day_of_month INTEGER,
                day_of_week TEXT,
                active INTEGER NOT NULL DEFAULT 1
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS single_transactions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                date TEXT,
                description TEXT,
                category TEXT,
                account TEXT,
                amount TEXT,
                transfer_to TEXT,
                notes TEXT
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS months (
                name TEXT PRIMARY KEY,
                position INTEGER NOT NULL
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS ledger_rows (
                month TEXT NOT NULL REFERENCES months(name),
                position INTEGER NOT NULL,
                date TEXT NOT NULL,
                description TEXT NOT NULL,
                category TEXT NOT NULL DEFAULT '',
                account TEXT NOT NULL DEFAULT '',
                amount TEXT,
                source TEXT NOT NULL,
                balances TEXT NOT NULL,
                net_worth TEXT NOT NULL,
                PRIMARY KEY (month, position)
            )
        """
        )

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_single_date ON single_transactions(date)")

        cursor.execute("DELETE FROM months")
        cursor.executemany(
            "INSERT INTO months (name, position) VALUES (?, ?)",
            [(name, position) for position, name in enumerate(month_names, start=1)],
        )

        conn.commit()

    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()
