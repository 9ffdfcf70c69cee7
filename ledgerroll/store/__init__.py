"""Database store layer - provides persistence for the application.

This module re-exports all public database functions for easy importing.
"""

from ledgerroll.store.queries import (
    BACKUP_TABLES,
    backup_database,
    clear_all_months,
    count_rows,
    get_all_accounts,
    get_month_ledger,
    get_month_names,
    insert_recurring_rule,
    insert_single_transaction,
    load_account_registry,
    load_one_off_transactions,
    load_recurring_rules,
    upsert_account,
    write_month_ledger,
)
from ledgerroll.store.schema import database_exists, get_db_path, init_database

__all__ = [
    # Schema
    "database_exists",
    "get_db_path",
    "init_database",
    # Queries
    "BACKUP_TABLES",
    "backup_database",
    "clear_all_months",
    "count_rows",
    "get_all_accounts",
    "get_month_ledger",
    "get_month_names",
    "insert_recurring_rule",
    "insert_single_transaction",
    "load_account_registry",
    "load_one_off_transactions",
    "load_recurring_rules",
    "upsert_account",
    "write_month_ledger",
]
