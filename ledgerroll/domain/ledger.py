"""Pure functions for building one month's running-balance ledger.

This module contains the functional core for the month ledger:
- No I/O operations
- Each transaction folds into a new balance vector; the seed is never mutated
- Unknown account names are logged and leave balances unchanged

Transfers credit the destination with the absolute amount. This is a
one-sided entry, not a balanced double-entry transfer.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ledgerroll.domain.errors import ConfigurationError, MissingBalancesError
from ledgerroll.domain.models import (
    INCOME,
    AccountName,
    BalanceVector,
    CategoryName,
    Money,
    TransactionSource,
    net_worth,
)
from ledgerroll.domain.transactions import Transaction
from ledgerroll.logging_setup import get_logger

logger = get_logger(__name__)

STARTING_BALANCE_DESCRIPTION = "Starting Balance"


@dataclass(frozen=True)
class LedgerRow:
    """Immutable ledger row with a balance snapshot."""

    date: date
    description: str
    category: CategoryName
    account: AccountName
    amount: Money | None
    source: TransactionSource
    balances: BalanceVector
    net_worth: Money


@dataclass(frozen=True)
class MonthLedger:
    """Immutable result of building one month."""

    month_name: str
    year: int
    month: int
    starting_balances: BalanceVector
    rows: tuple[LedgerRow, ...]
    ending_balances: BalanceVector


def sort_key(transaction: Transaction) -> tuple[date, int]:
    """Order by date, Income first on the same day."""
    return transaction.date, 0 if transaction.category == INCOME else 1


def merge_transactions(recurring: Sequence[Transaction], single: Sequence[Transaction]) -> list[Transaction]:
    """Merge both sources into ledger order.

    The sort is stable, so ties keep recurring before single, then input order.
    """
    return sorted([*recurring, *single], key=sort_key)


def starting_row(year: int, month: int, balances: BalanceVector) -> LedgerRow:
    """Create the synthetic first row of a month."""
    return LedgerRow(
        date=date(year, month, 1),
        description=STARTING_BALANCE_DESCRIPTION,
        category=CategoryName(""),
        account=AccountName(""),
        amount=None,
        source=TransactionSource.INITIAL,
        balances=balances,
        net_worth=net_worth(balances),
    )


def apply_transaction(
    axis: Sequence[AccountName], balances: BalanceVector, transaction: Transaction
) -> BalanceVector:
    """Fold one transaction into a balance vector.

    Args:
        axis: Ordered tracked account names.
        balances: Vector before the transaction.
        transaction: Normalized transaction.

    Returns:
        New vector after the transaction (the input is not modified).
    """
    updated = list(balances)

    if transaction.account in axis:
        index = axis.index(transaction.account)
        updated[index] = Money(updated[index] + transaction.amount)
    else:
        logger.warning(
            "Unknown account %r on %s %r; balances unchanged",
            transaction.account,
            transaction.date.isoformat(),
            transaction.description,
        )

    if transaction.transfer_to:
        if transaction.transfer_to in axis:
            index = axis.index(transaction.transfer_to)
            updated[index] = Money(updated[index] + abs(transaction.amount))
        else:
            logger.warning(
                "Unknown transfer destination %r on %s %r",
                transaction.transfer_to,
                transaction.date.isoformat(),
                transaction.description,
            )

    return tuple(updated)


def build_month_ledger(
    axis: Sequence[AccountName],
    month_name: str,
    year: int,
    month: int,
    recurring: Sequence[Transaction],
    single: Sequence[Transaction],
    starting_balances: BalanceVector | None,
) -> MonthLedger | None:
    """Build the ordered ledger rows for a month.

    Args:
        axis: Ordered tracked account names.
        month_name: Month identifier used by the store (e.g., "Sep").
        year: Target year.
        month: Target month (1-12).
        recurring: Recurring-sourced transactions for the month.
        single: One-off transactions for the month.
        starting_balances: Seed vector, or None when no earlier month had data.

    Returns:
        MonthLedger, or None when there are no balances and no transactions.

    Raises:
        MissingBalancesError: If transactions exist but no balances were given.
        ConfigurationError: If the seed vector does not match the axis length.
    """
    if starting_balances is None:
        if not recurring and not single:
            return None
        raise MissingBalancesError(
            f"{month_name} {year} has {len(recurring) + len(single)} transactions but no starting balances"
        )

    if len(starting_balances) != len(axis):
        raise ConfigurationError(
            f"Starting balances for {month_name} have {len(starting_balances)} entries, expected {len(axis)}"
        )

    seed: BalanceVector = tuple(Money(Decimal(b)) for b in starting_balances)
    rows = [starting_row(year, month, seed)]
    balances = seed

    for transaction in merge_transactions(recurring, single):
        balances = apply_transaction(axis, balances, transaction)
        rows.append(
            LedgerRow(
                date=transaction.date,
                description=transaction.description,
                category=transaction.category,
                account=transaction.account,
                amount=transaction.amount,
                source=transaction.source,
                balances=balances,
                net_worth=net_worth(balances),
            )
        )

    return MonthLedger(
        month_name=month_name,
        year=year,
        month=month,
        starting_balances=seed,
        rows=tuple(rows),
        ending_balances=balances,
    )
