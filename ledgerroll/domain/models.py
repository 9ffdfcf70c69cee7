"""Domain type definitions for ledgerroll.

These aliases provide semantic clarity and help with type checking:
- Money: Decimal amount in account currency units
- AccountName: Name of a tracked account (must match the account axis exactly)
- CategoryName: Transaction category ("Income", "Transfer", anything else is an expense)
- BalanceVector: One balance per tracked account, index-aligned with the axis
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import NewType

# Amounts are always Decimal; floats never reach a balance vector
Money = NewType("Money", Decimal)

AccountName = NewType("AccountName", str)

CategoryName = NewType("CategoryName", str)

# Folds always build a new tuple
BalanceVector = tuple[Money, ...]

INCOME = CategoryName("Income")
TRANSFER = CategoryName("Transfer")


class TransactionSource(str, Enum):
    """Where a ledger row came from."""

    RECURRING = "Recurring"
    SINGLE = "Single"
    INITIAL = "Initial"


@dataclass(frozen=True)
class Account:
    """Immutable account registry entry."""

    name: AccountName
    balance: Money


def net_worth(balances: BalanceVector) -> Money:
    """Sum all balances in a vector."""
    return Money(sum(balances, Decimal("0")))


def format_money(amount: Decimal) -> str:
    """Format an amount for display (e.g., "-$1,234.50")."""
    formatted = f"${abs(amount):,.2f}"
    return f"-{formatted}" if amount < 0 else formatted
