"""Domain models and pure logic for ledgerroll.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from ledgerroll.domain.models import Account, AccountName, BalanceVector, CategoryName, Money, TransactionSource

__all__ = ["Account", "AccountName", "BalanceVector", "CategoryName", "Money", "TransactionSource"]
