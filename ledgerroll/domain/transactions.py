"""Pure functions for turning raw rule and one-off rows into transactions.

This module contains the functional core for transaction normalization:
- No I/O operations (no database, no console, no files)
- Row validation happens once, when raw store rows become records
- Sign conventions are applied from the category

Anomalies (divider rows, inactive rules, bad amounts) are logged and
skipped or coerced; they never abort a run.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from ledgerroll.dates import coerce_date, month_window
from ledgerroll.domain.models import (
    INCOME,
    TRANSFER,
    AccountName,
    CategoryName,
    Money,
    TransactionSource,
)
from ledgerroll.domain.recurrence import RecurrenceRule, occurrence_dates, parse_frequency
from ledgerroll.logging_setup import get_logger

logger = get_logger(__name__)

SECTION_DIVIDER = "==="
HEADER_DESCRIPTION = "Description"

_TRUE_TEXT = {"true", "yes"}


@dataclass(frozen=True)
class OneOffTransaction:
    """Immutable manually entered transaction, amount signed as entered."""

    date: date
    description: str
    category: CategoryName
    account: AccountName
    amount: Money
    transfer_to: AccountName | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Transaction:
    """Immutable normalized transaction ready for the ledger."""

    date: date
    description: str
    category: CategoryName
    account: AccountName
    amount: Money
    source: TransactionSource
    transfer_to: AccountName | None = None


def parse_amount(value: Any) -> Money:
    """Parse an amount cell into a Decimal.

    Currency symbols, thousands separators and surrounding whitespace are
    ignored. Non-numeric values are coerced to zero and logged.

    Args:
        value: Raw cell value (number, Decimal or text).

    Returns:
        Parsed amount, or zero for blank/malformed input.
    """
    if value is None or isinstance(value, bool):
        return Money(Decimal("0"))
    if isinstance(value, Decimal):
        return Money(value)
    if isinstance(value, int):
        return Money(Decimal(value))

    text = str(value).strip().replace("$", "").replace("£", "").replace(",", "")
    if not text:
        return Money(Decimal("0"))

    try:
        amount = Decimal(text)
    except InvalidOperation:
        logger.warning("Non-numeric amount %r treated as 0", value)
        return Money(Decimal("0"))

    if not amount.is_finite():
        logger.warning("Non-finite amount %r treated as 0", value)
        return Money(Decimal("0"))
    return Money(amount)


def parse_active(value: Any) -> bool:
    """Interpret an 'active' cell.

    True for real booleans, the text "true" or "yes" (any case) and any
    number equal to 1 ("1", 1, 1.0). Everything else is inactive.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in _TRUE_TEXT:
        return True
    try:
        return float(text) == 1
    except ValueError:
        return False


def parse_day_of_month(value: Any) -> int | None:
    """Parse a day-of-month cell, None when blank or not an integer."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not number.is_integer():
        return None
    return int(number)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def is_divider_row(description: str) -> bool:
    """Check if a rule row is blank, a section divider or a repeated header.

    Args:
        description: Description cell of the row.

    Returns:
        True if the row carries no rule.
    """
    return not description or SECTION_DIVIDER in description or description == HEADER_DESCRIPTION


def rule_from_row(row: Mapping[str, Any]) -> RecurrenceRule | None:
    """Build a RecurrenceRule from a raw store row.

    Inactive rules are kept (with ``active=False``) so the normalizer can
    report them; divider and header rows are dropped.

    Args:
        row: Raw row keyed by column name.

    Returns:
        RecurrenceRule, or None for divider/header/blank rows.
    """
    description = _text(row.get("description"))
    if is_divider_row(description):
        return None

    return RecurrenceRule(
        description=description,
        category=CategoryName(_text(row.get("category"))),
        amount=parse_amount(row.get("amount")),
        account=AccountName(_text(row.get("account"))),
        frequency=_text(row.get("frequency")) or None,
        start_date=coerce_date(row.get("start_date")),
        end_date=coerce_date(row.get("end_date")),
        day_of_month=parse_day_of_month(row.get("day_of_month")),
        day_of_week=_text(row.get("day_of_week")) or None,
        active=parse_active(row.get("active")),
    )


def one_off_from_row(row: Mapping[str, Any]) -> OneOffTransaction | None:
    """Build a OneOffTransaction from a raw store row.

    Args:
        row: Raw row keyed by column name.

    Returns:
        OneOffTransaction, or None if the row has no usable date.
    """
    txn_date = coerce_date(row.get("date"))
    if txn_date is None:
        return None

    transfer_to = _text(row.get("transfer_to"))
    notes = _text(row.get("notes"))
    return OneOffTransaction(
        date=txn_date,
        description=_text(row.get("description")),
        category=CategoryName(_text(row.get("category"))),
        account=AccountName(_text(row.get("account"))),
        amount=parse_amount(row.get("amount")),
        transfer_to=AccountName(transfer_to) if transfer_to else None,
        notes=notes or None,
    )


def parse_rule_rows(rows: Iterable[Mapping[str, Any]]) -> list[RecurrenceRule]:
    """Parse raw rule rows, dropping dividers and headers."""
    rules: list[RecurrenceRule] = []
    for row in rows:
        rule = rule_from_row(row)
        if rule is None:
            logger.debug("Skipping divider/header rule row: %r", row.get("description"))
            continue
        rules.append(rule)
    return rules


def parse_one_off_rows(rows: Iterable[Mapping[str, Any]]) -> list[OneOffTransaction]:
    """Parse raw one-off rows, dropping rows without a date."""
    parsed: list[OneOffTransaction] = []
    for row in rows:
        one_off = one_off_from_row(row)
        if one_off is None:
            logger.debug("Skipping one-off row without a date: %r", row.get("description"))
            continue
        parsed.append(one_off)
    return parsed


def apply_category_sign(category: str, amount: Money) -> Money:
    """Apply the sign convention for a category.

    Args:
        category: Transaction category.
        amount: Amount as entered.

    Returns:
        Non-negative for Income, unchanged for Transfer, non-positive otherwise.
    """
    if category == INCOME:
        return Money(abs(amount))
    if category == TRANSFER:
        return amount
    return Money(-abs(amount))


def recurring_transactions_for_month(rules: Iterable[RecurrenceRule], year: int, month: int) -> list[Transaction]:
    """Expand active rules into signed transactions for one month.

    Args:
        rules: Parsed recurrence rules.
        year: Target year.
        month: Target month (1-12).

    Returns:
        Transactions in rule order, then occurrence order.
    """
    month_start, month_end = month_window(year, month)
    transactions: list[Transaction] = []

    for rule in rules:
        if not rule.active:
            logger.debug("Skipping inactive rule: %s", rule.description)
            continue
        if rule.start_date is None:
            logger.debug("Skipping rule without start date: %s", rule.description)
            continue
        if parse_frequency(rule.frequency) is None:
            logger.warning("Unknown frequency %r on rule %s", rule.frequency, rule.description)
            continue

        amount = apply_category_sign(rule.category, rule.amount)
        for occurrence in occurrence_dates(rule, month_start, month_end):
            transactions.append(
                Transaction(
                    date=occurrence,
                    description=rule.description,
                    category=rule.category,
                    account=rule.account,
                    amount=amount,
                    source=TransactionSource.RECURRING,
                    # Rules have no destination column
                    transfer_to=None,
                )
            )

    return transactions


def single_transactions_for_month(
    one_offs: Iterable[OneOffTransaction], year: int, month: int
) -> list[Transaction]:
    """Select one-off transactions in a month and apply sign conventions.

    Args:
        one_offs: Parsed one-off transactions (any month).
        year: Target year.
        month: Target month (1-12).

    Returns:
        Transactions in input order.
    """
    return [
        Transaction(
            date=one_off.date,
            description=one_off.description,
            category=one_off.category,
            account=one_off.account,
            amount=apply_category_sign(one_off.category, one_off.amount),
            source=TransactionSource.SINGLE,
            transfer_to=one_off.transfer_to,
        )
        for one_off in one_offs
        if one_off.date.year == year and one_off.date.month == month
    ]
