"""Year rollforward: drives the month ledger across January to December.

Each month's ending balances seed the next month. Months before the
configured start month, or before any month has produced data, are skipped.
Once a month has been seeded every later month is seeded too; the state
machine below refuses any other ordering.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from ledgerroll.domain.errors import ConfigurationError, RollforwardStateError
from ledgerroll.domain.ledger import MonthLedger, build_month_ledger
from ledgerroll.domain.models import Account, AccountName, BalanceVector, Money
from ledgerroll.domain.recurrence import RecurrenceRule
from ledgerroll.domain.transactions import (
    OneOffTransaction,
    recurring_transactions_for_month,
    single_transactions_for_month,
)
from ledgerroll.logging_setup import get_logger

logger = get_logger(__name__)

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class LedgerConfig:
    """Immutable run configuration.

    Attributes:
        accounts: Account axis, the ordered tracked account names.
        months: Twelve month identifiers, January first.
        year: Year being rolled forward.
        start_month: First month with data (1-12).
    """

    accounts: tuple[AccountName, ...]
    months: tuple[str, ...]
    year: int
    start_month: int

    def __post_init__(self) -> None:
        if not self.accounts:
            raise ConfigurationError("At least one tracked account is required")
        if len(set(self.accounts)) != len(self.accounts):
            raise ConfigurationError("Tracked account names must be unique")
        if len(self.months) != MONTHS_PER_YEAR:
            raise ConfigurationError(f"Expected {MONTHS_PER_YEAR} month names, got {len(self.months)}")
        if len(set(self.months)) != MONTHS_PER_YEAR:
            raise ConfigurationError("Month names must be unique")
        if not 1 <= self.start_month <= MONTHS_PER_YEAR:
            raise ConfigurationError(f"start_month must be 1-12, got {self.start_month}")
        if not 1 <= self.year <= 9999:
            raise ConfigurationError(f"Invalid year: {self.year}")

    def month_name(self, month: int) -> str:
        """Month identifier for a month number (1-12)."""
        return self.months[month - 1]


class MonthState(str, Enum):
    """Outcome of a month within a rollforward run."""

    PENDING = "pending"
    SEEDED = "seeded"
    SKIPPED = "skipped"


_ALLOWED = {
    MonthState.PENDING: {MonthState.SEEDED, MonthState.SKIPPED},
    MonthState.SEEDED: set(),
    MonthState.SKIPPED: set(),
}


@dataclass
class RollforwardProgress:
    """Mutable progress of one run, owned by a single ``run`` call.

    Each month moves once from PENDING to SEEDED or SKIPPED and keeps that
    outcome. ``done`` is set for the whole run after month 12.
    """

    states: dict[int, MonthState] = field(
        default_factory=lambda: {m: MonthState.PENDING for m in range(1, MONTHS_PER_YEAR + 1)}
    )
    seeds: dict[int, BalanceVector] = field(default_factory=dict)
    final_balances: BalanceVector | None = None
    done: bool = False

    @property
    def seeded_any(self) -> bool:
        return bool(self.seeds)

    def transition(self, month: int, new_state: MonthState, balances: BalanceVector | None = None) -> None:
        """Record a month's outcome, enforcing skip-then-seed ordering.

        Args:
            month: Month number (1-12).
            new_state: SEEDED or SKIPPED.
            balances: Seed vector, required for SEEDED.

        Raises:
            RollforwardStateError: If the transition is not allowed.
        """
        if self.done:
            raise RollforwardStateError(f"Month {month}: the run is already done")
        current = self.states[month]
        if new_state not in _ALLOWED[current]:
            raise RollforwardStateError(f"Month {month}: cannot go from {current.value} to {new_state.value}")
        if new_state is MonthState.SKIPPED and self.seeded_any:
            raise RollforwardStateError(f"Month {month}: cannot skip after an earlier month was seeded")
        if new_state is MonthState.SEEDED:
            if balances is None:
                raise RollforwardStateError(f"Month {month}: seeding needs a balance vector")
            self.seeds[month] = balances
        self.states[month] = new_state

    def finish(self) -> None:
        """Mark the run done once every month has an outcome.

        Raises:
            RollforwardStateError: If any month is still pending.
        """
        pending = [month for month, state in self.states.items() if state is MonthState.PENDING]
        if pending:
            raise RollforwardStateError(f"Cannot finish with pending months: {pending}")
        self.done = True


def seed_balances(accounts: Sequence[AccountName], registry: Sequence[Account]) -> BalanceVector:
    """Build the seed vector from a registry snapshot.

    Accounts missing from the registry start at zero.

    Raises:
        ConfigurationError: If the registry is empty.
    """
    if not registry:
        raise ConfigurationError("Account registry is empty")
    by_name = {account.name: account.balance for account in registry}
    return tuple(Money(by_name.get(name, Decimal("0"))) for name in accounts)


class YearRollforward:
    """Runs the month ledger for every month of the configured year."""

    def __init__(self, config: LedgerConfig) -> None:
        self.config = config
        self.progress = RollforwardProgress()

    @property
    def states(self) -> dict[int, MonthState]:
        return dict(self.progress.states)

    @property
    def final_balances(self) -> BalanceVector | None:
        return self.progress.final_balances

    @property
    def seeds(self) -> dict[int, BalanceVector]:
        """Seed vector of every seeded month."""
        return dict(self.progress.seeds)

    @property
    def done(self) -> bool:
        return self.progress.done

    def run(
        self,
        rules: Sequence[RecurrenceRule],
        one_offs: Sequence[OneOffTransaction],
        initial_balances: BalanceVector,
    ) -> Iterator[MonthLedger]:
        """Yield each active month's ledger in calendar order.

        Callers persist each ledger as it is yielded; if anything raises the
        remaining months are never produced.

        Args:
            rules: Parsed recurrence rules.
            one_offs: Parsed one-off transactions (all months).
            initial_balances: Registry snapshot for the start month.

        Yields:
            MonthLedger for every seeded month.
        """
        config = self.config
        if len(initial_balances) != len(config.accounts):
            raise ConfigurationError(
                f"Initial balances have {len(initial_balances)} entries, expected {len(config.accounts)}"
            )

        self.progress = RollforwardProgress()
        previous: BalanceVector | None = None

        for month in range(1, MONTHS_PER_YEAR + 1):
            name = config.month_name(month)

            if month < config.start_month:
                incoming = None
            elif month == config.start_month:
                incoming = tuple(initial_balances)
            else:
                incoming = previous

            ledger = None
            if incoming is not None:
                recurring = recurring_transactions_for_month(rules, config.year, month)
                single = single_transactions_for_month(one_offs, config.year, month)
                ledger = build_month_ledger(config.accounts, name, config.year, month, recurring, single, incoming)

            if ledger is None:
                logger.info("Skipping %s %s - no previous balance data", name, config.year)
                self.progress.transition(month, MonthState.SKIPPED)
            else:
                logger.info("Processed %s %s: %d rows", name, config.year, len(ledger.rows))
                self.progress.transition(month, MonthState.SEEDED, ledger.starting_balances)
                previous = ledger.ending_balances
                self.progress.final_balances = ledger.ending_balances
                yield ledger

        self.progress.finish()

    def run_all(
        self,
        rules: Sequence[RecurrenceRule],
        one_offs: Sequence[OneOffTransaction],
        initial_balances: BalanceVector,
    ) -> list[MonthLedger]:
        """Run the whole year and collect every month's ledger."""
        return list(self.run(rules, one_offs, initial_balances))
