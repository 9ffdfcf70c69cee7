"""Exceptions raised by the ledger core and its store adapter.

Row-level and data-quality anomalies never raise; they are logged and the
offending row is skipped or coerced. Only the errors below abort a run.
"""


class LedgerError(Exception):
    """Base exception for ledgerroll failures."""

    pass


class ConfigurationError(LedgerError):
    """Required configuration or registry data is missing or invalid."""

    pass


class MissingBalancesError(LedgerError):
    """A month has transactions but no starting balances were supplied."""

    pass


class RollforwardStateError(LedgerError):
    """The month state machine was asked to make an illegal transition."""

    pass
