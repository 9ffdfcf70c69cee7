"""Configuration file management for ledgerroll."""

import os
import tomllib
from datetime import datetime
from pathlib import Path
from typing import Any

import tomli_w

from ledgerroll.domain.errors import ConfigurationError
from ledgerroll.domain.models import AccountName
from ledgerroll.domain.rollforward import LedgerConfig

DEFAULT_ACCOUNTS = [
    "Capital One Checking",
    "Acorns Checking",
    "Chase Checking",
    "Savings Account",
    "IRA",
    "Investment Account",
    "CASH",
    "Destiny Card",
    "Aspire Card",
    "Indigo Card",
    "Capital One Quicksilver",
    "Milestone Card",
]

DEFAULT_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "ledgerroll" / "config.toml"


def default_config(year: int | None = None) -> dict[str, Any]:
    """Build the default configuration dictionary.

    Args:
        year: Year to roll forward. Defaults to the current year.
    """
    return {
        "year": year if year is not None else datetime.now().year,
        "start_month": 1,
        "accounts": list(DEFAULT_ACCOUNTS),
        "months": list(DEFAULT_MONTHS),
    }


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(default_config(), f)

    os.chmod(config_path, 0o600)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def ledger_config_from_dict(config: dict[str, Any]) -> LedgerConfig:
    """Validate a configuration dictionary into a LedgerConfig.

    Args:
        config: Dictionary as loaded from TOML.

    Returns:
        Immutable LedgerConfig.

    Raises:
        ConfigurationError: If keys are missing or have the wrong type.
    """
    try:
        accounts = config["accounts"]
        months = config.get("months", DEFAULT_MONTHS)
        year = config["year"]
        start_month = config.get("start_month", 1)
    except KeyError as e:
        raise ConfigurationError(f"Missing config key: {e.args[0]}") from e

    if not isinstance(accounts, list) or not all(isinstance(a, str) for a in accounts):
        raise ConfigurationError("'accounts' must be a list of account names")
    if not isinstance(months, list) or not all(isinstance(m, str) for m in months):
        raise ConfigurationError("'months' must be a list of month names")
    if not isinstance(year, int) or isinstance(year, bool):
        raise ConfigurationError("'year' must be an integer")
    if not isinstance(start_month, int) or isinstance(start_month, bool):
        raise ConfigurationError("'start_month' must be an integer")

    return LedgerConfig(
        accounts=tuple(AccountName(a) for a in accounts),
        months=tuple(months),
        year=year,
        start_month=start_month,
    )


def get_ledger_config(config_path: Path | None = None) -> LedgerConfig:
    """Load and validate the ledger configuration.

    Raises:
        ConfigurationError: If the file is missing or invalid.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        raise ConfigurationError("Config not found. Run 'ledgerroll init' first.") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Config is not valid TOML: {e}") from e
    return ledger_config_from_dict(config)
