"""Shared pytest fixtures.

Keeps tests hermetic: config and database live under ``tmp_path`` and the
package logger is reset after CLI tests configure it.
"""

import logging
from pathlib import Path

import pytest

from ledgerroll import logging_setup


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo configure_logging so caplog sees package records."""
    yield
    logger = logging.getLogger("ledgerroll")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    logging_setup._CONFIGURED = False


@pytest.fixture
def xdg_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> tuple[Path, Path]:
    """Point config and data directories at the test's temporary directory."""
    config_home = tmp_path / "config"
    data_home = tmp_path / "data"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("XDG_DATA_HOME", str(data_home))
    return config_home, data_home
