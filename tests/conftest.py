# tests/conftest.py

"""Shared pytest fixtures for all scraper tests."""

import logging
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from pricelens.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_logs_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Point LOGS_DIR at a temp dir so runs never write into the repo."""
    logs_dir = tmp_path / "logs"
    with patch.object(Settings, "LOGS_DIR", logs_dir):
        yield logs_dir
    root_logger = logging.getLogger("pricelens")
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
