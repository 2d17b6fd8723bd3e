# pricelens/config/logging_config.py

"""Per-run timestamped logging configuration for pricelens.

Every launch (a CLI scrape, a health check, an API server start) gets its
own file in ``logs/``, e.g. ``logs/run_20261018_153045.log``.  The
per-platform scraper loggers (``pricelens.amazon``, ``pricelens.flipkart``,
``pricelens.myntra``) and the pipeline loggers all propagate to the
``pricelens`` logger, so one file holds a scrape from launch to envelope.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from pricelens.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_STDERR_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP client libraries log every request at INFO/DEBUG
_QUIET_LOGGERS = ("httpx", "httpcore", "openai")


def setup_logging(console_level: int = logging.WARNING) -> Path:
    """Attach the run file handler and a stderr handler to ``pricelens``.

    Args:
        console_level: Minimum level echoed to stderr. The file always
            records DEBUG and above.

    Returns:
        The :class:`~pathlib.Path` of this run's log file.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    project_logger = logging.getLogger("pricelens")
    project_logger.setLevel(logging.DEBUG)

    # Repeated calls (tests, Flask reloader) must not stack handlers
    if project_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(console_level)
    stderr_handler.setFormatter(
        logging.Formatter(_STDERR_FORMAT, datefmt=_DATE_FORMAT)
    )

    project_logger.addHandler(file_handler)
    project_logger.addHandler(stderr_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    project_logger.info(
        "Logging initialised (stderr level %s), log file: %s",
        logging.getLevelName(console_level),
        log_file,
    )
    return log_file
