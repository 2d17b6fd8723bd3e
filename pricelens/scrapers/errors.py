# pricelens/scrapers/errors.py

"""Failures that abort a scrape.

Missing field data is never one of these: it degrades to ``None`` in the
record.  Everything below short-circuits the pipeline and surfaces as a
``{"success": false, "error": ...}`` envelope at the call boundary.
"""


class ScrapeError(Exception):
    """Base class for page-level scrape failures."""


class LaunchError(ScrapeError):
    """The browser process or context could not be started."""


class NavigationTimeout(ScrapeError):
    """A page never reached a ready state within its bound."""


class SelectorTimeout(ScrapeError):
    """An expected structural element never appeared."""


class NoOrganicResult(ScrapeError):
    """No listing candidate was both organic and linked to a product page."""

    def __init__(self, message: str = "No non-sponsored products found") -> None:
        super().__init__(message)


class ScrapeDeadlineExceeded(ScrapeError):
    """The whole scrape ran past its overall deadline."""
