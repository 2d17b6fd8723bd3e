# pricelens/scrapers/deadline.py

"""Overall time budget threaded through every suspending scrape step."""

import time

from pricelens.scrapers.errors import ScrapeDeadlineExceeded


class Deadline:
    """Monotonic deadline that clips per-step timeouts to what is left."""

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        self._expires_at = time.monotonic() + seconds

    def remaining_ms(self) -> float:
        """Milliseconds left before the deadline (never negative)."""
        return max(0.0, (self._expires_at - time.monotonic()) * 1000)

    def clip(self, timeout_ms: float) -> float:
        """Return *timeout_ms* capped at the remaining budget.

        Raises ScrapeDeadlineExceeded once the budget is spent, so a step
        is never started with a zero timeout (Playwright reads 0 as
        "wait forever").
        """
        remaining = self.remaining_ms()
        if remaining <= 0:
            msg = f"Scrape exceeded its {self.seconds:.0f}s deadline"
            raise ScrapeDeadlineExceeded(msg)
        return min(timeout_ms, remaining)
