# pricelens/scrapers/search_navigator.py

"""Drive a page to a rendered search-results state."""

import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from pricelens.config.settings import Settings
from pricelens.models.platform import (
    DirectUrlSearch,
    InteractiveSearch,
    SearchStrategy,
)
from pricelens.scrapers.deadline import Deadline
from pricelens.scrapers.errors import NavigationTimeout, SelectorTimeout

logger = logging.getLogger("pricelens.navigator")


async def goto(
    page: Page, url: str, deadline: Deadline, settings: Settings,
) -> None:
    """Navigate and wait for the document to settle."""
    timeout = deadline.clip(settings.NAVIGATION_TIMEOUT_MS)
    try:
        await page.goto(
            url, wait_until=settings.WAIT_UNTIL, timeout=timeout,  # type: ignore[arg-type]
        )
    except PlaywrightTimeoutError as exc:
        msg = f"Timed out loading {url} after {timeout:.0f}ms"
        raise NavigationTimeout(msg) from exc
    except PlaywrightError as exc:
        msg = f"Navigation to {url} failed: {exc.message}"
        raise NavigationTimeout(msg) from exc


async def wait_for(
    page: Page,
    selector: str,
    deadline: Deadline,
    settings: Settings,
) -> None:
    """Wait for *selector* to be attached, or raise SelectorTimeout."""
    timeout = deadline.clip(settings.SELECTOR_TIMEOUT_MS)
    try:
        await page.wait_for_selector(
            selector, state="attached", timeout=timeout,
        )
    except PlaywrightTimeoutError as exc:
        msg = (
            f"Timed out after {timeout:.0f}ms waiting for "
            f"'{selector}' on {page.url}"
        )
        raise SelectorTimeout(msg) from exc


async def settle(
    page: Page,
    probe_selector: str,
    budget_ms: float,
    poll_ms: int,
) -> int:
    """Poll until the probe's element count stops changing.

    Returns once two consecutive probes agree on a non-zero count, or
    when *budget_ms* is spent.  The returned value is the last count.
    """
    waited = 0.0
    previous = -1
    count = 0
    while waited < budget_ms:
        count = await page.locator(probe_selector).count()
        if count > 0 and count == previous:
            logger.debug(
                "Settled on %d '%s' elements after %.0fms",
                count,
                probe_selector,
                waited,
            )
            return count
        previous = count
        step = min(poll_ms, budget_ms - waited)
        await page.wait_for_timeout(step)
        waited += step
    logger.debug(
        "Settle budget %.0fms spent ('%s' count=%d)",
        budget_ms,
        probe_selector,
        count,
    )
    return count


class SearchNavigator:
    """Run a platform's search strategy for a query."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()

    async def open_results(
        self,
        page: Page,
        search: SearchStrategy,
        query: str,
        deadline: Deadline,
    ) -> None:
        """Leave *page* on a settled results listing for *query*."""
        if isinstance(search, InteractiveSearch):
            await self._interactive(page, search, query, deadline)
        else:
            await self._direct(page, search, query, deadline)

        await settle(
            page,
            search.results_selector,
            min(search.settle_ms, deadline.remaining_ms()),
            self.settings.SETTLE_POLL_MS,
        )

    async def _direct(
        self,
        page: Page,
        search: DirectUrlSearch,
        query: str,
        deadline: Deadline,
    ) -> None:
        url = search.build_url(query)
        logger.info("Navigating to %s", url)
        await goto(page, url, deadline, self.settings)
        await wait_for(
            page, search.results_selector, deadline, self.settings,
        )

    async def _interactive(
        self,
        page: Page,
        search: InteractiveSearch,
        query: str,
        deadline: Deadline,
    ) -> None:
        logger.info("Navigating to %s to search '%s'", search.home_url, query)
        await goto(page, search.home_url, deadline, self.settings)
        await wait_for(
            page, search.input_selector, deadline, self.settings,
        )
        await settle(
            page,
            search.input_selector,
            min(self.settings.TYPE_PAUSE_MS, deadline.remaining_ms()),
            self.settings.SETTLE_POLL_MS,
        )

        try:
            await page.click(
                search.input_selector,
                timeout=deadline.clip(self.settings.SELECTOR_TIMEOUT_MS),
            )
            await page.type(search.input_selector, query)
        except PlaywrightTimeoutError as exc:
            msg = f"Search input '{search.input_selector}' not interactable"
            raise SelectorTimeout(msg) from exc
        await page.wait_for_timeout(self.settings.TYPE_PAUSE_MS)

        timeout = deadline.clip(self.settings.NAVIGATION_TIMEOUT_MS)
        try:
            async with page.expect_navigation(
                wait_until=self.settings.WAIT_UNTIL,  # type: ignore[arg-type]
                timeout=timeout,
            ):
                await page.keyboard.press("Enter")
        except PlaywrightTimeoutError as exc:
            msg = f"Search submit for '{query}' never reached a results page"
            raise NavigationTimeout(msg) from exc

        await wait_for(
            page, search.results_selector, deadline, self.settings,
        )
