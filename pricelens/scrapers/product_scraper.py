# pricelens/scrapers/product_scraper.py

"""Generic search-and-extract pipeline shared by every platform."""

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from bs4 import BeautifulSoup
from playwright.async_api import Page

from pricelens.config.settings import Settings
from pricelens.models.platform import load_profile
from pricelens.models.product import ProductRecord
from pricelens.scrapers.browser_session import BrowserSession
from pricelens.scrapers.deadline import Deadline
from pricelens.scrapers.detail_extractor import DetailExtractor
from pricelens.scrapers.errors import ScrapeDeadlineExceeded
from pricelens.scrapers.product_locator import ProductLocator
from pricelens.scrapers.result_normalizer import ResultNormalizer
from pricelens.scrapers.search_navigator import SearchNavigator
from pricelens.scrapers.sponsored_filter import SponsoredFilter

SessionFactory = Callable[[Settings], AbstractAsyncContextManager[Page]]


class ProductScraper:
    """Scrape one platform: search, skip sponsored, extract, normalise.

    Every platform runs the same pipeline; what differs lives in its
    :class:`~pricelens.models.platform.PlatformProfile`.
    """

    def __init__(
        self,
        platform_id: str,
        session_factory: SessionFactory | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.platform_id = platform_id
        self.logger = logging.getLogger(f"pricelens.{platform_id}")
        self.settings = settings or Settings()
        self.profile = load_profile(
            platform_id, self.settings.SELECTORS_PATH,
        )
        self._session_factory: SessionFactory = (
            session_factory or BrowserSession
        )
        self.navigator = SearchNavigator(self.settings)
        self.sponsored_filter = SponsoredFilter(self.profile.sponsored)
        self.locator = ProductLocator(
            self.profile.listing, self.profile.origin,
        )
        self.extractor = DetailExtractor(self.profile, self.settings)

    def select_product_url(self, results: BeautifulSoup) -> str:
        """Pick the product URL from a results-page snapshot.

        Raises NoOrganicResult when the listing is empty, fully
        sponsored, or has no organic candidate with a product link.
        """
        elements = results.select(self.profile.listing.candidate_selector)
        candidates = self.sponsored_filter.classify(elements)
        self.logger.info(
            "[%s] %d candidates, %d sponsored",
            self.platform_id,
            len(candidates),
            sum(1 for c in candidates if c.is_sponsored),
        )
        first = self.sponsored_filter.first_organic(candidates)
        # later organic candidates back up a first one with no product link
        return self.locator.locate(candidates[first.position:])

    async def _run(self, query: str, deadline: Deadline) -> ProductRecord:
        async with self._session_factory(self.settings) as page:
            await self.navigator.open_results(
                page, self.profile.search, query, deadline,
            )
            results = BeautifulSoup(await page.content(), "lxml")
            product_url = self.select_product_url(results)
            return await self.extractor.scrape(page, product_url, deadline)

    async def scrape(
        self, query: str, deadline_s: float | None = None,
    ) -> ProductRecord:
        """Run the full pipeline for *query* within the overall deadline."""
        seconds = (
            deadline_s
            if deadline_s is not None
            else self.settings.SCRAPE_DEADLINE
        )
        self.logger.info(
            "[%s] Searching for '%s' (deadline %.0fs)",
            self.platform_id,
            query,
            seconds,
        )
        try:
            return await asyncio.wait_for(
                self._run(query, Deadline(seconds)), timeout=seconds,
            )
        except asyncio.TimeoutError as exc:
            msg = f"Scrape exceeded its {seconds:.0f}s deadline"
            raise ScrapeDeadlineExceeded(msg) from exc


async def scrape_product(
    platform_id: str,
    product_name: str,
    session_factory: SessionFactory | None = None,
    deadline_s: float | None = None,
) -> dict[str, Any]:
    """Scrape *product_name* on *platform_id* and return its envelope.

    This is the single catch point: any failure becomes
    ``{"success": false, "error": message}``.
    """
    logger = logging.getLogger(f"pricelens.{platform_id}")
    try:
        scraper = ProductScraper(platform_id, session_factory)
        record = await scraper.scrape(product_name, deadline_s)
    except Exception as e:
        logger.error(
            "[%s] Scrape failed for '%s': %s",
            platform_id,
            product_name,
            e,
            exc_info=True,
        )
        return ResultNormalizer.failure(str(e))

    logger.info(
        "[%s] Scrape completed: %s", platform_id, record.source_url,
    )
    return ResultNormalizer.success(record)
