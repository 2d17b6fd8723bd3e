# tests/test_product_scraper.py

"""End-to-end pipeline tests against in-memory pages."""

import asyncio
import unittest
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import patch

from bs4 import BeautifulSoup

from fake_page import FakePage, FakeSession, load_fixture
from pricelens.scrapers.errors import NoOrganicResult, ScrapeDeadlineExceeded
from pricelens.scrapers.product_scraper import ProductScraper, scrape_product

FLIPKART_SEARCH = "https://www.flipkart.com/search?q=Nike+Shoes"
FLIPKART_PRODUCT = "https://www.flipkart.com/p/nike-shoes-123"
AMAZON_SEARCH = "https://www.amazon.in/s?k=nike+shoes"
AMAZON_PRODUCT = (
    "https://www.amazon.in/Nike-Revolution-Running-Shoe/dp/B0C1234567/"
    "ref=sr_1_5?keywords=nike+shoes"
)
MYNTRA_HOME = "https://www.myntra.com/"
MYNTRA_RESULTS = "https://www.myntra.com/nike-shoes"
MYNTRA_PRODUCT = (
    "https://www.myntra.com/shoes/nike/"
    "nike-men-revolution-7-running-shoes/25123456/buy"
)


def _flipkart_page() -> FakePage:
    return FakePage(
        {
            FLIPKART_SEARCH: load_fixture("flipkart_search.html"),
            FLIPKART_PRODUCT: load_fixture("flipkart_product.html"),
        }
    )


class TestScrapeProductEnvelopes(unittest.IsolatedAsyncioTestCase):
    """scrape_product returns the envelope for every outcome."""

    async def test_flipkart_skips_two_sponsored(self) -> None:
        """Nike Shoes: third candidate chosen, discount recomputed."""
        session = FakeSession(_flipkart_page())
        envelope = await scrape_product("flipkart", "Nike Shoes", session)

        self.assertTrue(envelope["success"], envelope)
        data = envelope["data"]
        self.assertEqual(data["productLink"], FLIPKART_PRODUCT)
        self.assertTrue(data["productLink"].endswith("/p/nike-shoes-123"))
        self.assertEqual(data["price"], "₹2,999")
        self.assertEqual(data["mrp"], "₹4,999")
        self.assertEqual(data["discount"], "40%")
        self.assertEqual(
            data["rating"],
            {"stars": 4.3, "totalRatings": 12345, "totalReviews": 1024},
        )
        self.assertEqual(len(data["topOffers"]), 3)
        self.assertEqual(data["seller"], "RetailNet")
        self.assertEqual(data["availability"], "In Stock")
        self.assertEqual(data["delivery"], "Delivery by 21 Oct, Tuesday")
        self.assertTrue(session.released)

    async def test_flipkart_navigation_sequence(self) -> None:
        """Exactly one search load and one product load."""
        page = _flipkart_page()
        await scrape_product("flipkart", "Nike Shoes", FakeSession(page))
        self.assertEqual(page.navigations, [FLIPKART_SEARCH, FLIPKART_PRODUCT])

    async def test_amazon_envelope(self) -> None:
        """Amazon reports no delivery and no totalRatings."""
        page = FakePage(
            {
                AMAZON_SEARCH: load_fixture("amazon_search.html"),
                AMAZON_PRODUCT: load_fixture("amazon_product.html"),
            }
        )
        envelope = await scrape_product(
            "amazon", "nike shoes", FakeSession(page),
        )
        self.assertTrue(envelope["success"], envelope)
        data = envelope["data"]
        self.assertEqual(data["title"], "Nike Mens Revolution 7 Running Shoe")
        self.assertEqual(data["discount"], "40%")
        self.assertEqual(
            data["rating"], {"stars": 4.2, "totalReviews": 3456},
        )
        self.assertNotIn("delivery", data)
        self.assertEqual(data["productLink"], AMAZON_PRODUCT)

    async def test_myntra_envelope(self) -> None:
        """Myntra searches interactively and reports brand and sizes."""
        page = FakePage(
            {
                MYNTRA_HOME: load_fixture("myntra_home.html"),
                MYNTRA_RESULTS: load_fixture("myntra_search.html"),
                MYNTRA_PRODUCT: load_fixture("myntra_product.html"),
            },
            submit_url=MYNTRA_RESULTS,
        )
        envelope = await scrape_product(
            "myntra", "nike shoes", FakeSession(page),
        )
        self.assertTrue(envelope["success"], envelope)
        data = envelope["data"]
        self.assertEqual(list(data)[0], "brand")
        self.assertEqual(data["brand"], "Nike")
        self.assertEqual(data["price"], "₹3,396")
        self.assertEqual(data["discount"], "32%")
        self.assertEqual(data["sizes"], ["UK6", "UK7", "UK8"])
        self.assertEqual(
            data["rating"],
            {"stars": 4.4, "totalRatings": 2300, "totalReviews": None},
        )
        self.assertEqual(data["productLink"], MYNTRA_PRODUCT)
        self.assertEqual(
            page.navigations, [MYNTRA_HOME, MYNTRA_RESULTS, MYNTRA_PRODUCT],
        )

    async def test_sparse_product_page_still_succeeds(self) -> None:
        """A missing rating degrades to null instead of failing."""
        page = FakePage(
            {
                AMAZON_SEARCH: load_fixture("amazon_search.html"),
                AMAZON_PRODUCT: load_fixture("amazon_product_minimal.html"),
            }
        )
        envelope = await scrape_product(
            "amazon", "nike shoes", FakeSession(page),
        )
        self.assertTrue(envelope["success"], envelope)
        data = envelope["data"]
        self.assertIsNone(data["rating"]["stars"])
        self.assertIsNone(data["mrp"])
        self.assertIsNone(data["discount"])
        self.assertEqual(data["topOffers"], ["No offers available"])
        self.assertEqual(data["seller"], "Not specified")

    async def test_all_sponsored_never_opens_a_product(self) -> None:
        """A fully sponsored listing fails before any product navigation."""
        html = load_fixture("flipkart_search.html")
        html = html.replace(
            '<a class="CGtC98" href="/p/nike-shoes-123">',
            '<div class="Z0Na3m">Sponsored</div>'
            '<a class="CGtC98" href="/p/nike-shoes-123">',
        ).replace(
            '<a class="CGtC98" href="/p/nike-downshifter-456">',
            '<div class="_630qWQ">Ad</div>'
            '<a class="CGtC98" href="/p/nike-downshifter-456">',
        )
        page = FakePage({FLIPKART_SEARCH: html})
        session = FakeSession(page)

        envelope = await scrape_product("flipkart", "Nike Shoes", session)

        self.assertEqual(
            envelope,
            {"success": False, "error": "No non-sponsored products found"},
        )
        self.assertEqual(page.navigations, [FLIPKART_SEARCH])
        self.assertTrue(session.released)

    async def test_navigation_failure_envelope(self) -> None:
        """An unreachable search page yields a failure envelope."""
        session = FakeSession(FakePage({}))
        envelope = await scrape_product("flipkart", "Nike Shoes", session)
        self.assertFalse(envelope["success"])
        self.assertIn("Timed out loading", envelope["error"])
        self.assertEqual(set(envelope), {"success", "error"})
        self.assertTrue(session.released)

    async def test_product_page_not_ready_fails(self) -> None:
        """A product page that never renders its title fails the scrape."""
        page = FakePage(
            {
                FLIPKART_SEARCH: load_fixture("flipkart_search.html"),
                FLIPKART_PRODUCT: "<html><body>Please wait</body></html>",
            }
        )
        session = FakeSession(page)
        envelope = await scrape_product("flipkart", "Nike Shoes", session)
        self.assertFalse(envelope["success"])
        self.assertIn("waiting for", envelope["error"])
        self.assertTrue(session.released)

    async def test_unknown_platform_envelope(self) -> None:
        """An unknown platform id fails inside the envelope."""
        envelope = await scrape_product("snapdeal", "Nike Shoes")
        self.assertEqual(
            envelope, {"success": False, "error": "Unknown platform 'snapdeal'"},
        )


class TestProductScraperDeadline(unittest.IsolatedAsyncioTestCase):
    """The overall deadline bounds the whole scrape."""

    async def test_deadline_exceeded_releases_session(self) -> None:
        """A hung page is cancelled and the session still released."""
        released: list[bool] = []

        class HangingPage(FakePage):
            async def goto(self, url: str, **kwargs: Any) -> None:
                await asyncio.sleep(10)

        @asynccontextmanager
        async def hanging_session(settings: Any) -> AsyncIterator[FakePage]:
            try:
                yield HangingPage({})
            finally:
                released.append(True)

        scraper = ProductScraper("flipkart", hanging_session)
        with self.assertRaises(ScrapeDeadlineExceeded):
            await scraper.scrape("Nike Shoes", deadline_s=0.05)
        self.assertEqual(released, [True])

    async def test_deadline_envelope(self) -> None:
        """scrape_product reports the deadline as a plain failure."""
        with patch.object(
            ProductScraper,
            "scrape",
            side_effect=ScrapeDeadlineExceeded("Scrape exceeded its 1s deadline"),
        ):
            envelope = await scrape_product("amazon", "anything")
        self.assertEqual(
            envelope,
            {"success": False, "error": "Scrape exceeded its 1s deadline"},
        )


class TestSelectProductUrl(unittest.TestCase):
    """Listing snapshot to product URL, without a browser."""

    def test_select_from_snapshot(self) -> None:
        """The pure selection step matches the full pipeline."""
        scraper = ProductScraper("flipkart", FakeSession(FakePage({})))
        soup = BeautifulSoup(load_fixture("flipkart_search.html"), "lxml")
        self.assertEqual(scraper.select_product_url(soup), FLIPKART_PRODUCT)

    def test_locator_starts_at_first_organic(self) -> None:
        """The locator only sees candidates from the first organic on."""
        scraper = ProductScraper("flipkart", FakeSession(FakePage({})))
        soup = BeautifulSoup(load_fixture("flipkart_search.html"), "lxml")
        with patch.object(
            scraper.locator, "locate", wraps=scraper.locator.locate,
        ) as locate:
            url = scraper.select_product_url(soup)
        self.assertEqual(url, FLIPKART_PRODUCT)
        (passed,), _ = locate.call_args
        self.assertEqual([c.position for c in passed], [2, 3])
        self.assertFalse(any(c.is_sponsored for c in passed))

    def test_empty_listing(self) -> None:
        """No candidates at all is NoOrganicResult."""
        scraper = ProductScraper("flipkart", FakeSession(FakePage({})))
        with self.assertRaises(NoOrganicResult):
            scraper.select_product_url(BeautifulSoup("<p/>", "lxml"))


if __name__ == "__main__":
    unittest.main()
