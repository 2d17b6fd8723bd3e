# tests/test_search_navigator.py

"""Tests for search navigation, selector waits and settling."""

import unittest

from fake_page import FakePage, load_fixture
from pricelens.config.settings import Settings
from pricelens.models.platform import InteractiveSearch, load_profile
from pricelens.scrapers.deadline import Deadline
from pricelens.scrapers.errors import (
    NavigationTimeout,
    ScrapeDeadlineExceeded,
    SelectorTimeout,
)
from pricelens.scrapers.search_navigator import (
    SearchNavigator,
    goto,
    settle,
    wait_for,
)

FLIPKART_SEARCH = "https://www.flipkart.com/search?q=Nike+Shoes"
MYNTRA_HOME = "https://www.myntra.com/"
MYNTRA_RESULTS = "https://www.myntra.com/nike-shoes"


class TestNavigationSteps(unittest.IsolatedAsyncioTestCase):
    """goto / wait_for map Playwright timeouts to scrape errors."""

    async def test_goto_timeout_is_navigation_timeout(self) -> None:
        """An unreachable URL raises NavigationTimeout."""
        page = FakePage({})
        with self.assertRaises(NavigationTimeout) as ctx:
            await goto(page, "https://down.example/", Deadline(30), Settings())
        self.assertIn("https://down.example/", str(ctx.exception))

    async def test_missing_selector_is_selector_timeout(self) -> None:
        """A selector that never appears raises SelectorTimeout."""
        page = FakePage({"https://x.example/": "<p>empty</p>"})
        await goto(page, "https://x.example/", Deadline(30), Settings())
        with self.assertRaises(SelectorTimeout) as ctx:
            await wait_for(page, "li.product-base", Deadline(30), Settings())
        self.assertIn("li.product-base", str(ctx.exception))

    async def test_spent_deadline_refuses_to_start_a_step(self) -> None:
        """A step never starts once the overall budget is gone."""
        page = FakePage({"https://x.example/": "<p>x</p>"})
        with self.assertRaises(ScrapeDeadlineExceeded):
            await goto(page, "https://x.example/", Deadline(0), Settings())
        self.assertEqual(page.navigations, [])


class TestSettle(unittest.IsolatedAsyncioTestCase):
    """Condition polling instead of fixed sleeps."""

    async def test_stable_count_returns_early(self) -> None:
        """Two equal non-zero probes end the wait after one poll."""
        page = FakePage({})
        page.html = "<ul><li class='r'>1</li><li class='r'>2</li></ul>"
        count = await settle(page, "li.r", budget_ms=3000, poll_ms=500)
        self.assertEqual(count, 2)
        self.assertEqual(page.waited_ms, 500)

    async def test_zero_count_uses_whole_budget(self) -> None:
        """Nothing to settle on waits out the budget, then returns 0."""
        page = FakePage({})
        count = await settle(page, "li.r", budget_ms=1200, poll_ms=500)
        self.assertEqual(count, 0)
        self.assertEqual(page.waited_ms, 1200)

    async def test_zero_budget_does_not_wait(self) -> None:
        """A zero budget returns immediately."""
        page = FakePage({})
        await settle(page, "li.r", budget_ms=0, poll_ms=500)
        self.assertEqual(page.waited_ms, 0)


class TestSearchNavigator(unittest.IsolatedAsyncioTestCase):
    """Both search strategies end on a results listing."""

    async def test_direct_url_strategy(self) -> None:
        """Flipkart navigates straight to the encoded results URL."""
        page = FakePage(
            {FLIPKART_SEARCH: load_fixture("flipkart_search.html")},
        )
        profile = load_profile("flipkart")
        await SearchNavigator().open_results(
            page, profile.search, "Nike Shoes", Deadline(30),
        )
        self.assertEqual(page.navigations, [FLIPKART_SEARCH])

    async def test_direct_url_without_results_times_out(self) -> None:
        """A results page missing the listing raises SelectorTimeout."""
        page = FakePage({FLIPKART_SEARCH: "<p>No results</p>"})
        profile = load_profile("flipkart")
        with self.assertRaises(SelectorTimeout):
            await SearchNavigator().open_results(
                page, profile.search, "Nike Shoes", Deadline(30),
            )

    async def test_interactive_strategy(self) -> None:
        """Myntra types the query and submits with Enter."""
        page = FakePage(
            {
                MYNTRA_HOME: load_fixture("myntra_home.html"),
                MYNTRA_RESULTS: load_fixture("myntra_search.html"),
            },
            submit_url=MYNTRA_RESULTS,
        )
        profile = load_profile("myntra")
        assert isinstance(profile.search, InteractiveSearch)
        await SearchNavigator().open_results(
            page, profile.search, "nike shoes", Deadline(30),
        )
        self.assertEqual(page.navigations, [MYNTRA_HOME, MYNTRA_RESULTS])
        self.assertEqual(page.clicked, [".desktop-searchBar"])
        self.assertEqual(page.typed, ["nike shoes"])
        self.assertEqual(page.keyboard.pressed, ["Enter"])

    async def test_interactive_without_search_box(self) -> None:
        """A home page without the search input raises SelectorTimeout."""
        page = FakePage({MYNTRA_HOME: "<p>maintenance</p>"})
        profile = load_profile("myntra")
        with self.assertRaises(SelectorTimeout):
            await SearchNavigator().open_results(
                page, profile.search, "nike shoes", Deadline(30),
            )
        self.assertEqual(page.typed, [])

    async def test_interactive_submit_never_navigates(self) -> None:
        """Enter that goes nowhere raises NavigationTimeout."""
        page = FakePage({MYNTRA_HOME: load_fixture("myntra_home.html")})
        profile = load_profile("myntra")
        with self.assertRaises(NavigationTimeout):
            await SearchNavigator().open_results(
                page, profile.search, "nike shoes", Deadline(30),
            )


if __name__ == "__main__":
    unittest.main()
