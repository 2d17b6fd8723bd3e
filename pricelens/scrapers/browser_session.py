# pricelens/scrapers/browser_session.py

"""One isolated Playwright browser per scrape call, always torn down."""

import logging
from types import TracebackType

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)
from playwright.async_api import Error as PlaywrightError

from pricelens.config.settings import Settings
from pricelens.scrapers.errors import LaunchError

logger = logging.getLogger("pricelens.browser")


class BrowserSession:
    """Owns a Chromium instance, its context and a single page.

    Use as ``async with BrowserSession() as page:``; the browser is
    released on every exit path, including cancellation.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self.page: Page | None = None

    async def acquire(self) -> Page:
        """Launch the browser and return a page ready for navigation."""
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.settings.HEADLESS,
                args=self.settings.LAUNCH_ARGS,
            )
            self._context = await self._browser.new_context(
                viewport=self.settings.VIEWPORT,  # type: ignore[arg-type]
                user_agent=self.settings.USER_AGENT,
                locale=self.settings.LOCALE,
                extra_http_headers=self.settings.EXTRA_HTTP_HEADERS,
            )
            self.page = await self._context.new_page()
        except PlaywrightError as exc:
            await self.release()
            msg = f"Browser launch failed: {exc.message}"
            raise LaunchError(msg) from exc

        logger.info(
            "Browser session acquired (headless=%s)",
            self.settings.HEADLESS,
        )
        return self.page

    async def release(self) -> None:
        """Close context, browser and driver; each step independently."""
        if self._context is not None:
            try:
                await self._context.close()
            except PlaywrightError as exc:
                logger.warning("Context close failed: %s", exc)
        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError as exc:
                logger.warning("Browser close failed: %s", exc)
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except PlaywrightError as exc:
                logger.warning("Playwright stop failed: %s", exc)

        released = self._browser is not None
        self._context = None
        self._browser = None
        self._playwright = None
        self.page = None
        if released:
            logger.info("Browser session released")

    async def __aenter__(self) -> Page:
        return await self.acquire()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.release()
