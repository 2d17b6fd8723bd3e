# pricelens/scrapers/detail_extractor.py

"""Field extraction from a rendered product-detail page."""

import logging
import math
import re
from collections.abc import Callable
from typing import Any, TypeVar

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Page

from pricelens.config.settings import Settings
from pricelens.models.platform import PlatformProfile
from pricelens.models.product import ProductRecord, Rating
from pricelens.scrapers.deadline import Deadline
from pricelens.scrapers.search_navigator import goto, settle, wait_for

T = TypeVar("T")

IN_STOCK = "In Stock"
OUT_OF_STOCK = "Out of Stock"
UNKNOWN_STOCK = "Check availability"

# Envelope keys only some platforms report
OPTIONAL_FIELDS: tuple[str, ...] = (
    "brand", "ratings_count", "delivery", "sizes",
)

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")
_INT_RE = re.compile(r"\d+")
_COUNT_RE = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*([kKlLmM])?\b")
_COUNT_UNITS: dict[str, int] = {
    "k": 1_000,
    "l": 100_000,
    "m": 1_000_000,
}


def clean_text(element: Tag) -> str:
    """Element text with whitespace collapsed and trimmed."""
    return " ".join(element.get_text(" ").split())


def parse_amount(text: str | None) -> float | None:
    """Parse a price like '₹2,999.00' or 'MRP ₹4999' into a float."""
    if not text:
        return None
    match = _NUMBER_RE.search(text.replace(",", ""))
    return float(match.group()) if match else None


def parse_percent(text: str | None) -> int | None:
    """First integer in a badge like '-40%' or '(40% OFF)'."""
    if not text:
        return None
    match = _INT_RE.search(text)
    return int(match.group()) if match else None


def parse_count(
    text: str | None, pattern: str | None = None,
) -> int | None:
    """Parse a count like '12,345 ratings', '2.3k' or '1.2L'.

    When *pattern* is given its first group selects the part of the
    text holding the number (e.g. ``([\\d,]+)\\s*Reviews``).
    """
    if not text:
        return None
    if pattern:
        scoped = re.search(pattern, text, re.IGNORECASE)
        if not scoped:
            return None
        text = scoped.group(1)
    match = _COUNT_RE.search(text)
    if not match:
        return None
    value = float(match.group(1).replace(",", ""))
    unit = (match.group(2) or "").lower()
    return int(round(value * _COUNT_UNITS.get(unit, 1)))


def compute_discount(price: float, mrp: float) -> int:
    """Percent off MRP, rounded half up."""
    return math.floor((mrp - price) / mrp * 100 + 0.5)


class DetailExtractor:
    """Extract the product schema using the profile's selector chains."""

    def __init__(
        self,
        profile: PlatformProfile,
        settings: Settings | None = None,
    ) -> None:
        self.profile = profile
        self.detail: dict[str, Any] = profile.detail
        self.settings = settings or Settings()
        self.logger = logging.getLogger(f"pricelens.{profile.id}")

    # ------------------------------------------------------------------
    # Page-level steps (the only ones allowed to fail the scrape)
    # ------------------------------------------------------------------

    async def open(
        self, page: Page, url: str, deadline: Deadline,
    ) -> BeautifulSoup:
        """Navigate to *url*, wait for it to render and snapshot it."""
        ready = self.detail["ready_selector"]
        await goto(page, url, deadline, self.settings)
        await wait_for(page, ready, deadline, self.settings)
        await settle(
            page,
            self.detail.get("settle_selector", ready),
            min(
                self.detail.get("settle_ms", self.settings.DEFAULT_SETTLE_MS),
                deadline.remaining_ms(),
            ),
            self.settings.SETTLE_POLL_MS,
        )
        return BeautifulSoup(await page.content(), "lxml")

    async def scrape(
        self, page: Page, url: str, deadline: Deadline,
    ) -> ProductRecord:
        """Open the product page and extract its record."""
        soup = await self.open(page, url, deadline)
        return self.extract(soup, url)

    # ------------------------------------------------------------------
    # Field extraction (never raises for missing data)
    # ------------------------------------------------------------------

    def _first(
        self,
        soup: BeautifulSoup,
        selectors: list[str],
        parser: Callable[[str], T | None],
    ) -> T | None:
        """First value *parser* accepts across the selector chain."""
        for selector in selectors:
            for element in soup.select(selector):
                value = parser(clean_text(element))
                if value is not None and value != "":
                    return value
        return None

    def _text(self, soup: BeautifulSoup, key: str) -> str | None:
        selectors = self.detail.get(key)
        if not selectors:
            return None
        return self._first(soup, selectors, lambda t: t or None)

    def _number(self, soup: BeautifulSoup, key: str) -> float | None:
        return self._first(soup, self.detail.get(key, []), parse_amount)

    def _count(self, soup: BeautifulSoup, key: str) -> int | None:
        cfg = self.detail.get(key)
        if not cfg:
            return None
        pattern = cfg.get("pattern")
        return self._first(
            soup,
            cfg["selectors"],
            lambda t: parse_count(t, pattern),
        )

    def _discount(
        self,
        soup: BeautifulSoup,
        price: float | None,
        mrp: float | None,
    ) -> int | None:
        if price is not None and mrp:
            return compute_discount(price, mrp)
        return self._first(
            soup, self.detail.get("discount", []), parse_percent,
        )

    def _offers(self, soup: BeautifulSoup) -> list[str]:
        """Collect up to MAX_OFFERS distinct offers, group by group."""
        limit = self.settings.MAX_OFFERS
        offers: list[str] = []
        seen: set[str] = set()

        for group in self.detail.get("offers", []):
            if len(offers) >= limit:
                break
            min_length = group.get(
                "min_length", self.settings.MIN_OFFER_LENGTH,
            )
            max_length = group.get("max_length")
            keywords = [k.lower() for k in group.get("keywords", [])]
            strip_pattern = group.get("strip_pattern")
            inner = group.get("inner")

            for element in soup.select(", ".join(group["selectors"])):
                if len(offers) >= limit:
                    break
                source = element.select_one(inner) if inner else element
                if source is None:
                    continue
                text = clean_text(source)
                if strip_pattern:
                    text = re.sub(
                        strip_pattern, "", text, flags=re.IGNORECASE,
                    ).strip()
                if len(text) <= min_length:
                    continue
                if keywords and not any(k in text.lower() for k in keywords):
                    continue
                if max_length:
                    text = text[:max_length].strip()
                key = text.casefold()
                if key in seen:
                    continue
                seen.add(key)
                offers.append(text)

        return offers

    def _seller(self, soup: BeautifulSoup) -> str | None:
        cfg = self.detail.get("seller")
        if not cfg:
            return None
        pattern = cfg.get("pattern")

        def pick(text: str) -> str | None:
            if pattern:
                match = re.search(pattern, text)
                if match:
                    text = match.group(1).strip()
            return text or None

        return self._first(soup, cfg["selectors"], pick)

    def _availability(self, soup: BeautifulSoup) -> str | None:
        cfg = self.detail.get("availability")
        if not cfg:
            return None
        if cfg.get("mode") == "cart_button":
            return self._cart_availability(soup, cfg)
        return self._first(soup, cfg["selectors"], lambda t: t or None)

    @staticmethod
    def _cart_availability(
        soup: BeautifulSoup, cfg: dict[str, Any],
    ) -> str:
        """Infer stock from the add-to-cart button and status badges."""
        cart_text = cfg.get("cart_text", "add to cart").lower()
        cart = None
        for selector in cfg.get("cart_selectors", []):
            cart = soup.select_one(selector)
            if cart is not None:
                break

        if (
            cart is not None
            and cart.has_attr("disabled")
            and cart_text in clean_text(cart).lower()
        ):
            return OUT_OF_STOCK
        for selector in cfg.get("status_selectors", []):
            if soup.select_one(selector) is not None:
                return IN_STOCK
        if cart is not None and not cart.has_attr("disabled"):
            return IN_STOCK
        return UNKNOWN_STOCK

    def _sizes(self, soup: BeautifulSoup) -> list[str]:
        cfg = self.detail.get("sizes")
        if not cfg:
            return []
        inner = cfg.get("inner")
        sizes: list[str] = []
        for element in soup.select(", ".join(cfg["selectors"])):
            source = element.select_one(inner) if inner else element
            if source is None:
                continue
            text = clean_text(source)
            if text and text not in sizes:
                sizes.append(text)
        return sizes

    def extract(self, soup: BeautifulSoup, source_url: str) -> ProductRecord:
        """Build a ProductRecord from a page snapshot.

        Pure with respect to *soup*: the same snapshot always yields the
        same record.
        """
        price = self._number(soup, "price")
        mrp = self._number(soup, "mrp")

        record = ProductRecord(
            platform=self.profile.id,
            title=self._text(soup, "title") or "",
            price=price,
            mrp=mrp,
            discount=self._discount(soup, price, mrp),
            rating=Rating(
                stars=self._first(
                    soup, self.detail.get("rating", []), parse_amount,
                ),
                review_count=self._count(soup, "review_count"),
                ratings_count=self._count(soup, "ratings_count"),
            ),
            offers=self._offers(soup),
            seller=self._seller(soup),
            availability=self._availability(soup),
            delivery=self._text(soup, "delivery"),
            source_url=source_url,
            brand=self._text(soup, "brand"),
            sizes=self._sizes(soup),
            optional_fields=tuple(
                f for f in OPTIONAL_FIELDS if f in self.detail
            ),
        )

        missing = [
            name
            for name, value in (
                ("title", record.title),
                ("price", record.price),
                ("rating", record.rating.stars),
            )
            if value in (None, "")
        ]
        if missing:
            self.logger.info(
                "[%s] Missing fields on %s: %s",
                self.profile.id,
                source_url,
                ", ".join(missing),
            )
        return record
