# pricelens/scrapers/product_locator.py

"""Resolve the canonical product URL from organic listing candidates."""

import logging
import re
from urllib.parse import urljoin, urlparse

from bs4 import Tag

from pricelens.models.platform import ListingConfig
from pricelens.models.product import ListingCandidate
from pricelens.scrapers.errors import NoOrganicResult

logger = logging.getLogger("pricelens.locator")


class ProductLocator:
    """Pick the first organic candidate that links to a product page."""

    def __init__(self, listing: ListingConfig, origin: str) -> None:
        self.listing = listing
        self.origin = origin.rstrip("/")
        self._patterns = [
            re.compile(p, re.IGNORECASE)
            for p in listing.product_url_patterns
        ]

    def resolve_href(self, element: Tag) -> str | None:
        """First non-empty href across the link selector chain."""
        for selector in self.listing.link_selectors:
            link = element.select_one(selector)
            if link is None:
                continue
            href = str(link.get("href") or "").strip()
            if href:
                return href
        return None

    def absolutize(self, href: str) -> str:
        """Resolve *href* against the platform origin."""
        return urljoin(f"{self.origin}/", href)

    def is_product_url(self, url: str) -> bool:
        """True when the URL path carries a product-detail marker."""
        if not self._patterns:
            return True
        path = urlparse(url).path
        return any(p.search(path) for p in self._patterns)

    def locate(self, candidates: list[ListingCandidate]) -> str:
        """Return the product URL of the first usable organic candidate.

        Organic candidates without a link, or whose link is not a
        product-detail path, are skipped in favour of the next one.
        """
        for candidate in candidates:
            if candidate.is_sponsored:
                continue
            href = self.resolve_href(candidate.element)
            candidate.href = href
            if not href:
                logger.debug(
                    "Candidate %d has no link", candidate.position,
                )
                continue
            url = self.absolutize(href)
            if not self.is_product_url(url):
                logger.debug(
                    "Candidate %d link is not a product page: %s",
                    candidate.position,
                    url,
                )
                continue
            logger.info(
                "Found non-sponsored product at position %d: %s",
                candidate.position,
                url,
            )
            return url
        raise NoOrganicResult()
