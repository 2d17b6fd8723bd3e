# pricelens/services/price_orchestrator.py

"""Compare one product across several platforms concurrently."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from pricelens.config.settings import Settings
from pricelens.scrapers.product_scraper import SessionFactory, scrape_product

logger = logging.getLogger("pricelens.orchestrator")


@dataclass
class ComparisonResult:
    """Envelopes for one product name, keyed by platform id."""

    query: str
    envelopes: dict[str, dict[str, Any]] = field(
        default_factory=lambda: dict[str, dict[str, Any]]()
    )

    @property
    def succeeded(self) -> list[str]:
        """Platform ids whose scrape returned ``success: true``."""
        return [
            pid for pid, env in self.envelopes.items() if env.get("success")
        ]

    @property
    def failed(self) -> list[str]:
        """Platform ids whose scrape returned ``success: false``."""
        return [
            pid
            for pid, env in self.envelopes.items()
            if not env.get("success")
        ]


class PriceOrchestrator:
    """Dispatch independent per-platform scrapes for the same product.

    Each platform gets its own browser session; nothing is pooled or
    shared between the concurrent tasks.
    """

    def __init__(
        self, session_factory: SessionFactory | None = None,
    ) -> None:
        self.settings = Settings()
        self._session_factory = session_factory

    async def compare(
        self,
        product_name: str,
        platforms: list[dict[str, str]] | None = None,
    ) -> ComparisonResult:
        """Scrape *product_name* on every platform in *platforms*."""
        selected = platforms or self.settings.AVAILABLE_PLATFORMS
        ids = [p["id"] for p in selected]
        logger.info(
            "Comparing '%s' across %s", product_name, ", ".join(ids),
        )

        envelopes = await asyncio.gather(
            *(
                scrape_product(pid, product_name, self._session_factory)
                for pid in ids
            )
        )

        result = ComparisonResult(
            query=product_name, envelopes=dict(zip(ids, envelopes)),
        )
        if result.failed:
            logger.warning(
                "Comparison for '%s' failed on: %s",
                product_name,
                ", ".join(result.failed),
            )
        return result
