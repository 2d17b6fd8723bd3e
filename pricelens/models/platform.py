# pricelens/models/platform.py

"""Per-platform capability profiles that drive the generic scraper."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import quote_plus

from pricelens.config.settings import Settings

logger = logging.getLogger("pricelens.platforms")


@dataclass(frozen=True)
class DirectUrlSearch:
    """Search by navigating straight to a templated results URL."""

    url_template: str
    results_selector: str
    settle_ms: int

    def build_url(self, query: str) -> str:
        """Return the results URL for *query* (URL-encoded)."""
        return self.url_template.format(query=quote_plus(query))


@dataclass(frozen=True)
class InteractiveSearch:
    """Search by typing into the home page's search box and submitting."""

    home_url: str
    input_selector: str
    results_selector: str
    settle_ms: int


SearchStrategy = DirectUrlSearch | InteractiveSearch


@dataclass(frozen=True)
class ListingConfig:
    """How to find result candidates and their product links."""

    candidate_selector: str
    link_selectors: tuple[str, ...]
    product_url_patterns: tuple[str, ...]


@dataclass(frozen=True)
class SponsoredSignals:
    """Heuristic signal set marking a candidate as a paid placement."""

    marker_selectors: tuple[str, ...] = ()
    text_tags: tuple[str, ...] = ()
    text_values: tuple[str, ...] = ()
    class_buckets: tuple[str, ...] = ()
    ancestor_class_buckets: tuple[str, ...] = ()
    label_selectors: tuple[str, ...] = ()


@dataclass
class PlatformProfile:
    """Everything platform-specific the scraping pipeline needs."""

    id: str
    label: str
    origin: str
    search: SearchStrategy
    listing: ListingConfig
    sponsored: SponsoredSignals
    detail: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )

    @classmethod
    def from_config(
        cls, platform_id: str, raw: dict[str, Any],
    ) -> "PlatformProfile":
        """Build a profile from one platform block of selectors.json."""
        return cls(
            id=platform_id,
            label=raw["label"],
            origin=raw["origin"].rstrip("/"),
            search=_build_search(raw["search"]),
            listing=ListingConfig(
                candidate_selector=raw["listing"]["candidate_selector"],
                link_selectors=tuple(raw["listing"]["link_selectors"]),
                product_url_patterns=tuple(
                    raw["listing"].get("product_url_patterns", [])
                ),
            ),
            sponsored=SponsoredSignals(
                **{
                    key: tuple(value)
                    for key, value in raw.get("sponsored", {}).items()
                }
            ),
            detail=raw["detail"],
        )


def _build_search(raw: dict[str, Any]) -> SearchStrategy:
    """Map the ``strategy`` tag to its search variant."""
    strategy = raw.get("strategy")
    settle_ms = int(raw.get("settle_ms", Settings.DEFAULT_SETTLE_MS))
    if strategy == "direct_url":
        return DirectUrlSearch(
            url_template=raw["url_template"],
            results_selector=raw["results_selector"],
            settle_ms=settle_ms,
        )
    if strategy == "interactive":
        return InteractiveSearch(
            home_url=raw["home_url"],
            input_selector=raw["input_selector"],
            results_selector=raw["results_selector"],
            settle_ms=settle_ms,
        )
    msg = f"Unknown search strategy '{strategy}'"
    raise ValueError(msg)


def load_profile(
    platform_id: str, path: Path | None = None,
) -> PlatformProfile:
    """Load the profile for *platform_id* from the selectors file."""
    selectors_path = path or Settings.SELECTORS_PATH
    with open(selectors_path, encoding="utf-8") as f:
        all_profiles: dict[str, Any] = json.load(f)

    raw = all_profiles.get(platform_id)
    if not isinstance(raw, dict):
        msg = f"Unknown platform '{platform_id}'"
        raise ValueError(msg)

    logger.debug(
        "Loaded %s profile (selectors version %s)",
        platform_id,
        all_profiles.get("version", "unversioned"),
    )
    return PlatformProfile.from_config(platform_id, raw)
