# pricelens/models/product.py

"""Product data models for inter-module data flow."""

from dataclasses import dataclass, field

from bs4 import Tag


@dataclass
class Rating:
    """Star rating and the counts shown next to it."""

    stars: float | None = None
    review_count: int | None = None
    ratings_count: int | None = None


@dataclass
class ProductRecord:
    """Raw record extracted from a single product-detail page."""

    platform: str
    title: str = ""
    price: float | None = None
    mrp: float | None = None
    discount: int | None = None
    rating: Rating = field(default_factory=Rating)
    offers: list[str] = field(default_factory=lambda: list[str]())
    seller: str | None = None
    availability: str | None = None
    delivery: str | None = None
    source_url: str = ""
    brand: str | None = None
    sizes: list[str] = field(default_factory=lambda: list[str]())
    # Optional envelope keys this platform reports (emitted even when null)
    optional_fields: tuple[str, ...] = ()


@dataclass
class ListingCandidate:
    """One entry of a rendered search-results listing."""

    position: int
    element: Tag
    signals: list[str] = field(default_factory=lambda: list[str]())
    href: str | None = None

    @property
    def is_sponsored(self) -> bool:
        """True when any sponsorship signal fired."""
        return bool(self.signals)
