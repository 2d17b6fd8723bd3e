# pricelens/scrapers/result_normalizer.py

"""Map a ProductRecord onto the stable response envelope."""

from typing import Any

from pricelens.config.settings import Settings
from pricelens.models.product import ProductRecord

NOT_AVAILABLE = "Not available"
NO_OFFERS = "No offers available"
NOT_SPECIFIED = "Not specified"
NO_SIZES = "No sizes available"


def _group_indian(digits: str) -> str:
    """Group an integer digit string the en-IN way: 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join([*groups, tail])


def format_currency(
    amount: float, symbol: str = Settings.CURRENCY_SYMBOL,
) -> str:
    """'₹' + en-IN grouped amount with at most three decimals."""
    text = f"{abs(amount):.3f}".rstrip("0").rstrip(".")
    whole, _, fraction = text.partition(".")
    sign = "-" if amount < 0 else ""
    grouped = _group_indian(whole)
    return f"{symbol}{sign}{grouped}" + (f".{fraction}" if fraction else "")


def _json_number(value: float | None) -> float | int | None:
    """Render integral floats as ints (4.0 -> 4)."""
    if value is not None and float(value).is_integer():
        return int(value)
    return value


class ResultNormalizer:
    """Build success and failure envelopes."""

    @staticmethod
    def success(record: ProductRecord) -> dict[str, Any]:
        """Wrap *record* in the ``{"success": true, "data": ...}`` envelope."""
        optional = set(record.optional_fields)
        data: dict[str, Any] = {}

        if "brand" in optional:
            data["brand"] = record.brand or ""
        data["title"] = record.title
        data["price"] = (
            format_currency(record.price) if record.price else NOT_AVAILABLE
        )
        data["mrp"] = format_currency(record.mrp) if record.mrp else None
        data["discount"] = (
            f"{record.discount}%" if record.discount else None
        )

        rating: dict[str, Any] = {"stars": _json_number(record.rating.stars)}
        if "ratings_count" in optional:
            rating["totalRatings"] = record.rating.ratings_count
        rating["totalReviews"] = record.rating.review_count
        data["rating"] = rating

        data["topOffers"] = (
            record.offers[: Settings.MAX_OFFERS] or [NO_OFFERS]
        )
        data["seller"] = record.seller or NOT_SPECIFIED
        data["availability"] = record.availability
        if "delivery" in optional:
            data["delivery"] = record.delivery
        if "sizes" in optional:
            data["sizes"] = list(record.sizes) or [NO_SIZES]
        data["productLink"] = record.source_url

        return {"success": True, "data": data}

    @staticmethod
    def failure(message: str) -> dict[str, Any]:
        """The ``{"success": false, "error": ...}`` envelope."""
        return {"success": False, "error": message}
