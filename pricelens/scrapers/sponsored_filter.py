# pricelens/scrapers/sponsored_filter.py

"""Sponsored vs. organic classification of search-result candidates."""

import logging

from bs4 import Tag

from pricelens.models.platform import SponsoredSignals
from pricelens.models.product import ListingCandidate
from pricelens.scrapers.errors import NoOrganicResult

logger = logging.getLogger("pricelens.sponsored")


def _normalise_text(text: str) -> str:
    """Collapse whitespace and lowercase."""
    return " ".join(text.split()).lower()


class SponsoredFilter:
    """Flag paid placements using independent DOM heuristics.

    Signals, each evaluated on its own:

    - ``marker``: an explicit sponsored-marker element inside the candidate.
    - ``text``: a descendant whose normalised text is exactly a sponsored
      word ("sponsored", "ad").
    - ``class``: the candidate, or one of its ancestors, carries a known
      promotional class.
    - ``label``: a dedicated sponsored-label element.

    Any fired signal makes the candidate sponsored.  Order is never
    changed and nothing is scored.
    """

    def __init__(self, signals: SponsoredSignals) -> None:
        self.signals = signals
        self._text_values = frozenset(
            _normalise_text(v) for v in signals.text_values
        )

    def _has_marker(self, element: Tag) -> bool:
        return any(
            element.select_one(sel) is not None
            for sel in self.signals.marker_selectors
        )

    def _has_sponsored_text(self, element: Tag) -> bool:
        if not self.signals.text_tags or not self._text_values:
            return False
        for node in element.find_all(list(self.signals.text_tags)):
            if _normalise_text(node.get_text()) in self._text_values:
                return True
        return False

    def _in_class_bucket(self, element: Tag) -> bool:
        own = set(element.get("class") or [])
        if own & set(self.signals.class_buckets):
            return True
        if not self.signals.ancestor_class_buckets:
            return False
        buckets = set(self.signals.ancestor_class_buckets)
        for parent in element.parents:
            if parent.name in ("body", "[document]"):
                break
            if set(parent.get("class") or []) & buckets:
                return True
        return False

    def _has_label(self, element: Tag) -> bool:
        return any(
            element.select_one(sel) is not None
            for sel in self.signals.label_selectors
        )

    def signals_for(self, element: Tag) -> list[str]:
        """Return the names of every signal that fires on *element*."""
        fired: list[str] = []
        if self._has_marker(element):
            fired.append("marker")
        if self._has_sponsored_text(element):
            fired.append("text")
        if self._in_class_bucket(element):
            fired.append("class")
        if self._has_label(element):
            fired.append("label")
        return fired

    def classify(self, elements: list[Tag]) -> list[ListingCandidate]:
        """Wrap *elements* as candidates, in page order, with their signals."""
        candidates: list[ListingCandidate] = []
        for position, element in enumerate(elements):
            fired = self.signals_for(element)
            if fired:
                logger.debug(
                    "Candidate %d sponsored (signals: %s)",
                    position,
                    ", ".join(fired),
                )
            candidates.append(
                ListingCandidate(
                    position=position,
                    element=element,
                    signals=fired,
                )
            )
        return candidates

    @staticmethod
    def first_organic(
        candidates: list[ListingCandidate],
    ) -> ListingCandidate:
        """Return the first candidate with no sponsorship signal."""
        for candidate in candidates:
            if not candidate.is_sponsored:
                return candidate
        logger.warning(
            "No organic candidate among %d results", len(candidates),
        )
        raise NoOrganicResult()
