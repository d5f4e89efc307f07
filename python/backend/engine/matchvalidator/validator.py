"""Judges whether an item was dropped on the region it belongs to."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class Verdict:
    correct: bool
    score_delta: int
    explanation: str | None = None


class MatchValidator:
    """Stateless matcher: identity, or same class in a classification table.

    ``classification`` maps item or region keys to a class name; keys not
    in the table are their own class.  ``explanations`` maps item keys to
    the text shown when that item is dropped in the wrong place.
    """

    def __init__(
        self,
        classification: Mapping[str, str] | None = None,
        *,
        score_per_match: int = 10,
        explanations: Mapping[str, str] | None = None,
    ) -> None:
        self._classes = MappingProxyType(dict(classification or {}))
        self._explanations = MappingProxyType(dict(explanations or {}))
        self.score_per_match = score_per_match

    def classify(self, key: str) -> str:
        return self._classes.get(key, key)

    def validate(self, item_key: str, region_key: str) -> Verdict:
        correct = item_key == region_key or self.classify(item_key) == self.classify(
            region_key
        )
        if correct:
            return Verdict(True, self.score_per_match)
        return Verdict(False, 0, self._explanations.get(item_key))
