"""Synonym matching: compares a submitted answer set with a canonical synonym set."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .models import FeedbackStatus


def normalize(text: str) -> str:
    return text.strip().casefold()


@dataclass(frozen=True)
class ItemMatch:
    submitted: str
    status: FeedbackStatus
    synonym: Optional[str] = None


@dataclass(frozen=True)
class MatchReport:
    items: List[ItemMatch] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)

    @property
    def matched(self) -> List[str]:
        return [m.synonym for m in self.items if m.status == FeedbackStatus.CORRECT]

    @property
    def all_items_correct(self) -> bool:
        return all(m.status == FeedbackStatus.CORRECT for m in self.items)


def match_synonyms(canonical: Sequence[str], submitted: Sequence[str]) -> MatchReport:
    """Classify every submitted item against the canonical synonyms.

    Matching is exact on the normalized form (surrounding whitespace
    stripped, case folded). A second item hitting an already matched
    synonym is a duplicate and earns nothing. Blank items are ignored.
    """
    lookup = {}
    for synonym in canonical:
        lookup.setdefault(normalize(synonym), synonym)

    used = set()
    items = []
    for raw in submitted:
        key = normalize(raw)
        if not key:
            continue
        synonym = lookup.get(key)
        if synonym is None:
            items.append(ItemMatch(raw, FeedbackStatus.INCORRECT))
        elif key in used:
            items.append(ItemMatch(raw, FeedbackStatus.DUPLICATE, synonym))
        else:
            used.add(key)
            items.append(ItemMatch(raw, FeedbackStatus.CORRECT, synonym))

    missing = [s for k, s in lookup.items() if k not in used]
    return MatchReport(items=items, missing=missing)
