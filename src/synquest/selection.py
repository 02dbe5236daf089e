import random
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .errors import InsufficientWordsError
from .models import SelectionMode, Word


# --- Strategy Pattern: Word Selectors ---
class WordSelector(ABC):
    """Abstract Base Class for picking the questions of a session."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def select(self, pool: Sequence[Word], count: int) -> List[str]:
        if len(pool) < count:
            raise InsufficientWordsError(count, len(pool))
        return [w.id for w in self._pick(list(pool), count)]

    @abstractmethod
    def _pick(self, pool: List[Word], count: int) -> List[Word]:
        pass


class RandomWordSelector(WordSelector):
    """Standard mode: uniformly samples N words without replacement."""

    def _pick(self, pool: List[Word], count: int) -> List[Word]:
        return self.rng.sample(pool, count)


class ReviewWordSelector(WordSelector):
    """Review mode: words answered wrong most often come first."""

    def _pick(self, pool: List[Word], count: int) -> List[Word]:
        self.rng.shuffle(pool)
        pool.sort(key=lambda w: w.incorrect_count - w.correct_count, reverse=True)
        chosen = pool[:count]
        self.rng.shuffle(chosen)
        return chosen


class SelectorFactory:
    """Factory to select the appropriate selector."""

    selectors = {
        SelectionMode.RANDOM: RandomWordSelector,
        SelectionMode.REVIEW: ReviewWordSelector,
    }

    @classmethod
    def create(cls, mode: SelectionMode, rng: Optional[random.Random] = None) -> WordSelector:
        selector_cls = cls.selectors[SelectionMode(mode)]
        return selector_cls(rng)
