import glob
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from .config import settings
from .database import init_db, load_word_stats, save_word_stats
from .errors import WordNotFoundError
from .models import Difficulty, DifficultyFilter, GameSettings, Word, WordStatistics

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("word", "synonyms")

DUMMY_WORDS = [
    ("happy", ["joyful", "glad", "cheerful"], Difficulty.EASY),
    ("big", ["large", "huge", "enormous"], Difficulty.EASY),
    ("quick", ["fast", "rapid", "swift"], Difficulty.EASY),
    ("angry", ["furious", "irate", "mad"], Difficulty.MEDIUM),
    ("brave", ["courageous", "bold", "valiant"], Difficulty.MEDIUM),
    ("tired", ["exhausted", "weary", "fatigued"], Difficulty.MEDIUM),
    ("ephemeral", ["fleeting", "transient", "short-lived"], Difficulty.HARD),
    ("ubiquitous", ["omnipresent", "pervasive", "universal"], Difficulty.HARD),
]


class WordStore(ABC):
    """Source of quiz words and sink for per-word outcomes."""

    @abstractmethod
    def fetch_words_by_settings(self, game_settings: GameSettings) -> List[Word]:
        pass

    @abstractmethod
    def get_word(self, word_id: str) -> Word:
        pass

    @abstractmethod
    def record_outcome(self, word_id: str, is_correct: bool) -> None:
        pass

    @abstractmethod
    def get_categories(self) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def get_statistics(self) -> WordStatistics:
        pass


# --- Service Layer: Vocabulary Management ---
class VocabularyManager(WordStore):
    """Loads synonym word banks from CSV files and tracks review counters."""

    def __init__(self, directory: str, stats_db: Optional[str] = None):
        self.directory = directory
        self.stats_db = stats_db
        self.words: Dict[str, Word] = {}

    def load_all(self):
        self.words = {}
        if not os.path.exists(self.directory):
            os.makedirs(self.directory)
            logger.warning(f"Created directory {self.directory}. Please add CSV files.")

        csv_files = sorted(glob.glob(os.path.join(self.directory, "*.csv")))
        for file_path in csv_files:
            try:
                file_name = os.path.splitext(os.path.basename(file_path))[0]
                df = pd.read_csv(file_path, encoding="utf-8", dtype=str, keep_default_na=False)
                if not all(col in df.columns for col in REQUIRED_COLUMNS):
                    logger.error(f"Skipping {file_name}: Missing columns.")
                    continue
                loaded = self.add_words(self._rows_to_words(file_name, df.to_dict("records")))
                logger.info(f"Loaded {loaded} words from {file_name}")
            except Exception as e:
                logger.error(f"Failed to load {file_path}: {e}")

        if not self.words:
            logger.warning("No CSV files found. Loading dummy data.")
            self.add_words(
                Word(
                    id=f"default:{word}",
                    word=word,
                    synonyms=synonyms,
                    difficulty=difficulty,
                    category="default",
                )
                for word, synonyms, difficulty in DUMMY_WORDS
            )

        if self.stats_db is not None:
            self._restore_stats()

    def _rows_to_words(self, file_name: str, rows: List[Dict[str, Any]]) -> Iterable[Word]:
        for index, row in enumerate(rows):
            text = row["word"].strip()
            synonyms = [s.strip() for s in row["synonyms"].split(settings.SYNONYM_SEPARATOR)]
            if not text or not any(synonyms):
                logger.warning(f"Skipping row {index} of {file_name}: empty word or synonyms.")
                continue
            raw_difficulty = (row.get("difficulty") or "medium").strip().lower()
            try:
                difficulty = Difficulty(raw_difficulty)
            except ValueError:
                logger.warning(f"Unknown difficulty '{raw_difficulty}' for {text}, using medium.")
                difficulty = Difficulty.MEDIUM
            tags = [t.strip() for t in (row.get("tags") or "").split(settings.SYNONYM_SEPARATOR) if t.strip()]
            yield Word(
                id=(row.get("id") or "").strip() or f"{file_name}:{text.lower()}",
                word=text,
                synonyms=synonyms,
                difficulty=difficulty,
                category=(row.get("category") or "").strip() or file_name,
                tags=tags,
                meaning=(row.get("meaning") or "").strip() or None,
            )

    def _restore_stats(self):
        init_db(self.stats_db)
        for word_id, row in load_word_stats(self.stats_db).items():
            word = self.words.get(word_id)
            if word is None:
                continue
            word.correct_count = row["correct_count"]
            word.incorrect_count = row["incorrect_count"]
            if row["last_reviewed"]:
                word.last_reviewed = datetime.fromisoformat(row["last_reviewed"])

    def add_words(self, words: Iterable[Word]) -> int:
        count = 0
        for word in words:
            if word.id in self.words:
                logger.warning(f"Duplicate word id {word.id}, keeping the first one.")
                continue
            self.words[word.id] = word
            count += 1
        return count

    def fetch_words_by_settings(self, game_settings: GameSettings) -> List[Word]:
        pool = list(self.words.values())
        if game_settings.difficulty != DifficultyFilter.MIXED:
            pool = [w for w in pool if w.difficulty.value == game_settings.difficulty.value]
        if game_settings.categories:
            wanted = {c.strip().lower() for c in game_settings.categories}
            pool = [w for w in pool if w.category and w.category.lower() in wanted]
        return pool

    def get_word(self, word_id: str) -> Word:
        word = self.words.get(word_id)
        if word is None:
            raise WordNotFoundError(word_id)
        return word

    def record_outcome(self, word_id: str, is_correct: bool) -> None:
        word = self.get_word(word_id)
        if is_correct:
            word.correct_count += 1
        else:
            word.incorrect_count += 1
        word.last_reviewed = datetime.now()
        if self.stats_db is not None:
            save_word_stats(
                word.id,
                word.correct_count,
                word.incorrect_count,
                word.last_reviewed.isoformat(),
                db_path=self.stats_db,
            )

    def get_categories(self) -> List[Dict[str, Any]]:
        counts: Dict[str, int] = {}
        for word in self.words.values():
            key = word.category or "uncategorized"
            counts[key] = counts.get(key, 0) + 1
        categories = []
        for key, count in counts.items():
            display_name = key.replace("_", " ").title()
            categories.append({"id": key, "name": display_name, "count": count})
        categories.sort(key=lambda x: x["name"])
        return categories

    def get_statistics(self) -> WordStatistics:
        """Learning progress over the whole bank, read from the outcome counters."""
        words = list(self.words.values())
        total = len(words)
        learned = sum(1 for w in words if w.correct_count > 0)
        reviewed = sum(1 for w in words if w.correct_count or w.incorrect_count)
        total_correct = sum(w.correct_count for w in words)
        total_incorrect = sum(w.incorrect_count for w in words)
        attempts = total_correct + total_incorrect
        return WordStatistics(
            total_words=total,
            learned_words=learned,
            reviewed_words=reviewed,
            new_words=total - reviewed,
            learning_progress=round(learned / total * 100) if total else 0,
            total_correct=total_correct,
            total_incorrect=total_incorrect,
            accuracy=round(total_correct / attempts * 100, 2) if attempts else 0.0,
        )
