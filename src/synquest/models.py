from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import settings


# --- Enums ---
class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class DifficultyFilter(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    MIXED = "mixed"


class AnswerMode(str, Enum):
    EXACT = "exact"
    PARTIAL = "partial"


class SelectionMode(str, Enum):
    RANDOM = "random"
    REVIEW = "review"


class SessionStatus(str, Enum):
    CREATED = "created"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class FeedbackStatus(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    DUPLICATE = "duplicate"
    MISSING = "missing"


class Achievement(str, Enum):
    PERFECT_RUN = "perfect_run"
    HOT_STREAK = "hot_streak"
    SHARPSHOOTER = "sharpshooter"
    SELF_RELIANT = "self_reliant"
    SPEED_DEMON = "speed_demon"


# --- Models ---
class Word(BaseModel):
    id: str
    word: str
    synonyms: List[str]
    difficulty: Difficulty = Difficulty.MEDIUM
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    meaning: Optional[str] = None
    correct_count: int = 0
    incorrect_count: int = 0
    last_reviewed: Optional[datetime] = None

    @field_validator("synonyms")
    @classmethod
    def _dedupe_synonyms(cls, value: List[str]) -> List[str]:
        seen = set()
        cleaned = []
        for synonym in value:
            key = synonym.strip().casefold()
            if key and key not in seen:
                seen.add(key)
                cleaned.append(synonym.strip())
        if not cleaned:
            raise ValueError("a word needs at least one synonym")
        return cleaned


class GameSettings(BaseModel):
    """Configuration of one quiz session. Frozen once built."""

    model_config = ConfigDict(frozen=True)

    difficulty: DifficultyFilter = DifficultyFilter.MIXED
    number_of_questions: int = Field(
        default=settings.DEFAULT_QUESTIONS, ge=1, le=settings.MAX_QUESTIONS
    )
    categories: Optional[List[str]] = None
    time_limit: Optional[float] = Field(default=None, gt=0)
    hints_enabled: bool = True
    answer_mode: Optional[AnswerMode] = None
    selection: SelectionMode = SelectionMode.RANDOM

    @property
    def effective_mode(self) -> AnswerMode:
        return self.answer_mode or AnswerMode.PARTIAL


class QuizAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    word_id: str
    user_answer: List[str]
    correct_synonyms: List[str]
    is_correct: bool
    timestamp: datetime
    hints_used: int = 0
    points: int = 0


class SynonymFeedback(BaseModel):
    synonym: str
    status: FeedbackStatus
    user_provided: bool


class AnswerFeedback(BaseModel):
    word_id: str
    is_correct: bool
    correct_answers: List[str]
    user_answer: List[str]
    matched: List[str]
    missed: List[str]
    items: List[SynonymFeedback]
    explanation: Optional[str] = None


class QuizSession(BaseModel):
    id: str
    owner_id: Optional[str] = None
    settings: GameSettings
    words: List[str]
    current_index: int = 0
    answers: List[QuizAnswer] = Field(default_factory=list)
    score: int = 0
    hints: Dict[str, int] = Field(default_factory=dict)
    status: SessionStatus = SessionStatus.CREATED
    start_time: datetime
    end_time: Optional[datetime] = None
    outcomes_recorded: bool = False
    outcomes_written: int = 0

    @property
    def total_questions(self) -> int:
        return len(self.words)

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    @property
    def current_word_id(self) -> Optional[str]:
        if self.current_index < self.total_questions:
            return self.words[self.current_index]
        return None


class QuizResult(BaseModel):
    session_id: str
    score: int
    total_questions: int
    correct_answers: int
    incorrect_answers: int
    unanswered: int
    accuracy: float
    streak: int
    current_streak: int
    time_spent: float
    achievements: List[Achievement]
    hints_used: int
    feedback: List[AnswerFeedback]
    partial: bool


class WordStatistics(BaseModel):
    total_words: int
    learned_words: int
    reviewed_words: int
    new_words: int
    learning_progress: int
    total_correct: int
    total_incorrect: int
    accuracy: float


class CurrentQuestion(BaseModel):
    word_id: str
    word: str
    meaning: Optional[str] = None
    difficulty: Difficulty
    question_number: int
    total_questions: int
    synonym_count: int
    hints_used: int


# --- Transport payloads ---
class SubmitAnswerRequest(BaseModel):
    word_id: str
    answer: List[str]


class HintRequest(BaseModel):
    word_id: str


class SubmitAnswerResponse(BaseModel):
    answer: QuizAnswer
    feedback: AnswerFeedback
    session_status: SessionStatus
    score: int


class HintResponse(BaseModel):
    word_id: str
    hints_used: int
    hint: str
