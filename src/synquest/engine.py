import logging
import random
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from . import session as state
from .config import settings
from .errors import (
    HintsDisabledError,
    SessionCompletedError,
    SessionNotFoundError,
    WordNotFoundError,
)
from .evaluator import evaluate_answer
from .models import (
    AnswerFeedback,
    CurrentQuestion,
    GameSettings,
    QuizAnswer,
    QuizResult,
    QuizSession,
)
from .scoring import answer_points, summarize
from .selection import SelectorFactory
from .vocabulary import WordStore

logger = logging.getLogger(__name__)


class QuizEngine:
    """Runs quiz sessions against a word store.

    Sessions are kept in memory and are not thread-safe: callers must
    serialize requests for the same session id.
    """

    def __init__(
        self,
        store: WordStore,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
        session_timeout: timedelta = timedelta(minutes=settings.SESSION_TIMEOUT_MINUTES),
    ):
        self.store = store
        self.rng = rng or random.Random()
        self.clock = clock
        self.session_timeout = session_timeout
        self.sessions: Dict[str, QuizSession] = {}

    # --- Session lifecycle ---
    def create_session(self, game_settings: GameSettings, owner_id: Optional[str] = None) -> QuizSession:
        pool = self.store.fetch_words_by_settings(game_settings)
        selector = SelectorFactory.create(game_settings.selection, self.rng)
        word_ids = selector.select(pool, game_settings.number_of_questions)

        quiz = state.new_session(game_settings, word_ids, owner_id=owner_id, now=self.clock())
        self.sessions[quiz.id] = quiz
        logger.info(
            f"New session: {quiz.id} [Owner: {owner_id}, Difficulty: {game_settings.difficulty.value}, "
            f"Questions: {quiz.total_questions}, Pool: {len(pool)}]"
        )
        return quiz

    def get_session(self, session_id: str) -> QuizSession:
        quiz = self.sessions.get(session_id)
        if quiz is None:
            raise SessionNotFoundError(session_id)
        if self.clock() - quiz.start_time > self.session_timeout:
            del self.sessions[session_id]
            logger.info(f"Session {session_id} expired")
            raise SessionNotFoundError(session_id)
        return quiz

    def delete_session(self, session_id: str) -> bool:
        return self.sessions.pop(session_id, None) is not None

    def get_current_question(self, session_id: str) -> Optional[CurrentQuestion]:
        quiz = self.get_session(session_id)
        word_id = quiz.current_word_id
        if quiz.is_completed or word_id is None:
            return None
        word = self.store.get_word(word_id)
        return CurrentQuestion(
            word_id=word.id,
            word=word.word,
            meaning=word.meaning,
            difficulty=word.difficulty,
            question_number=quiz.current_index + 1,
            total_questions=quiz.total_questions,
            synonym_count=len(word.synonyms),
            hints_used=state.hints_for(quiz, word_id),
        )

    # --- Gameplay ---
    def submit_answer(
        self, session_id: str, word_id: str, answer: Sequence[str]
    ) -> Tuple[QuizAnswer, AnswerFeedback]:
        quiz = self.get_session(session_id)
        state.ensure_current(quiz, word_id)

        word = self.store.get_word(word_id)
        hints_used = state.hints_for(quiz, word_id)
        record, feedback = evaluate_answer(
            word,
            answer,
            mode=quiz.settings.effective_mode,
            hints_used=hints_used,
            timestamp=self.clock(),
        )
        record = record.model_copy(update={"points": answer_points(record.is_correct, hints_used)})

        finished = state.apply_answer(quiz, record, now=self.clock())
        logger.info(
            f"Session {quiz.id}: question {quiz.current_index}/{quiz.total_questions} "
            f"word={word_id} correct={record.is_correct} points={record.points}"
        )
        if finished:
            self._on_completed(quiz)
        return record, feedback

    def request_hint(self, session_id: str, word_id: str) -> int:
        quiz = self.get_session(session_id)
        if quiz.is_completed:
            raise SessionCompletedError(quiz.id)
        if not quiz.settings.hints_enabled:
            raise HintsDisabledError(quiz.id)
        count = state.add_hint(quiz, word_id)
        logger.info(f"Session {quiz.id}: hint {count} for word={word_id}")
        return count

    def complete_session(self, session_id: str) -> QuizSession:
        quiz = self.get_session(session_id)
        state.complete(quiz, now=self.clock())
        logger.info(f"Session {quiz.id} completed early at {quiz.current_index}/{quiz.total_questions}")
        self._on_completed(quiz)
        return quiz

    def enforce_time_limit(self, session_id: str) -> bool:
        """Completes the session when its time limit has run out."""
        quiz = self.get_session(session_id)
        limit = quiz.settings.time_limit
        if limit is None or quiz.is_completed:
            return False
        if (self.clock() - quiz.start_time).total_seconds() < limit:
            return False
        logger.info(f"Session {quiz.id} ran out of time ({limit}s)")
        self.complete_session(session_id)
        return True

    def get_result(self, session_id: str) -> QuizResult:
        quiz = self.get_session(session_id)
        if quiz.is_completed and not quiz.outcomes_recorded:
            self._on_completed(quiz)
        return summarize(quiz, now=self.clock(), word_texts=self._word_texts(quiz.words))

    def _word_texts(self, word_ids: List[str]) -> Dict[str, str]:
        texts = {}
        for word_id in word_ids:
            try:
                texts[word_id] = self.store.get_word(word_id).word
            except WordNotFoundError:
                continue
        return texts

    def flush_outcomes(self, session_id: str) -> int:
        """Writes the outcomes still pending for a completed session.

        Store errors propagate to the caller; outcomes already written are
        never written twice, so the call can be retried.
        """
        quiz = self.get_session(session_id)
        return self._write_outcomes(quiz)

    def _write_outcomes(self, quiz: QuizSession) -> int:
        if not quiz.is_completed or quiz.outcomes_recorded:
            return 0
        pending = quiz.answers[quiz.outcomes_written:]
        for answer in pending:
            self.store.record_outcome(answer.word_id, answer.is_correct)
            quiz.outcomes_written += 1
        quiz.outcomes_recorded = True
        logger.info(f"Session {quiz.id}: recorded {quiz.outcomes_written} outcomes, score={quiz.score}")
        return len(pending)

    def _on_completed(self, quiz: QuizSession) -> None:
        # The answer is already applied; a failed write stays pending for a retry.
        try:
            self._write_outcomes(quiz)
        except Exception as e:
            logger.error(
                f"Session {quiz.id}: outcome write failed after "
                f"{quiz.outcomes_written}/{len(quiz.answers)}, left pending: {e}"
            )
