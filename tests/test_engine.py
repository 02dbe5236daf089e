import random

import pytest

from conftest import answer_current
from synquest.engine import QuizEngine
from synquest.errors import (
    HintsDisabledError,
    InsufficientWordsError,
    OutOfOrderError,
    SessionCompletedError,
    SessionNotFoundError,
)
from synquest.models import AnswerMode, DifficultyFilter, GameSettings, SessionStatus


def snapshot(quiz):
    return (list(quiz.answers), quiz.current_index, quiz.score, dict(quiz.hints), quiz.status)


def test_create_session_selects_distinct_words(engine):
    quiz = engine.create_session(GameSettings(number_of_questions=4), owner_id="user-1")
    assert quiz.status == SessionStatus.CREATED
    assert quiz.owner_id == "user-1"
    assert quiz.total_questions == 4
    assert len(set(quiz.words)) == 4
    assert quiz.current_index == 0
    assert quiz.answers == []


def test_create_session_is_reproducible_with_seeded_rng(store, clock):
    first = QuizEngine(store, rng=random.Random(3), clock=clock)
    second = QuizEngine(store, rng=random.Random(3), clock=clock)
    game = GameSettings(number_of_questions=3)
    assert first.create_session(game).words == second.create_session(game).words


def test_create_session_filters_by_difficulty_and_category(engine):
    quiz = engine.create_session(
        GameSettings(difficulty=DifficultyFilter.EASY, number_of_questions=2, categories=["Size"])
    )
    assert sorted(quiz.words) == ["w2", "w6"]


def test_insufficient_words(engine):
    # only three easy words exist
    game = GameSettings(difficulty=DifficultyFilter.EASY, number_of_questions=5)
    with pytest.raises(InsufficientWordsError) as exc:
        engine.create_session(game)
    assert exc.value.requested == 5
    assert exc.value.available == 3
    assert engine.sessions == {}


def test_submit_advances_and_completes(engine, clock):
    quiz = engine.create_session(GameSettings(number_of_questions=3))
    answer_current(engine, quiz.id)
    assert quiz.status == SessionStatus.IN_PROGRESS
    assert quiz.current_index == len(quiz.answers) == 1

    clock.advance(30)
    answer_current(engine, quiz.id, correct=False)
    answer_current(engine, quiz.id)
    assert quiz.status == SessionStatus.COMPLETED
    assert quiz.current_index == len(quiz.answers) == 3
    assert quiz.end_time == clock.now
    assert quiz.score == sum(a.points for a in quiz.answers) == 20


def test_submit_on_completed_session_is_rejected(engine):
    quiz = engine.create_session(GameSettings(number_of_questions=2))
    answer_current(engine, quiz.id)
    answer_current(engine, quiz.id)
    before = snapshot(quiz)
    end_time = quiz.end_time

    with pytest.raises(SessionCompletedError):
        engine.submit_answer(quiz.id, quiz.words[-1], ["anything"])
    assert snapshot(quiz) == before
    assert quiz.end_time == end_time


def test_out_of_order_answer_is_rejected(engine):
    quiz = engine.create_session(GameSettings(number_of_questions=3))
    before = snapshot(quiz)
    with pytest.raises(OutOfOrderError) as exc:
        engine.submit_answer(quiz.id, quiz.words[1], ["large"])
    assert exc.value.expected == quiz.words[0]
    assert snapshot(quiz) == before
    assert len(quiz.answers) == quiz.current_index


def test_answered_question_cannot_be_revisited(engine):
    quiz = engine.create_session(GameSettings(number_of_questions=3))
    first = quiz.words[0]
    answer_current(engine, quiz.id)
    with pytest.raises(OutOfOrderError):
        engine.submit_answer(quiz.id, first, ["again"])
    assert len(quiz.answers) == quiz.current_index == 1


def test_exact_mode_session(engine):
    quiz = engine.create_session(
        GameSettings(number_of_questions=1, answer_mode=AnswerMode.EXACT, categories=["time"])
    )
    record, feedback = engine.submit_answer(quiz.id, "w5", ["fleeting"])
    assert record.is_correct is False
    assert feedback.missed == ["transient"]
    assert quiz.score == 0


def test_hints_are_embedded_and_penalized(engine):
    quiz = engine.create_session(GameSettings(number_of_questions=2))
    clean, _ = answer_current(engine, quiz.id)
    hinted, _ = answer_current(engine, quiz.id, hints=2)
    assert clean.hints_used == 0
    assert hinted.hints_used == 2
    assert 0 <= hinted.points < clean.points
    assert quiz.score == clean.points + hinted.points


def test_hint_counter_increments(engine):
    quiz = engine.create_session(GameSettings(number_of_questions=2))
    word_id = quiz.words[0]
    assert engine.request_hint(quiz.id, word_id) == 1
    assert engine.request_hint(quiz.id, word_id) == 2
    assert quiz.status == SessionStatus.IN_PROGRESS
    assert engine.get_current_question(quiz.id).hints_used == 2


def test_hint_for_other_question_is_rejected(engine):
    quiz = engine.create_session(GameSettings(number_of_questions=2))
    with pytest.raises(OutOfOrderError):
        engine.request_hint(quiz.id, quiz.words[1])
    assert quiz.hints == {}


def test_hints_disabled(engine):
    quiz = engine.create_session(GameSettings(number_of_questions=2, hints_enabled=False))
    with pytest.raises(HintsDisabledError):
        engine.request_hint(quiz.id, quiz.words[0])
    assert quiz.hints == {}
    assert quiz.status == SessionStatus.CREATED


def test_hint_on_completed_session(engine):
    quiz = engine.create_session(GameSettings(number_of_questions=1))
    answer_current(engine, quiz.id)
    with pytest.raises(SessionCompletedError):
        engine.request_hint(quiz.id, quiz.words[0])


def test_outcomes_recorded_once_on_completion(engine, store):
    quiz = engine.create_session(GameSettings(number_of_questions=2))
    first, second = quiz.words
    answer_current(engine, quiz.id)
    assert store.get_word(first).correct_count == 0

    answer_current(engine, quiz.id, correct=False)
    assert store.get_word(first).correct_count == 1
    assert store.get_word(second).incorrect_count == 1
    assert store.get_word(second).last_reviewed is not None

    engine.get_result(quiz.id)
    assert store.get_word(first).correct_count == 1


def test_abandoned_session_writes_nothing(engine, store):
    quiz = engine.create_session(GameSettings(number_of_questions=3))
    answer_current(engine, quiz.id)
    assert all(w.correct_count == 0 and w.incorrect_count == 0 for w in store.words.values())


def test_forced_completion(engine, clock, store):
    quiz = engine.create_session(GameSettings(number_of_questions=3))
    answer_current(engine, quiz.id)
    clock.advance(12)
    engine.complete_session(quiz.id)
    assert quiz.status == SessionStatus.COMPLETED
    assert quiz.end_time == clock.now
    assert len(quiz.answers) == quiz.current_index == 1
    assert store.get_word(quiz.words[0]).correct_count == 1

    with pytest.raises(SessionCompletedError):
        engine.complete_session(quiz.id)
    with pytest.raises(SessionCompletedError):
        engine.submit_answer(quiz.id, quiz.words[1], ["x"])

    result = engine.get_result(quiz.id)
    assert result.partial is False
    assert result.unanswered == 2


def test_time_limit_is_enforced_on_request(engine, clock):
    quiz = engine.create_session(GameSettings(number_of_questions=3, time_limit=60))
    assert engine.enforce_time_limit(quiz.id) is False
    clock.advance(61)
    assert engine.enforce_time_limit(quiz.id) is True
    assert quiz.is_completed
    assert engine.enforce_time_limit(quiz.id) is False


def test_result_is_partial_until_complete(engine, clock):
    quiz = engine.create_session(GameSettings(number_of_questions=2))
    answer_current(engine, quiz.id)
    clock.advance(15)
    result = engine.get_result(quiz.id)
    assert result.partial is True
    assert result.time_spent == 15
    assert engine.get_result(quiz.id) == result


def test_result_feedback_uses_word_text(engine):
    quiz = engine.create_session(GameSettings(number_of_questions=1, categories=["character"]))
    engine.submit_answer(quiz.id, "w4", ["bold"])
    result = engine.get_result(quiz.id)
    assert "brave" in result.feedback[0].explanation


def test_current_question_hides_synonyms(engine):
    quiz = engine.create_session(GameSettings(number_of_questions=2))
    question = engine.get_current_question(quiz.id)
    assert question.word_id == quiz.words[0]
    assert question.question_number == 1
    assert question.total_questions == 2
    assert "synonyms" not in question.model_dump()

    answer_current(engine, quiz.id)
    answer_current(engine, quiz.id)
    assert engine.get_current_question(quiz.id) is None


def test_unknown_and_expired_sessions(engine, clock):
    with pytest.raises(SessionNotFoundError):
        engine.get_session("missing")

    quiz = engine.create_session(GameSettings(number_of_questions=1))
    clock.advance(engine.session_timeout.total_seconds() + 1)
    with pytest.raises(SessionNotFoundError):
        engine.get_session(quiz.id)
    assert quiz.id not in engine.sessions


def test_delete_session(engine):
    quiz = engine.create_session(GameSettings(number_of_questions=1))
    assert engine.delete_session(quiz.id) is True
    assert engine.delete_session(quiz.id) is False


def test_invariant_holds_through_mixed_calls(engine):
    quiz = engine.create_session(GameSettings(number_of_questions=4))
    calls = [
        lambda: answer_current(engine, quiz.id),
        lambda: engine.submit_answer(quiz.id, "nope", ["x"]),
        lambda: engine.request_hint(quiz.id, quiz.current_word_id),
        lambda: answer_current(engine, quiz.id, correct=False),
        lambda: answer_current(engine, quiz.id),
        lambda: answer_current(engine, quiz.id),
        lambda: answer_current(engine, quiz.id),
    ]
    for call in calls:
        try:
            call()
        except (OutOfOrderError, SessionCompletedError):
            pass
        assert len(quiz.answers) == quiz.current_index
        assert quiz.score == sum(a.points for a in quiz.answers)


class FlakyStore:
    """Wraps a store and fails the first ``failures`` outcome writes."""

    def __init__(self, store, failures):
        self.store = store
        self.failures = failures
        self.written = []

    def __getattr__(self, name):
        return getattr(self.store, name)

    def record_outcome(self, word_id, is_correct):
        if self.failures:
            self.failures -= 1
            raise OSError("disk full")
        self.written.append(word_id)
        self.store.record_outcome(word_id, is_correct)


def test_failed_outcome_write_stays_pending(store, clock):
    flaky = FlakyStore(store, failures=1)
    engine = QuizEngine(flaky, rng=random.Random(7), clock=clock)
    quiz = engine.create_session(GameSettings(number_of_questions=1))

    record, feedback = answer_current(engine, quiz.id)
    assert record.is_correct and feedback.is_correct
    assert quiz.status == SessionStatus.COMPLETED
    assert len(quiz.answers) == quiz.current_index == 1
    assert quiz.outcomes_recorded is False
    assert quiz.outcomes_written == 0

    assert engine.flush_outcomes(quiz.id) == 1
    assert quiz.outcomes_recorded is True
    assert flaky.written == quiz.words
    assert engine.flush_outcomes(quiz.id) == 0
    assert store.get_word(quiz.words[0]).correct_count == 1


def test_outcome_retry_skips_words_already_written(store, clock):
    flaky = FlakyStore(store, failures=0)
    engine = QuizEngine(flaky, rng=random.Random(7), clock=clock)
    quiz = engine.create_session(GameSettings(number_of_questions=3))
    answer_current(engine, quiz.id)
    answer_current(engine, quiz.id)

    working = flaky.record_outcome
    calls = []

    def fail_on_second(word_id, is_correct):
        calls.append(word_id)
        if len(calls) == 2:
            raise OSError("locked")
        working(word_id, is_correct)

    flaky.record_outcome = fail_on_second
    answer_current(engine, quiz.id)
    assert quiz.outcomes_written == 1
    assert quiz.outcomes_recorded is False

    flaky.record_outcome = working
    engine.get_result(quiz.id)
    assert quiz.outcomes_recorded is True
    assert flaky.written == quiz.words
    assert all(store.get_word(w).correct_count == 1 for w in quiz.words)


def test_flush_propagates_store_errors(store, clock):
    flaky = FlakyStore(store, failures=2)
    engine = QuizEngine(flaky, rng=random.Random(7), clock=clock)
    quiz = engine.create_session(GameSettings(number_of_questions=1))
    answer_current(engine, quiz.id)
    with pytest.raises(OSError):
        engine.flush_outcomes(quiz.id)
    assert quiz.outcomes_recorded is False
    assert engine.flush_outcomes(quiz.id) == 1


def test_flush_before_completion_writes_nothing(engine, store):
    quiz = engine.create_session(GameSettings(number_of_questions=2))
    answer_current(engine, quiz.id)
    assert engine.flush_outcomes(quiz.id) == 0
    assert all(w.correct_count == 0 for w in store.words.values())
