"""Scoring, streaks and achievements.

Everything here is a pure function of a session's answer history, so a
``QuizResult`` can be recomputed at any time and always comes out the same.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .config import settings
from .evaluator import build_feedback
from .models import Achievement, QuizAnswer, QuizResult, QuizSession


def answer_points(is_correct: bool, hints_used: int = 0) -> int:
    """Points awarded for one answer.

    Each hint takes a fixed fraction off the base value; the award never
    drops below ``MIN_CORRECT_POINTS`` and incorrect answers earn nothing.
    """
    if not is_correct:
        return 0
    factor = max(0.0, 1.0 - settings.HINT_PENALTY_FRACTION * max(0, hints_used))
    return max(settings.MIN_CORRECT_POINTS, 0, round(settings.BASE_POINTS * factor))


def longest_streak(answers: Sequence[QuizAnswer]) -> int:
    best = run = 0
    for answer in answers:
        run = run + 1 if answer.is_correct else 0
        best = max(best, run)
    return best


def current_streak(answers: Sequence[QuizAnswer]) -> int:
    run = 0
    for answer in reversed(answers):
        if not answer.is_correct:
            break
        run += 1
    return run


def unlock_achievements(
    completed: bool,
    total_questions: int,
    answered: int,
    correct_answers: int,
    hints_used: int,
    streak: int,
    accuracy: float,
    time_spent: float,
) -> List[Achievement]:
    unlocked = set()
    all_answered = answered == total_questions and total_questions > 0

    if streak >= settings.HOT_STREAK_THRESHOLD:
        unlocked.add(Achievement.HOT_STREAK)

    if completed:
        if all_answered and correct_answers == total_questions and hints_used == 0:
            unlocked.add(Achievement.PERFECT_RUN)
        if accuracy >= settings.SHARPSHOOTER_ACCURACY:
            unlocked.add(Achievement.SHARPSHOOTER)
        if correct_answers > 0 and hints_used == 0:
            unlocked.add(Achievement.SELF_RELIANT)
        if (
            all_answered
            and accuracy >= settings.SHARPSHOOTER_ACCURACY
            and time_spent / total_questions <= settings.SPEED_DEMON_SECONDS
        ):
            unlocked.add(Achievement.SPEED_DEMON)

    return sorted(unlocked, key=lambda a: a.value)


def summarize(
    session: QuizSession,
    now: Optional[datetime] = None,
    word_texts: Optional[Dict[str, str]] = None,
) -> QuizResult:
    """Reduces a session's answers into a ``QuizResult``.

    A session that is not completed yet is summarized against ``now`` and
    the result is marked partial.
    """
    answers = session.answers
    word_texts = word_texts or {}
    total = session.total_questions
    correct = sum(1 for a in answers if a.is_correct)
    hints_used = sum(a.hints_used for a in answers)
    accuracy = round(correct / total * 100, 2) if total else 0.0
    streak = longest_streak(answers)

    partial = session.end_time is None
    end = session.end_time if not partial else (now or datetime.now())
    time_spent = max(0.0, (end - session.start_time).total_seconds())

    mode = session.settings.effective_mode
    feedback = [build_feedback(a, mode, word_texts.get(a.word_id)) for a in answers]

    return QuizResult(
        session_id=session.id,
        score=sum(a.points for a in answers),
        total_questions=total,
        correct_answers=correct,
        incorrect_answers=len(answers) - correct,
        unanswered=total - len(answers),
        accuracy=accuracy,
        streak=streak,
        current_streak=current_streak(answers),
        time_spent=time_spent,
        achievements=unlock_achievements(
            completed=not partial,
            total_questions=total,
            answered=len(answers),
            correct_answers=correct,
            hints_used=hints_used,
            streak=streak,
            accuracy=accuracy,
            time_spent=time_spent,
        ),
        hints_used=hints_used,
        feedback=feedback,
        partial=partial,
    )
