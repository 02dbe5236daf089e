from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from .matcher import MatchReport, match_synonyms
from .models import (
    AnswerFeedback,
    AnswerMode,
    FeedbackStatus,
    QuizAnswer,
    SynonymFeedback,
    Word,
)


def clean_answer(answer: Sequence[str]) -> List[str]:
    """Drops blank items; an empty result means no answer was given."""
    return [item for item in answer if item and item.strip()]


def is_answer_correct(report: MatchReport, canonical_size: int, mode: AnswerMode) -> bool:
    if not report.items or not report.all_items_correct:
        return False
    required = canonical_size if mode == AnswerMode.EXACT else 1
    return len(report.matched) >= required


def explain(report: MatchReport, is_correct: bool, mode: AnswerMode, word: str) -> str:
    matched = report.matched
    wrong = [m.submitted.strip() for m in report.items if m.status == FeedbackStatus.INCORRECT]
    repeated = [m.submitted.strip() for m in report.items if m.status == FeedbackStatus.DUPLICATE]

    if not report.items:
        return f"No answer given. Synonyms of '{word}': {', '.join(report.missing)}."

    parts = []
    if is_correct:
        parts.append(f"Correct! {len(matched)} synonym(s) of '{word}' matched: {', '.join(matched)}.")
    elif matched:
        parts.append(f"Not quite. You matched {', '.join(matched)}.")
    else:
        parts.append(f"Incorrect. None of your answers are synonyms of '{word}'.")
    if wrong:
        parts.append(f"Not accepted: {', '.join(wrong)}.")
    if repeated:
        parts.append(f"Repeated: {', '.join(repeated)}.")
    if report.missing and (mode == AnswerMode.EXACT or not is_correct):
        parts.append(f"Missed: {', '.join(report.missing)}.")
    elif report.missing:
        parts.append(f"Other synonyms: {', '.join(report.missing)}.")
    return " ".join(parts)


def _feedback(
    word_id: str,
    word_text: str,
    canonical: List[str],
    user_answer: List[str],
    report: MatchReport,
    is_correct: bool,
    mode: AnswerMode,
) -> AnswerFeedback:
    items = [
        SynonymFeedback(
            synonym=m.submitted.strip(), status=m.status, user_provided=True
        )
        for m in report.items
    ]
    items.extend(
        SynonymFeedback(synonym=s, status=FeedbackStatus.MISSING, user_provided=False)
        for s in report.missing
    )
    return AnswerFeedback(
        word_id=word_id,
        is_correct=is_correct,
        correct_answers=list(canonical),
        user_answer=list(user_answer),
        matched=report.matched,
        missed=list(report.missing),
        items=items,
        explanation=explain(report, is_correct, mode, word_text),
    )


def evaluate_answer(
    word: Word,
    answer: Sequence[str],
    mode: Optional[AnswerMode] = None,
    hints_used: int = 0,
    timestamp: Optional[datetime] = None,
) -> Tuple[QuizAnswer, AnswerFeedback]:
    """Evaluates one submitted answer against a word's canonical synonyms.

    An answer is correct only when every submitted item hits a distinct
    synonym and enough synonyms were matched: all of them in exact mode,
    at least one in partial mode (the default).
    """
    mode = mode or AnswerMode.PARTIAL
    canonical = list(word.synonyms)
    report = match_synonyms(canonical, clean_answer(answer))
    is_correct = is_answer_correct(report, len(canonical), mode)

    record = QuizAnswer(
        word_id=word.id,
        user_answer=list(answer),
        correct_synonyms=canonical,
        is_correct=is_correct,
        timestamp=timestamp or datetime.now(),
        hints_used=hints_used,
    )
    feedback = _feedback(word.id, word.word, canonical, list(answer), report, is_correct, mode)
    return record, feedback


def build_feedback(
    answer: QuizAnswer, mode: Optional[AnswerMode] = None, word_text: Optional[str] = None
) -> AnswerFeedback:
    """Rebuilds the feedback of a stored answer from its own snapshot."""
    mode = mode or AnswerMode.PARTIAL
    report = match_synonyms(answer.correct_synonyms, clean_answer(answer.user_answer))
    return _feedback(
        answer.word_id,
        word_text or answer.word_id,
        answer.correct_synonyms,
        answer.user_answer,
        report,
        answer.is_correct,
        mode,
    )
