"""Session state machine: created -> in_progress -> completed.

Transitions check every precondition before touching the session, so a
rejected call never leaves a partial update behind.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from .errors import OutOfOrderError, SessionCompletedError
from .models import GameSettings, QuizAnswer, QuizSession, SessionStatus


def new_session(
    settings: GameSettings,
    word_ids: List[str],
    owner_id: Optional[str] = None,
    now: Optional[datetime] = None,
    session_id: Optional[str] = None,
) -> QuizSession:
    return QuizSession(
        id=session_id or str(uuid.uuid4()),
        owner_id=owner_id,
        settings=settings,
        words=list(word_ids),
        start_time=now or datetime.now(),
    )


def ensure_current(session: QuizSession, word_id: str) -> None:
    """Raises unless ``word_id`` is the question the session is waiting on."""
    if session.is_completed or session.current_index >= session.total_questions:
        raise SessionCompletedError(session.id)
    expected = session.words[session.current_index]
    if word_id != expected:
        raise OutOfOrderError(expected, word_id)


def start(session: QuizSession) -> None:
    if session.status == SessionStatus.CREATED:
        session.status = SessionStatus.IN_PROGRESS


def apply_answer(session: QuizSession, answer: QuizAnswer, now: Optional[datetime] = None) -> bool:
    """Appends an evaluated answer and advances the session.

    Returns True when this answer completed the session.
    """
    ensure_current(session, answer.word_id)

    start(session)
    session.answers.append(answer)
    session.score += answer.points
    session.current_index += 1

    if session.current_index == session.total_questions:
        _finish(session, now)
        return True
    return False


def add_hint(session: QuizSession, word_id: str) -> int:
    ensure_current(session, word_id)
    start(session)
    count = session.hints.get(word_id, 0) + 1
    session.hints[word_id] = count
    return count


def hints_for(session: QuizSession, word_id: str) -> int:
    return session.hints.get(word_id, 0)


def complete(session: QuizSession, now: Optional[datetime] = None) -> None:
    """Forced completion, used when a time limit runs out or the player gives up."""
    if session.is_completed:
        raise SessionCompletedError(session.id)
    _finish(session, now)


def _finish(session: QuizSession, now: Optional[datetime]) -> None:
    session.status = SessionStatus.COMPLETED
    if session.end_time is None:
        session.end_time = now or datetime.now()
