from typing import Optional

from fastapi import APIRouter, Depends, Header

from .config import settings
from .engine import QuizEngine
from .globals import quiz_engine
from .hints import hint_text
from .models import (
    GameSettings,
    HintRequest,
    HintResponse,
    QuizResult,
    QuizSession,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
    WordStatistics,
)

router = APIRouter(prefix="/api")


# --- Dependencies ---
def get_engine() -> QuizEngine:
    return quiz_engine


def get_owner_id(
    owner_id: Optional[str] = Header(None, alias=settings.OWNER_HEADER)
) -> Optional[str]:
    return owner_id


# --- Routes ---
@router.get("/categories")
async def get_categories(engine: QuizEngine = Depends(get_engine)):
    return engine.store.get_categories()


@router.get("/stats", response_model=WordStatistics)
async def get_statistics(engine: QuizEngine = Depends(get_engine)):
    return engine.store.get_statistics()


@router.post("/quiz/start", response_model=QuizSession, status_code=201)
async def start_quiz(
    game_settings: GameSettings,
    owner_id: Optional[str] = Depends(get_owner_id),
    engine: QuizEngine = Depends(get_engine),
):
    return engine.create_session(game_settings, owner_id=owner_id)


@router.get("/quiz/{session_id}", response_model=QuizSession)
async def get_quiz_session(session_id: str, engine: QuizEngine = Depends(get_engine)):
    engine.enforce_time_limit(session_id)
    return engine.get_session(session_id)


@router.get("/quiz/{session_id}/question")
async def get_current_question(session_id: str, engine: QuizEngine = Depends(get_engine)):
    engine.enforce_time_limit(session_id)
    question = engine.get_current_question(session_id)
    if question is None:
        return {"completed": True, "question": None}
    return {"completed": False, "question": question}


@router.post("/quiz/{session_id}/answer", response_model=SubmitAnswerResponse)
async def submit_answer(
    session_id: str,
    payload: SubmitAnswerRequest,
    engine: QuizEngine = Depends(get_engine),
):
    engine.enforce_time_limit(session_id)
    record, feedback = engine.submit_answer(session_id, payload.word_id, payload.answer)
    quiz = engine.get_session(session_id)
    return SubmitAnswerResponse(
        answer=record, feedback=feedback, session_status=quiz.status, score=quiz.score
    )


@router.post("/quiz/{session_id}/hint", response_model=HintResponse)
async def request_hint(
    session_id: str,
    payload: HintRequest,
    engine: QuizEngine = Depends(get_engine),
):
    engine.enforce_time_limit(session_id)
    count = engine.request_hint(session_id, payload.word_id)
    word = engine.store.get_word(payload.word_id)
    return HintResponse(word_id=word.id, hints_used=count, hint=hint_text(word, count))


@router.post("/quiz/{session_id}/complete", response_model=QuizResult)
async def complete_quiz(session_id: str, engine: QuizEngine = Depends(get_engine)):
    engine.complete_session(session_id)
    return engine.get_result(session_id)


@router.get("/quiz/{session_id}/result", response_model=QuizResult)
async def get_quiz_result(session_id: str, engine: QuizEngine = Depends(get_engine)):
    engine.enforce_time_limit(session_id)
    return engine.get_result(session_id)


@router.delete("/quiz/{session_id}")
async def delete_quiz_session(session_id: str, engine: QuizEngine = Depends(get_engine)):
    engine.get_session(session_id)
    engine.delete_session(session_id)
    return {"status": "success"}


@router.post("/quiz/{session_id}/outcomes")
async def flush_outcomes(session_id: str, engine: QuizEngine = Depends(get_engine)):
    written = engine.flush_outcomes(session_id)
    return {"written": written}
