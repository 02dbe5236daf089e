import random
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from synquest.config import settings
from synquest.engine import QuizEngine
from synquest.models import Difficulty, Word
from synquest.vocabulary import VocabularyManager


class FakeClock:
    def __init__(self, start=datetime(2024, 5, 1, 9, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


def make_word(word_id, text, synonyms, difficulty=Difficulty.EASY, category="feelings"):
    return Word(id=word_id, word=text, synonyms=synonyms, difficulty=difficulty, category=category)


SAMPLE_WORDS = [
    ("w1", "cheerful", ["happy", "joyful", "glad"], Difficulty.EASY, "feelings"),
    ("w2", "big", ["large", "huge"], Difficulty.EASY, "size"),
    ("w3", "angry", ["furious", "irate", "mad"], Difficulty.MEDIUM, "feelings"),
    ("w4", "brave", ["courageous", "bold"], Difficulty.MEDIUM, "character"),
    ("w5", "ephemeral", ["fleeting", "transient"], Difficulty.HARD, "time"),
    ("w6", "tiny", ["small", "minute", "little"], Difficulty.EASY, "size"),
]


@pytest.fixture()
def words():
    return [make_word(*row) for row in SAMPLE_WORDS]


@pytest.fixture()
def store(words):
    manager = VocabularyManager("unused")
    manager.add_words(words)
    return manager


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def engine(store, clock):
    return QuizEngine(store, rng=random.Random(7), clock=clock)


@pytest.fixture()
def client(engine, tmp_path, monkeypatch):
    from synquest.app import create_app
    from synquest.globals import vocab_manager
    from synquest.router import get_engine

    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path / "log"))
    monkeypatch.setattr(vocab_manager, "directory", str(tmp_path / "vocabulary"))
    monkeypatch.setattr(vocab_manager, "stats_db", str(tmp_path / "db" / "synquest.db"))

    app = create_app()
    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def live_client(tmp_path, monkeypatch):
    """The app as shipped, started from an empty working directory."""
    from synquest.app import create_app
    from synquest.globals import quiz_engine

    monkeypatch.chdir(tmp_path)
    quiz_engine.sessions.clear()
    with TestClient(create_app()) as test_client:
        yield test_client
    quiz_engine.sessions.clear()


def answer_current(engine, session_id, correct=True, hints=0):
    """Answers whatever question the session is on."""
    quiz = engine.get_session(session_id)
    word_id = quiz.current_word_id or quiz.words[-1]
    for _ in range(hints):
        engine.request_hint(session_id, word_id)
    word = engine.store.get_word(word_id)
    answer = [word.synonyms[0]] if correct else ["definitely-wrong"]
    return engine.submit_answer(session_id, word_id, answer)
