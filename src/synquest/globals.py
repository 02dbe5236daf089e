import os

from .config import settings
from .engine import QuizEngine
from .vocabulary import VocabularyManager

vocab_manager = VocabularyManager(
    settings.VOCAB_DIR, stats_db=os.path.join(settings.DB_DIR, settings.DB_FILE)
)
quiz_engine = QuizEngine(vocab_manager)
