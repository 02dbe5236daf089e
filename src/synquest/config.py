import os


class Settings:
    PROJECT_NAME: str = "synquest"
    DEBUG: bool = os.environ.get("DEBUG", "0") == "1"
    LOG_DIR: str = os.environ.get("LOG_DIR", "log")
    LOG_FILE: str = "synquest.log"
    LOG_TO_DB: bool = os.environ.get("LOG_TO_DB", "0") == "1"
    DB_DIR: str = os.environ.get("DB_DIR", "db")
    DB_FILE: str = "synquest.db"
    VOCAB_DIR: str = os.environ.get("VOCAB_DIR", "vocabulary")
    SYNONYM_SEPARATOR: str = ";"
    DEFAULT_QUESTIONS: int = 10
    MAX_QUESTIONS: int = 50
    SESSION_TIMEOUT_MINUTES: int = int(os.environ.get("SESSION_TIMEOUT_MINUTES", "120"))
    OWNER_HEADER: str = "X-User-Id"
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")

    # Scoring
    BASE_POINTS: int = 10
    HINT_PENALTY_FRACTION: float = 0.2
    MIN_CORRECT_POINTS: int = 0

    # Achievement thresholds
    HOT_STREAK_THRESHOLD: int = 5
    SHARPSHOOTER_ACCURACY: float = 90.0
    SPEED_DEMON_SECONDS: float = 10.0


settings = Settings()
