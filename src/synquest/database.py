import sqlite3
import os
from typing import Dict, Optional

from .config import settings


def get_db_connection(db_path: Optional[str] = None):
    """Establishes a connection to the SQLite database."""
    if db_path is None:
        db_path = os.path.join(settings.DB_DIR, settings.DB_FILE)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def create_log_table(db_path: Optional[str] = None):
    """Creates the log table if it doesn't exist."""
    conn = get_db_connection(db_path)
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
                level TEXT,
                logger TEXT,
                message TEXT
            );
        """
        )
    conn.close()


def create_word_stats_table(db_path: Optional[str] = None):
    """Creates the per-word outcome counters table if it doesn't exist."""
    conn = get_db_connection(db_path)
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS word_stats (
                word_id TEXT PRIMARY KEY,
                correct_count INTEGER NOT NULL DEFAULT 0,
                incorrect_count INTEGER NOT NULL DEFAULT 0,
                last_reviewed DATETIME
            );
        """
        )
    conn.close()


def load_word_stats(db_path: Optional[str] = None) -> Dict[str, sqlite3.Row]:
    conn = get_db_connection(db_path)
    try:
        rows = conn.execute(
            "SELECT word_id, correct_count, incorrect_count, last_reviewed FROM word_stats"
        ).fetchall()
    finally:
        conn.close()
    return {row["word_id"]: row for row in rows}


def save_word_stats(
    word_id: str,
    correct_count: int,
    incorrect_count: int,
    last_reviewed: str,
    db_path: Optional[str] = None,
):
    """Upserts the counters of one word."""
    conn = get_db_connection(db_path)
    with conn:
        conn.execute(
            """
            INSERT INTO word_stats (word_id, correct_count, incorrect_count, last_reviewed)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(word_id) DO UPDATE SET
                correct_count = excluded.correct_count,
                incorrect_count = excluded.incorrect_count,
                last_reviewed = excluded.last_reviewed
        """,
            (word_id, correct_count, incorrect_count, last_reviewed),
        )
    conn.close()


def init_db(db_path: Optional[str] = None):
    """Initializes the database and creates necessary tables."""
    db_dir = settings.DB_DIR if db_path is None else os.path.dirname(db_path)
    os.makedirs(db_dir or ".", exist_ok=True)
    create_log_table(db_path)
    create_word_stats_table(db_path)
