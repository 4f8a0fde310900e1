"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"


@dataclass(frozen=True)
class Settings:
    # --- Database ---
    database_url: str = os.getenv(
        "VOCAB_QUIZ_DB_URL", f"sqlite+aiosqlite:///{DATA_DIR / 'vocabquiz.db'}"
    )

    # --- HTTP ---
    cors_origin: str = os.getenv("CORS_ORIGIN", "http://localhost:3000")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # --- Quiz session ---
    max_attempts_per_word: int = 3
    max_words_per_session: int = 200

    # --- History ---
    history_default_limit: int = 10
    history_max_limit: int = 100

    # --- Optimistic concurrency ---
    store_update_retries: int = 3  # whole-transition retries on a stale version


settings = Settings()

# Ensure directories exist
DATA_DIR.mkdir(parents=True, exist_ok=True)
