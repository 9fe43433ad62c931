from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote


@dataclass
class Settings:
    app_name: str = os.getenv("APP_NAME", "Job Board")
    environment: str = os.getenv("ENV", "development")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./db/jobboard.db")
    scoring_strategy: str = os.getenv("SCORING_STRATEGY", "lexical").strip().lower()
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    model_timeout_seconds: float = float(os.getenv("MODEL_TIMEOUT_SECONDS", "15"))
    max_concurrent_scoring: int = max(1, int(os.getenv("MAX_CONCURRENT_SCORING", "5")))
    fallback_to_lexical: bool = os.getenv("FALLBACK_TO_LEXICAL", "true").lower() == "true"
    match_batch_limit: int = int(os.getenv("MATCH_BATCH_LIMIT", "100"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_format: str = os.getenv("LOG_FORMAT", "text")
    default_admin_username: str = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")
    default_admin_password: str = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin1234")

    def ensure_directories(self) -> None:
        self._ensure_sqlite_directory()

    def _ensure_sqlite_directory(self) -> None:
        if not self.database_url.startswith("sqlite:///"):
            return
        raw_path = self.database_url.replace("sqlite:///", "", 1)
        if not raw_path or raw_path == ":memory:":
            return
        db_path = Path(unquote(raw_path))
        if not db_path.is_absolute():
            db_path = Path(".") / db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)


settings = Settings()
