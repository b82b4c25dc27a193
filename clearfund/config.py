"""
Application configuration. Loads from environment variables.
Secrets and sensitive config must never be hardcoded.
"""

import os

from dotenv import load_dotenv

load_dotenv()
from functools import lru_cache


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Return cached settings instance."""
    return Settings()


class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "ClearFund"
    debug: bool = False

    # Database (postgresql+psycopg for psycopg3; sqlite:/// accepted for local runs and tests)
    database_url: str = "postgresql+psycopg://localhost:5432/clearfund_dev"
    db_connect_timeout: int = 10  # seconds

    # Security
    internal_job_token: str = ""  # Required for /internal/* and admin transparency endpoints

    # Transparency score engine
    # Attempts per score mutation before a version conflict surfaces to the caller.
    score_update_max_retries: int = 3
    # Days after campaign completion within which spending evidence must be submitted.
    evidence_deadline_days_default: int = 15
    leaderboard_page_size: int = 10

    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", self.app_name)
        self.debug = os.getenv("DEBUG", "false").lower() == "true"

        default_user = os.getenv("PGUSER") or os.getenv("USER") or "postgres"
        default_url = (
            f"postgresql+psycopg://{default_user}:"
            f"{os.getenv('PGPASSWORD', '')}@"
            f"{os.getenv('PGHOST', 'localhost')}:"
            f"{os.getenv('PGPORT', '5432')}/"
            f"{os.getenv('PGDATABASE', 'clearfund_dev')}"
        )
        raw_url = os.getenv("DATABASE_URL", default_url)
        # Ensure psycopg3 driver if URL uses generic postgresql://
        if raw_url.startswith("postgresql://") and not raw_url.startswith("postgresql+psycopg"):
            raw_url = raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
        self.database_url = raw_url
        self.db_connect_timeout = int(os.getenv("DB_CONNECT_TIMEOUT", str(self.db_connect_timeout)))

        self.internal_job_token = os.getenv("INTERNAL_JOB_TOKEN", "")

        self.score_update_max_retries = max(
            1,
            int(os.getenv("SCORE_UPDATE_MAX_RETRIES", str(self.score_update_max_retries))),
        )
        self.evidence_deadline_days_default = int(
            os.getenv(
                "EVIDENCE_DEADLINE_DAYS_DEFAULT",
                str(self.evidence_deadline_days_default),
            )
        )
        self.leaderboard_page_size = int(
            os.getenv("LEADERBOARD_PAGE_SIZE", str(self.leaderboard_page_size))
        )
