import os
import logging
from pydantic import BaseModel, Field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

class DashboardSettings(BaseModel):
    # Fetch limits
    pending_list_limit: int = 20
    recent_window: int = 10
    employee_leave_limit: int = 5
    attendance_window: int = 7
    project_limit: int = 10
    upcoming_cycle_limit: int = 3

    # Derivation constants
    activity_feed_size: int = 15
    ranking_size: int = 5
    attention_threshold: float = 75
    significant_gap_threshold: float = 60
    sla_weight_scale: int = 120
    max_competency_score: int = 5
    default_reviewer_count: int = Field(default=int(os.getenv("DEFAULT_REVIEWER_COUNT", "5")))

class Config(BaseModel):
    app_name: str = "HR Dashboard Analytics"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./database.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Reporting period; derived from the reporting day when unset
    current_period: Optional[str] = os.getenv("DASHBOARD_PERIOD") or None
    fetch_max_workers: int = int(os.getenv("FETCH_MAX_WORKERS", "8"))
    dashboard: DashboardSettings = DashboardSettings()

    version: str = "1.0.0"
    build_id: str = os.getenv("BUILD_ID", "local")
    request_id_header: str = "X-Request-ID"

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif "dev-only" in settings.secret_key:
    _logger.warning("⚠ Using insecure default SECRET_KEY: only acceptable in development.")
