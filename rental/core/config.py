import os
from dotenv import load_dotenv
from pydantic import BaseModel

# Load variables from .env
load_dotenv()


class Settings(BaseModel):
    project_name: str = "Wypożyczalnia sprzętu"
    database_url: str = "sqlite:///./rental.db"
    host: str = "0.0.0.0"
    port: int = 8000

    # Telegram bot is optional: without a token only the web calendar runs
    telegram_bot_token: str = ""

    # Calendar behaviour
    booking_window_days: int = 180
    calendar_allow_single_day: bool = False
    calendar_session_cookie: str = "rental_calendar"
    calendar_idle_timeout_seconds: int = 1800  # Idle calendars are closed after this
    calendar_max_sessions: int = 1000  # Least recently used calendar is closed above this

    # Logging settings
    log_format: str = "console"  # Options: "console", "json"
    log_slow_request_threshold_ms: int = 500  # Log timing only if duration > threshold


settings = Settings(
    project_name=os.environ.get("PROJECT_NAME", "Wypożyczalnia sprzętu"),
    database_url=os.environ.get("DATABASE_URL", "sqlite:///./rental.db"),
    host=os.environ.get("HOST", "0.0.0.0"),
    port=int(os.environ.get("PORT", "8000")),
    telegram_bot_token=os.environ.get("TELEGRAM_BOT_TOKEN", ""),
    booking_window_days=int(os.environ.get("BOOKING_WINDOW_DAYS", "180")),
    calendar_allow_single_day=os.environ.get(
        "CALENDAR_ALLOW_SINGLE_DAY", "false"
    ).lower()
    == "true",
    calendar_session_cookie=os.environ.get(
        "CALENDAR_SESSION_COOKIE", "rental_calendar"
    ),
    calendar_idle_timeout_seconds=int(
        os.environ.get("CALENDAR_IDLE_TIMEOUT_SECONDS", "1800")
    ),
    calendar_max_sessions=int(os.environ.get("CALENDAR_MAX_SESSIONS", "1000")),
    log_format=os.environ.get("LOG_FORMAT", "console"),
    log_slow_request_threshold_ms=int(
        os.environ.get("LOG_SLOW_REQUEST_THRESHOLD_MS", "500")
    ),
)
