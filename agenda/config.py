import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./agenda.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Span assumed for an appointment without an end time (conflict checks only, never stored)
DEFAULT_DURATION_MINUTES = int(os.getenv("DEFAULT_DURATION_MINUTES", "30"))

# Time of day used when an appointment is entered with a date but no time
DEFAULT_TIME_OF_DAY = os.getenv("DEFAULT_TIME_OF_DAY", "12:00")

# Number of appointments revealed per "show more" step
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "100"))

# Reminder offset (minutes before start) used when an appointment has none of its own.
# Unset disables the fallback.
_default_reminder = os.getenv("DEFAULT_REMINDER_MINUTES")
DEFAULT_REMINDER_MINUTES = int(_default_reminder) if _default_reminder else None

# CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000"
).split(",")
