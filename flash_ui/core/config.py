# centralized configuration loader
# runs load_dotenv() to read .env.local / .env
# provider credentials are looked up at call time so a missing key is reported per request

import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv(".env.local")
load_dotenv()


def _bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "y"}


# Models
DEFAULT_MODEL = os.getenv("DEFAULT_MODEL", "gemini-3-flash-preview")

# Generation caps
MAX_TOKENS = int(os.getenv("MAX_TOKENS", "8192"))
TEMPERATURE = float(os.getenv("TEMPERATURE", "1.0"))
VARIATION_TEMPERATURE = float(os.getenv("VARIATION_TEMPERATURE", "1.2"))

# Timeouts (seconds)
STREAM_TIMEOUT_S = float(os.getenv("STREAM_TIMEOUT_S", "60"))
REQUEST_TIMEOUT_S = float(os.getenv("REQUEST_TIMEOUT_S", "120"))

# Client / orchestrator
API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:3001")
SLOT_COUNT = int(os.getenv("SLOT_COUNT", "5"))

# Library persistence; empty path keeps the library in memory
LIBRARY_PATH = os.getenv("LIBRARY_PATH", "")

# Server
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
DEBUG = _bool(os.getenv("DEBUG", "false"))


def get_api_key(env_var: str) -> Optional[str]:
    value = os.getenv(env_var, "").strip()
    return value or None
