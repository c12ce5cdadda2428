import os
from pathlib import Path
from dotenv import load_dotenv

_BACKEND_ROOT = Path(__file__).resolve().parents[2]
_BACKEND_ENV_PATH = _BACKEND_ROOT / ".env"
load_dotenv(dotenv_path=_BACKEND_ENV_PATH, override=False)

ENVIRONMENT = str(os.getenv("ENV") or "development").strip().lower()

# Interview persistence backend (REST, {success, data, message} envelope)
INTERVIEWS_API_URL = str(os.getenv("INTERVIEWS_API_URL") or "http://localhost:9999").strip().rstrip("/")
INTERVIEWS_API_TIMEOUT_SEC = max(1.0, float(os.getenv("INTERVIEWS_API_TIMEOUT_SEC", "15")))

# Session records
SESSION_RECORD_TTL_DAYS = max(1, int(os.getenv("SESSION_RECORD_TTL_DAYS", "7")))
RESULTS_PATH_TEMPLATE = str(os.getenv("RESULTS_PATH_TEMPLATE") or "/interviews/{session_id}/feedback").strip()

# Call
CALL_TICK_INTERVAL_SEC = max(0.05, float(os.getenv("CALL_TICK_INTERVAL_SEC", "1.0")))
DEFAULT_QUESTION_COUNT = max(1, int(os.getenv("DEFAULT_QUESTION_COUNT", "5")))
ASSESSMENT_MARKER = str(os.getenv("ASSESSMENT_MARKER") or "FEEDBACK_JSON:").strip()

# Relay
WS_MAX_TEXT_BYTES = max(1024, int(os.getenv("WS_MAX_TEXT_BYTES", "65536")))
JWT_SECRET = str(os.getenv("JWT_SECRET") or "").strip()
ALLOW_UNVERIFIED_JWT_DEV = str(os.getenv("ALLOW_UNVERIFIED_JWT_DEV", "false")).strip().lower() in {"1", "true", "yes", "on"}
