###############
# Runtime settings for the gesture service.
# Values come from the .env file next to the project root,
# then from the process environment.
###############

import os
from dotenv import load_dotenv

load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), "../../.env"))


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value not in (None, "") else default


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value not in (None, "") else default


# Storage
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./gestures.db")
TEMPLATE_STORE = os.environ.get("TEMPLATE_STORE", "sql").lower()
TEMPLATE_BLOB_PATH = os.environ.get("TEMPLATE_BLOB_PATH", "gesture_datasets.json")
SQL_ECHO = os.environ.get("SQL_ECHO", "false").lower() in ("1", "true", "yes")

# Matching (empirical, recalibrate per camera resolution)
SIMILARITY_THRESHOLD = _env_float("SIMILARITY_THRESHOLD", 0.5)
SIMILARITY_SCALE = _env_float("SIMILARITY_SCALE", 50000.0)

# Training
MIN_TRAINING_FRAMES = _env_int("MIN_TRAINING_FRAMES", 10)
RECOMMENDED_TRAINING_FRAMES = _env_int("RECOMMENDED_TRAINING_FRAMES", 30)

# Recognition history shown to the user
HISTORY_SIZE = _env_int("HISTORY_SIZE", 10)

# API
CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
