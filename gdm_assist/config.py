"""
GDM Assist — Configuration
==========================
Runtime settings for the API service. Loads overrides from the
project-level .env file.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

# ── Logging ─────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE: str = os.getenv("LOG_FILE", "")            # empty = console only

# ── Reports ─────────────────────────────────────────────────────────────
REPORTS_DIR: str = os.getenv("REPORTS_DIR", "reports")
REPORTS_MAX: int = int(os.getenv("REPORTS_MAX", "100"))   # oldest PDFs are deleted past this

# ── Assessment defaults ─────────────────────────────────────────────────
DEFAULT_GUIDELINE: str = os.getenv("DEFAULT_GUIDELINE", "WHO")

# ── HTTP ────────────────────────────────────────────────────────────────
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

API_TITLE = "GDM Assist API"
API_VERSION = "1.0.0"

DISCLAIMER = (
    "This is decision support, not a formal diagnosis. "
    "See guidelines for definitive management."
)
