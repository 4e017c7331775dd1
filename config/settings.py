"""
Configuration settings for Contract Advisor.

Environment variables (or Streamlit secrets):
    ANALYSIS_MODE: "llm" or "template" (default: template)
    GOOGLE_API_KEY: Gemini Developer API key
    GOOGLE_CLOUD_PROJECT: GCP project ID (Vertex AI, used when no API key)
    ADVISOR_USER_ID: Owner id for saved reports (auth is handled upstream)
"""

import logging
import os
from pathlib import Path

_settings_logger = logging.getLogger(__name__)


# =============================================================================
# Streamlit Secrets helper (for Streamlit Community Cloud deployment)
# =============================================================================

def _get_secret(key: str, default: str = "") -> str:
    """Read a config value from Streamlit secrets (if available) or env var."""
    try:
        import streamlit as st
        if key in st.secrets:
            return str(st.secrets[key])
    except Exception as e:
        # No secrets.toml outside a Streamlit deployment
        _settings_logger.debug("Streamlit secrets unavailable for %s: %s", key, e)
    return os.getenv(key, default)


# =============================================================================
# Version
# =============================================================================

VERSION = "1.0.0"

PRODUCT_NAME = _get_secret("PRODUCT_NAME", "Contract Advisor")

# =============================================================================
# Analysis engine
# =============================================================================

ANALYSIS_MODE_LLM = "llm"
ANALYSIS_MODE_TEMPLATE = "template"

ANALYSIS_MODE = _get_secret("ANALYSIS_MODE", ANALYSIS_MODE_TEMPLATE).strip().lower()
if ANALYSIS_MODE not in (ANALYSIS_MODE_LLM, ANALYSIS_MODE_TEMPLATE):
    _settings_logger.warning(
        "Unknown ANALYSIS_MODE=%r, falling back to %s", ANALYSIS_MODE, ANALYSIS_MODE_TEMPLATE
    )
    ANALYSIS_MODE = ANALYSIS_MODE_TEMPLATE

# =============================================================================
# Google Gemini Configuration
# =============================================================================

GOOGLE_API_KEY = _get_secret("GOOGLE_API_KEY", "")
PROJECT_ID = _get_secret("GOOGLE_CLOUD_PROJECT", "")
VERTEX_LOCATION = _get_secret("VERTEX_LOCATION", "us-central1")

# =============================================================================
# Models
# =============================================================================

MODEL_PRO = _get_secret("MODEL_PRO", "gemini-2.5-pro")
MODEL_FLASH = _get_secret("MODEL_FLASH", "gemini-2.5-flash")

REPORT_MODEL = MODEL_PRO
LETTER_MODEL = MODEL_FLASH

REPORT_TEMPERATURE = 0.7
LETTER_TEMPERATURE = 0.7
MAX_OUTPUT_TOKENS = 16384

# =============================================================================
# Users
# =============================================================================

DEFAULT_USER_ID = _get_secret("ADVISOR_USER_ID", "local-user")

# =============================================================================
# Paths
# =============================================================================

BASE_DIR = Path(__file__).parent.parent
DATA_FOLDER = BASE_DIR / "data"
REPORTS_FOLDER = DATA_FOLDER / "reports"
OUTPUTS_FOLDER = BASE_DIR / "outputs"

# NOTE: directories are NOT created at import time (would break pytest in CI).
# Call setup_environment() or ensure_data_dirs() explicitly at startup.
_DATA_DIRS = [REPORTS_FOLDER, OUTPUTS_FOLDER]


def ensure_data_dirs() -> None:
    """Create all required data directories. Call this at application startup."""
    for _folder in _DATA_DIRS:
        _folder.mkdir(parents=True, exist_ok=True)


# =============================================================================
# Helper Functions
# =============================================================================

def has_llm_credentials() -> bool:
    return bool(GOOGLE_API_KEY or PROJECT_ID)


def setup_environment():
    """Set up environment variables for the Gemini SDK and create data directories."""
    if not GOOGLE_API_KEY and PROJECT_ID:
        os.environ["GOOGLE_CLOUD_PROJECT"] = PROJECT_ID
        os.environ["GOOGLE_CLOUD_LOCATION"] = VERTEX_LOCATION
        os.environ["GOOGLE_GENAI_USE_VERTEXAI"] = "true"

    ensure_data_dirs()


def validate_config() -> dict[str, bool]:
    """Validate configuration and return status dict."""
    status = {
        "analysis_mode": ANALYSIS_MODE in (ANALYSIS_MODE_LLM, ANALYSIS_MODE_TEMPLATE),
        "credentials": has_llm_credentials(),
        "reports_folder": REPORTS_FOLDER.parent.exists(),
    }
    # Template mode runs offline, credentials only matter for the LLM engine
    required = ["analysis_mode"]
    if ANALYSIS_MODE == ANALYSIS_MODE_LLM:
        required.append("credentials")
    status["all_ok"] = all(status[k] for k in required)
    return status
