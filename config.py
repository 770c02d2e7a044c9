"""Application configuration — environment variables and derived constants.

Loads ``BOT_TOKEN``, ``API_URL``, ``DB_LOCATION`` and the timing settings from
the environment via ``python-dotenv``.  All values are resolved at import time
so other modules can ``from config import …`` without repeated lookups.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── core ─────────────────────────────────────────────────────────────────────
from core.logger import WrapperLogger

# ── Environment bootstrap ────────────────────────────────────────────────────
load_dotenv()

logger = WrapperLogger.get_logger()


# ── Helper functions (private) ───────────────────────────────────────────────


def _int_from_env(name: str, default: int) -> int:
    """Read a non-negative integer setting, falling back to *default* on bad input."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid integer setting, using default", extra={"setting": name, "value": raw, "default": default})
        return default
    if value < 0:
        logger.warning("Negative setting, using default", extra={"setting": name, "value": value, "default": default})
        return default
    return value


# ── Public constants ─────────────────────────────────────────────────────────

BOT_TOKEN: str | None = os.environ.get("BOT_TOKEN")
API_URL: str = os.environ.get("API_URL", "https://api.telegram.org").rstrip("/")
DB_LOCATION: str = os.environ.get("DB_LOCATION", "db")
REQUEST_TIMEOUT: int = _int_from_env("REQUEST_TIMEOUT", 10)
POLL_TIMEOUT: int = _int_from_env("POLL_TIMEOUT", 30)
POLL_INTERVAL: int = _int_from_env("POLL_INTERVAL", 1)


# ── Startup diagnostics ─────────────────────────────────────────────────────

logger.debug(
    "Config loaded",
    extra={"api_url": API_URL, "db_location": DB_LOCATION, "bot_token_set": bool(BOT_TOKEN)},
)
