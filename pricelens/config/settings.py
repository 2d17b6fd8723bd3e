# pricelens/config/settings.py

"""Central configuration for the pricelens scraping engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the pricelens scraping engine."""

    # --- Browser session ---
    HEADLESS: bool = os.getenv("PRICELENS_HEADLESS", "1") != "0"
    VIEWPORT: dict[str, int] = {"width": 1920, "height": 1080}
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    LOCALE: str = "en-IN"
    EXTRA_HTTP_HEADERS: dict[str, str] = {
        "Accept-Language": "en-IN,en;q=0.9",
    }
    LAUNCH_ARGS: list[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-accelerated-2d-canvas",
        "--disable-gpu",
        "--window-size=1920,1080",
    ]

    # --- Timing (milliseconds unless noted) ---
    WAIT_UNTIL: str = os.getenv("PRICELENS_WAIT_UNTIL", "networkidle")
    NAVIGATION_TIMEOUT_MS: int = 60_000   # goto / navigation settle
    SELECTOR_TIMEOUT_MS: int = 30_000     # structural selector waits
    DEFAULT_SETTLE_MS: int = 3_000        # settle budget when a profile omits one
    SETTLE_POLL_MS: int = 500             # interval between settle probes
    TYPE_PAUSE_MS: int = 1_000            # after typing, before Enter
    SCRAPE_DEADLINE: float = float(
        os.getenv("PRICELENS_SCRAPE_DEADLINE", "180")
    )                                     # seconds, whole scrape

    # --- Extraction ---
    MAX_OFFERS: int = 3
    MIN_OFFER_LENGTH: int = 10
    CURRENCY_SYMBOL: str = "₹"

    # --- HTTP API ---
    APP_ENV: str = os.getenv("APP_ENV", "development")
    API_HOST: str = os.getenv("APP_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("PORT", "5000"))

    # --- Name unification (Gemini via OpenAI-compatible endpoint) ---
    GOOGLE_API_KEY: str | None = os.getenv("GOOGLE_API_KEY")
    UNIFY_MODEL: str = os.getenv("PRICELENS_UNIFY_MODEL", "gemini-2.0-flash")
    UNIFY_BASE_URL: str = (
        "https://generativelanguage.googleapis.com/v1beta/openai/"
    )

    # --- Health check ---
    HEALTH_TIMEOUT: int = 10            # seconds per platform
    HEALTH_SLOW_MS: float = 5000.0
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome120"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-IN,en;q=0.9",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = Path(__file__).resolve().parent / "selectors.json"
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Platforms (registry; selectors live in selectors.json) ---
    AVAILABLE_PLATFORMS: list[dict[str, str]] = [
        {"id": "amazon", "label": "Amazon"},
        {"id": "flipkart", "label": "Flipkart"},
        {"id": "myntra", "label": "Myntra"},
    ]
