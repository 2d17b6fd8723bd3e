# pricelens/services/health_checker.py

"""Platform reachability check without launching a browser.

Each platform's search entry point (the results URL for direct-URL
platforms, the home page for interactive ones) is fetched once with a
Chrome-impersonating ``curl_cffi`` GET and classified as ``ok``, ``slow``,
``blocked`` (a bot challenge was served) or ``down``.
"""

import asyncio
import logging
import time
from dataclasses import dataclass

from curl_cffi import requests as curl_requests

from pricelens.config.settings import Settings
from pricelens.models.platform import (
    DirectUrlSearch,
    PlatformProfile,
    load_profile,
)

logger = logging.getLogger("pricelens.health")

PROBE_QUERY = "shoes"

_CHALLENGE_MARKERS = (
    "captcha",
    "robot check",
    "are you a human",
    "access denied",
)


@dataclass
class HealthResult:
    """Outcome of probing one platform."""

    platform_id: str
    status: str  # "ok", "slow", "blocked", "down"
    latency_ms: float
    message: str


def probe_url(profile: PlatformProfile) -> str:
    """URL that exercises the platform's search entry point."""
    if isinstance(profile.search, DirectUrlSearch):
        return profile.search.build_url(PROBE_QUERY)
    return profile.search.home_url


def classify(
    status_code: int, elapsed_ms: float, body: str,
) -> tuple[str, str]:
    """Map a response to ``(status, message)``."""
    if status_code != 200:
        return "down", f"HTTP {status_code}"
    lowered = body.lower()
    if any(marker in lowered for marker in _CHALLENGE_MARKERS):
        return "blocked", "Bot challenge served"
    if elapsed_ms > Settings.HEALTH_SLOW_MS:
        return "slow", "High latency"
    return "ok", ""


def probe_platform(platform: dict[str, str]) -> HealthResult:
    """Fetch one platform's probe URL and classify the response."""
    platform_id = platform["id"]

    try:
        url = probe_url(load_profile(platform_id))
    except (OSError, ValueError, KeyError) as exc:
        return HealthResult(platform_id, "down", 0.0, f"Failed to load profile: {exc}")

    start = time.monotonic()
    try:
        resp = curl_requests.get(
            url,
            headers=Settings.DEFAULT_HEADERS,
            impersonate=Settings.IMPERSONATE_BROWSER,
            timeout=Settings.HEALTH_TIMEOUT,
        )
    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        logger.debug("Probe of %s failed", url, exc_info=True)
        return HealthResult(platform_id, "down", elapsed_ms, str(exc)[:80])

    elapsed_ms = (time.monotonic() - start) * 1000
    status, message = classify(resp.status_code, elapsed_ms, resp.text or "")
    return HealthResult(platform_id, status, elapsed_ms, message)


class HealthChecker:
    """Probe every registered platform concurrently."""

    def __init__(self) -> None:
        self.platforms = Settings.AVAILABLE_PLATFORMS

    async def check_all(self) -> list[HealthResult]:
        """One HealthResult per platform, in registry order."""
        results: list[HealthResult] = await asyncio.gather(
            *(asyncio.to_thread(probe_platform, p) for p in self.platforms)
        )
        for r in results:
            log = logger.info if r.status == "ok" else logger.warning
            log(
                "Health check %s: %s (%.0fms) %s",
                r.platform_id,
                r.status,
                r.latency_ms,
                r.message,
            )
        return list(results)
