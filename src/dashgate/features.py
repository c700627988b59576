"""Latest-version feature feed.

Learn: at startup the gateway asks the package registry which dashboard
features the latest release advertises (the "parseDashboardFeatures" list
in its package metadata) and keeps the ones this version does not have.
The dashboard client shows them as "new in the latest version".

The fetch is informational only. On failure the config endpoint serves an
empty list and /health reports the feed as "unavailable".
"""

from typing import Any, Iterable, Optional

import httpx
import structlog

logger = structlog.get_logger()

FEATURES_FIELD = "parseDashboardFeatures"

# Features the bundled dashboard client ships with
CURRENT_FEATURES: tuple[str, ...] = (
    "Data Browser",
    "Cloud Code Viewer",
    "Cloud Code Jobs",
    "Logs Viewer",
    "Push Status Page",
    "Relation Editor",
)


def diff_features(latest: Iterable[Any], current: Iterable[str] = CURRENT_FEATURES) -> list[str]:
    """Features in latest that current does not have, in latest's order."""
    known = set(current)
    new: list[str] = []
    for feature in latest:
        if isinstance(feature, str) and feature not in known and feature not in new:
            new.append(feature)
    return new


async def fetch_new_features(
    url: str,
    timeout: float = 10.0,
    current: Iterable[str] = CURRENT_FEATURES,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Optional[list[str]]:
    """Fetch the latest release metadata and diff its feature list.

    Returns None when there is nothing to report: no URL, a failed
    request, or metadata without a feature list. An empty list means the
    fetch worked and the latest release has nothing new.
    """
    if not url:
        return None

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            metadata = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("dashgate.features.fetch_failed", url=url, error=str(e))
        return None

    latest = metadata.get(FEATURES_FIELD) if isinstance(metadata, dict) else None
    if not isinstance(latest, list):
        logger.info("dashgate.features.not_advertised", url=url)
        return None

    new = diff_features(latest, current)
    logger.info("dashgate.features.fetched", url=url, new_features=len(new))
    return new
