"""Recently created repositories, ranked by stars."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from .clients.base import RemoteRepoClient
from .models import RepoSummary, TrendWindow
from .queries import build_trend_query

logger = logging.getLogger(__name__)

TREND_WINDOW_DAYS: dict[TrendWindow, int] = {
    TrendWindow.DAILY: 1,
    TrendWindow.WEEKLY: 7,
    TrendWindow.MONTHLY: 30,
}
DEFAULT_WINDOW = TrendWindow.WEEKLY
TRENDING_LIMIT = 30


def parse_window(window: str) -> TrendWindow:
    """Map a window keyword to a TrendWindow; unknown keywords mean weekly."""
    try:
        return TrendWindow((window or "").strip().lower())
    except ValueError:
        logger.debug("Unknown trend window %r, using %s", window, DEFAULT_WINDOW.value)
        return DEFAULT_WINDOW


def window_start(window: str, now: datetime) -> date:
    """First day of the lookback window ending at ``now``."""
    days = TREND_WINDOW_DAYS[parse_window(window)]
    return (now - timedelta(days=days)).date()


async def trending_repos(
    client: RemoteRepoClient,
    language: str = "",
    window: str = "weekly",
    *,
    now: Optional[datetime] = None,
) -> list[RepoSummary]:
    """Most-starred repositories created inside the window.

    Args:
        client: Transport used for the search.
        language: Optional language filter, e.g. 'Rust'.
        window: 'daily', 'weekly' or 'monthly'. Anything else means weekly.
        now: Evaluation time. Defaults to the current UTC time.

    Returns:
        Up to 30 RepoSummary, stars descending.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    query = build_trend_query(language, window_start(window, now))
    repos = await client.search_repositories(
        query,
        sort="stars",
        order="desc",
        per_page=TRENDING_LIMIT,
    )
    return repos[:TRENDING_LIMIT]
