"""Business-likelihood scoring for a single repository.

Combines boolean metadata indicators with commercial keywords found in the
README. The score is a plain count so it stays explainable: every point maps
to one indicator or one keyword.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from .clients.base import RemoteRepoClient
from .content import fetch_file
from .errors import NotFound, TransportFailure
from .models import AnalyzedRepository, RepoAnalysis, RepoSummary

logger = logging.getLogger(__name__)

HIGH_STARS_THRESHOLD = 100
CONTRIBUTOR_FORKS_THRESHOLD = 10
ACTIVE_MAINTENANCE_DAYS = 90

PRIMARY_README = "README.md"
FALLBACK_READMES = ("README.rst", "README.txt", "README")

BUSINESS_KEYWORDS = (
    "company", "business", "enterprise", "commercial", "product",
    "service", "solution", "platform", "api", "saas", "startup",
    "corporation", "inc", "llc", "ltd", "gmbh",
)

INDICATOR_NAMES = (
    "hasLicense",
    "hasDescription",
    "hasWebsite",
    "highStars",
    "activeMaintenance",
    "hasTopics",
    "hasContributors",
)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def compute_indicators(repo: RepoSummary, now: datetime) -> dict[str, bool]:
    """Evaluate every metadata indicator for ``repo`` as of ``now``."""
    cutoff = _as_utc(now) - timedelta(days=ACTIVE_MAINTENANCE_DAYS)
    recently_updated = repo.updated_at is not None and _as_utc(repo.updated_at) > cutoff

    return {
        "hasLicense": bool(repo.license_name),
        "hasDescription": bool(repo.description),
        "hasWebsite": bool(repo.homepage),
        "highStars": repo.star_count > HIGH_STARS_THRESHOLD,
        "activeMaintenance": recently_updated,
        "hasTopics": bool(repo.topics),
        "hasContributors": repo.fork_count > CONTRIBUTOR_FORKS_THRESHOLD,
    }


def match_keywords(text: str) -> list[str]:
    """Commercial keywords contained in ``text``, each reported once.

    Matching is case-insensitive substring containment, so 'inc' also
    matches 'including'.
    """
    lowered = text.lower()
    return [keyword for keyword in BUSINESS_KEYWORDS if keyword in lowered]


def score_repository(repo: RepoSummary, readme_text: str, now: datetime) -> RepoAnalysis:
    """Build the analysis for already-fetched metadata and README text."""
    indicators = compute_indicators(repo, now)
    keywords = match_keywords(readme_text)
    return RepoAnalysis(
        repository=AnalyzedRepository.from_summary(repo),
        indicators=indicators,
        matched_keywords=keywords,
        business_score=sum(indicators.values()) + len(keywords),
    )


async def fetch_readme(client: RemoteRepoClient, owner: str, repo: str) -> str:
    """README text, trying the usual filenames in order; '' when none exists."""
    for filename in (PRIMARY_README, *FALLBACK_READMES):
        readme = await fetch_file(client, owner, repo, filename)
        if readme is not None:
            return readme.content
    logger.debug("No README found in %s/%s", owner, repo)
    return ""


async def analyze_repository(
    client: RemoteRepoClient,
    owner: str,
    repo: str,
    *,
    now: Optional[datetime] = None,
) -> Optional[RepoAnalysis]:
    """Score how likely ``owner/repo`` is to represent a commercial entity.

    Args:
        client: Transport used for the metadata and README lookups.
        owner: Repository owner login.
        repo: Repository name.
        now: Evaluation time for the maintenance indicator. Defaults to the
            current UTC time.

    Returns:
        RepoAnalysis, or None when the repository metadata cannot be fetched.
        A missing README is not a failure; it just yields no keywords.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    try:
        summary = await client.get_repository(owner, repo)
    except NotFound:
        logger.info("Repository %s/%s not found", owner, repo)
        return None
    except TransportFailure as exc:
        logger.warning("Failed to fetch metadata for %s/%s: %s", owner, repo, exc)
        return None

    readme_text = await fetch_readme(client, owner, repo)
    analysis = score_repository(summary, readme_text, now)
    logger.info("Analyzed %s/%s: business score %d", owner, repo, analysis.business_score)
    return analysis
