"""Business discovery: group search hits by owner and rank the owners.

A "business" is the account behind a set of matching repositories. One
discovery run searches once, looks up every distinct owner exactly once, and
keeps the owners that look like organizations rather than casual personal
accounts.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Union

from .clients.base import RemoteRepoClient
from .errors import NotFound, TransportFailure
from .models import AccountType, BusinessCriteria, BusinessProfile, RepoSummary, RepositoryBrief
from .queries import build_business_query, coerce_criteria

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 4

# Personal accounts need more public repositories than this to count.
MIN_USER_PUBLIC_REPOS = 5


def _group_by_owner(repositories: list[RepoSummary]) -> dict[str, list[RepoSummary]]:
    """Owner login to repositories, both in first-seen search order."""
    grouped: dict[str, list[RepoSummary]] = {}
    for repo in repositories:
        grouped.setdefault(repo.owner_login, []).append(repo)
    return grouped


def is_business(profile: BusinessProfile) -> bool:
    """Organizations always qualify; users only with a large public footprint."""
    if profile.account_type == AccountType.ORGANIZATION:
        return True
    if profile.account_type == AccountType.USER:
        return profile.public_repo_count > MIN_USER_PUBLIC_REPOS
    return False


def rank_profiles(profiles: list[BusinessProfile]) -> list[BusinessProfile]:
    """Order by summed stars, highest first. Ties keep their input order."""
    return sorted(profiles, key=lambda p: p.total_stars, reverse=True)


async def _build_profile(
    client: RemoteRepoClient,
    semaphore: asyncio.Semaphore,
    owner: str,
    repositories: list[RepoSummary],
) -> BusinessProfile:
    """Fetch one owner's account and attach its matched repositories."""
    briefs = [RepositoryBrief.from_summary(r) for r in repositories]
    async with semaphore:
        try:
            account = await client.get_account(owner)
        except (NotFound, TransportFailure) as exc:
            logger.warning("Owner lookup failed for %s, keeping a minimal profile: %s", owner, exc)
            profile = BusinessProfile(
                owner_login=owner, account_type=AccountType.UNKNOWN, repositories=briefs
            )
        else:
            # The search hit is authoritative for the grouping key.
            profile = BusinessProfile.from_account(account, owner_login=owner, repositories=briefs)

    return profile


async def find_businesses(
    client: RemoteRepoClient,
    criteria: Union[BusinessCriteria, Mapping, None] = None,
    *,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> list[BusinessProfile]:
    """Discover businesses whose repositories match ``criteria``.

    Args:
        client: Transport used for the search and the owner lookups.
        criteria: BusinessCriteria or an equivalent mapping. Malformed
            criteria raise before any request is made.
        max_concurrency: Maximum owner lookups in flight at once.

    Returns:
        BusinessProfile list ranked by the summed stars of each owner's
        matched repositories, highest first.

    Raises:
        TransportFailure: the search itself failed. Individual owner lookup
            failures never raise; those owners get an "unknown" profile.
    """
    criteria = coerce_criteria(criteria)
    query = build_business_query(criteria)

    repositories = await client.search_repositories(
        query,
        sort="stars",
        order="desc",
        per_page=criteria.limit,
    )
    grouped = _group_by_owner(repositories[: criteria.limit])

    semaphore = asyncio.Semaphore(max_concurrency)
    # One task per owner; each builds its profile complete.
    profiles = await asyncio.gather(
        *(_build_profile(client, semaphore, owner, repos) for owner, repos in grouped.items())
    )

    businesses = rank_profiles([p for p in profiles if is_business(p)])
    logger.info(
        "Query %r: %d repositories, %d owners, %d businesses",
        query, len(repositories), len(grouped), len(businesses),
    )
    return businesses
