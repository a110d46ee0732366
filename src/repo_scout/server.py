"""Repo Scout MCP Server.

FastMCP server exposing repository crawling, business discovery and
repository scoring as read-only tools.
Run: repo-scout-mcp
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .core.clients.github import API_BASE, GitHubClient
from .core.content import fetch_file
from .core.discovery import DEFAULT_MAX_CONCURRENCY, find_businesses
from .core.models import BusinessCriteria
from .core.scoring import analyze_repository
from .core.tree import list_files
from .core.trending import parse_window, trending_repos

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)

# Cap on how many entries a listing tool returns inline.
MAX_LISTED_FILES = 500


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Configure logging for the server process."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    if not os.environ.get("GITHUB_TOKEN"):
        logger.warning("GITHUB_TOKEN not set, using anonymous GitHub access (60 requests/hour)")
    yield


mcp = FastMCP(
    "Repo Scout",
    instructions="Ask your AI about the businesses behind GitHub. Crawl repositories, read files, find organizations by industry, technology or location, and score how commercial a repository looks.",
    lifespan=lifespan,
)


def _github_client() -> GitHubClient:
    token: Optional[str] = os.environ.get("GITHUB_TOKEN") or None
    base_url = os.environ.get("GITHUB_API_URL", API_BASE)
    return GitHubClient(token=token, base_url=base_url)


def _max_concurrency() -> int:
    raw = os.environ.get("REPO_SCOUT_MAX_CONCURRENCY", str(DEFAULT_MAX_CONCURRENCY))
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"REPO_SCOUT_MAX_CONCURRENCY must be an integer, got {raw!r}") from None
    return max(1, value)


# ─── Tool 1: List Files ──────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def repo_list_files(
    owner: str,
    repo: str,
    path: str = "",
    ref: str = "",
    extensions: Optional[list[str]] = None,
) -> dict:
    """List every file in a repository (recursively), optionally filtered by extension.

    Args:
        owner: Repository owner, e.g. 'microsoft'.
        repo: Repository name, e.g. 'vscode'.
        path: Directory to start from. Default is the repository root.
        ref: Branch, tag or commit. Default is the repository's default branch.
        extensions: Extensions to keep, e.g. ['.py', '.md']. Default keeps all files.
    """
    async with _github_client() as client:
        files = await list_files(
            client, owner, repo, path, ref or None, extensions or [],
            max_concurrency=_max_concurrency(),
        )
    return {
        "title": f"Files in {owner}/{repo}",
        "files": [f.model_dump() for f in files[:MAX_LISTED_FILES]],
        "count": len(files),
        "truncated": len(files) > MAX_LISTED_FILES,
        "summary": f"Found {len(files)} files under {owner}/{repo}/{path}".rstrip("/"),
    }


# ─── Tool 2: Fetch File ──────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def repo_fetch_file(owner: str, repo: str, path: str, ref: str = "") -> dict:
    """Read one file from a repository as text.

    Args:
        owner: Repository owner.
        repo: Repository name.
        path: File path inside the repository, e.g. 'package.json'.
        ref: Branch, tag or commit. Default is the repository's default branch.
    """
    async with _github_client() as client:
        file = await fetch_file(client, owner, repo, path, ref or None)
    if file is None:
        return {
            "title": f"{owner}/{repo}/{path}",
            "file": None,
            "summary": f"{path} was not found in {owner}/{repo} or could not be read as text.",
        }
    return {
        "title": f"{owner}/{repo}/{file.path}",
        "file": file.model_dump(),
        "summary": f"{file.path}: {file.size_bytes:,} bytes",
    }


# ─── Tool 3: Search ──────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def repo_search(query: str, sort: str = "stars", limit: int = 30) -> dict:
    """Search GitHub repositories with GitHub search syntax.

    Args:
        query: Search query, e.g. 'topic:fintech language:go'.
        sort: 'stars', 'forks', 'help-wanted-issues' or 'updated'. Default 'stars'.
        limit: Maximum number of results (1-100). Default 30.
    """
    async with _github_client() as client:
        repos = await client.search_repositories(query, sort=sort, per_page=max(1, min(limit, 100)))
    return {
        "query": query,
        "results": [r.model_dump(mode="json") for r in repos],
        "count": len(repos),
        "summary": f"Found {len(repos)} repositories matching '{query}'",
    }


# ─── Tool 4: Find Businesses ─────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def repo_find_businesses(
    industry: str = "",
    technology: str = "",
    location: str = "",
    company: str = "",
    min_stars: int = 0,
    limit: int = 50,
) -> dict:
    """Find organizations on GitHub by industry, technology, location or name.

    Args:
        industry: GitHub topic, e.g. 'artificial-intelligence'.
        technology: Primary language, e.g. 'JavaScript'.
        location: Owner location, e.g. 'San Francisco'.
        company: Text to look for in repository names and descriptions.
        min_stars: Only consider repositories with at least this many stars.
        limit: How many top repositories to inspect (1-100). Default 50.
    """
    criteria = BusinessCriteria(
        industry=industry,
        technology=technology,
        location=location,
        company=company,
        min_stars=min_stars,
        limit=limit,
    )
    async with _github_client() as client:
        businesses = await find_businesses(client, criteria, max_concurrency=_max_concurrency())

    results = []
    for b in businesses:
        entry = b.model_dump(mode="json")
        entry["total_stars"] = b.total_stars
        results.append(entry)

    return {
        "title": "Business Discovery",
        "criteria": criteria.model_dump(exclude_none=True),
        "businesses": results,
        "count": len(results),
        "summary": _businesses_summary(businesses),
    }


def _businesses_summary(businesses: list) -> str:
    if not businesses:
        return "No organizations matched these criteria."
    top = ", ".join(f"{b.display_name or b.owner_login} ({b.total_stars:,} stars)" for b in businesses[:3])
    return f"Found {len(businesses)} businesses. Top: {top}"


# ─── Tool 5: Analyze Repository ──────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def repo_analyze(owner: str, repo: str) -> dict:
    """Score how likely a repository is to belong to a commercial entity.

    Checks license, description, website, stars, recent activity, topics and
    forks, plus commercial keywords in the README.

    Args:
        owner: Repository owner.
        repo: Repository name.
    """
    async with _github_client() as client:
        analysis = await analyze_repository(client, owner, repo)
    if analysis is None:
        return {
            "title": f"{owner}/{repo}",
            "analysis": None,
            "summary": f"Could not fetch {owner}/{repo}.",
        }

    fired = [name for name, value in analysis.indicators.items() if value]
    return {
        "title": f"Business Analysis: {analysis.repository.full_name}",
        "analysis": analysis.model_dump(mode="json"),
        "summary": f"Business score {analysis.business_score}: "
        + f"{len(fired)} of {len(analysis.indicators)} indicators"
        + (f" ({', '.join(fired)})" if fired else "")
        + f", {len(analysis.matched_keywords)} README keywords.",
    }


# ─── Tool 6: Trending ────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def repo_trending(language: str = "", since: str = "weekly") -> dict:
    """Most-starred repositories created recently.

    Args:
        language: Optional language filter, e.g. 'Rust'.
        since: 'daily', 'weekly' or 'monthly'. Default 'weekly'.
    """
    window = parse_window(since)
    async with _github_client() as client:
        repos = await trending_repos(client, language, window.value)
    return {
        "title": f"Trending {language or 'repositories'} ({window.value})",
        "window": window.value,
        "results": [r.model_dump(mode="json") for r in repos],
        "count": len(repos),
        "summary": f"{len(repos)} repositories created in the {window.value} window"
        + (f" in {language}" if language else ""),
    }


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()
