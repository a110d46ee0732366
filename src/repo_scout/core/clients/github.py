"""GitHub REST API client.

API docs: https://docs.github.com/en/rest
Rate limit: 60 requests/hour anonymous, 5,000/hour with a token.
Search is limited separately (10/minute anonymous, 30/minute with a token).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..errors import NotFound, TransportFailure
from ..models import Account, ContentEntry, RepoSummary

logger = logging.getLogger(__name__)

API_BASE = "https://api.github.com"
API_VERSION = "2022-11-28"
DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)

# Raised by the _parse_* helpers when a 200 body has the wrong shape.
MALFORMED_PAYLOAD_ERRORS = (KeyError, TypeError, AttributeError, ValidationError)

T = TypeVar("T")


def _build_headers(token: Optional[str]) -> dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": API_VERSION,
        "User-Agent": "repo-scout",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code == 429:
        return True
    return response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0"


def _parse_repository(item: dict) -> RepoSummary:
    """Convert a GitHub repository payload into a RepoSummary."""
    owner = item.get("owner") or {}
    license_info = item.get("license") or {}
    return RepoSummary(
        id=item["id"],
        name=item["name"],
        full_name=item.get("full_name") or f"{owner.get('login', '')}/{item['name']}",
        owner_login=owner.get("login", ""),
        description=item.get("description"),
        url=item.get("html_url"),
        clone_url=item.get("clone_url"),
        language=item.get("language"),
        star_count=item.get("stargazers_count") or 0,
        fork_count=item.get("forks_count") or 0,
        open_issue_count=item.get("open_issues_count") or 0,
        topics=set(item.get("topics") or []),
        created_at=item.get("created_at"),
        updated_at=item.get("updated_at"),
        license_name=license_info.get("name"),
        homepage=item.get("homepage") or None,
    )


def _parse_account(data: dict) -> Account:
    return Account(
        login=data["login"],
        name=data.get("name"),
        type=data.get("type"),
        bio=data.get("bio"),
        location=data.get("location"),
        blog=data.get("blog"),
        html_url=data.get("html_url"),
        avatar_url=data.get("avatar_url"),
        public_repos=data.get("public_repos") or 0,
        followers=data.get("followers") or 0,
        following=data.get("following") or 0,
        created_at=data.get("created_at"),
    )


def _parse_entry(data: dict) -> ContentEntry:
    return ContentEntry(
        type=data.get("type", "file"),
        name=data["name"],
        path=data["path"],
        size=data.get("size") or 0,
        sha=data.get("sha"),
        encoding=data.get("encoding"),
        content=data.get("content"),
        download_url=data.get("download_url"),
    )


class GitHubClient:
    """Async GitHub client implementing the RemoteRepoClient surface.

    Use as an async context manager so the underlying connection pool is
    closed:

        async with GitHubClient(token) as client:
            repos = await client.search_repositories("topic:fintech")

    Pass ``http_client`` to reuse (or mock) an existing ``httpx.AsyncClient``;
    the caller then owns its lifecycle.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = API_BASE,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url,
            headers=_build_headers(token),
            timeout=DEFAULT_TIMEOUT,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _get(self, url: str, params: Optional[dict] = None) -> Any:
        """GET a JSON resource, translating failures into the error taxonomy."""
        try:
            response = await self._http.get(url, params=params)
        except httpx.HTTPError as exc:
            raise TransportFailure(f"GET {url} failed: {exc}") from exc

        if response.status_code == 404:
            raise NotFound(url)
        if _is_rate_limited(response):
            reset = response.headers.get("x-ratelimit-reset", "unknown")
            raise TransportFailure(
                f"GitHub rate limit exceeded for {url} (resets at {reset})",
                status_code=response.status_code,
            )
        if response.is_error:
            raise TransportFailure(
                f"GET {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise TransportFailure(f"GET {url} returned a non-JSON body") from exc

    async def get_contents(
        self,
        owner: str,
        repo: str,
        path: str = "",
        ref: Optional[str] = None,
    ) -> Union[ContentEntry, list[ContentEntry]]:
        """Fetch a directory listing or a single file entry.

        Args:
            owner: Repository owner login.
            repo: Repository name.
            path: Path inside the repository; '' for the root.
            ref: Branch, tag or commit. None means the default branch.
        """
        url = f"/repos/{quote(owner)}/{quote(repo)}/contents"
        path = path.strip("/")
        if path:
            url = f"{url}/{quote(path)}"
        params = {"ref": ref} if ref else None

        data = await self._get(url, params)
        if isinstance(data, list):
            return self._parse(url, lambda: [_parse_entry(item) for item in data])
        return self._parse(url, lambda: _parse_entry(data))

    async def search_repositories(
        self,
        query: str,
        *,
        sort: str = "stars",
        order: str = "desc",
        per_page: int = 30,
        page: int = 1,
    ) -> list[RepoSummary]:
        """Search repositories with GitHub search syntax.

        Returns a list of RepoSummary in the order GitHub ranked them.
        """
        params = {
            "q": query,
            "sort": sort,
            "order": order,
            "per_page": per_page,
            "page": page,
        }
        url = "/search/repositories"
        data = await self._get(url, params)
        if isinstance(data, dict) and data.get("incomplete_results"):
            logger.info("GitHub search for %r returned incomplete results", query)
        return self._parse(url, lambda: [_parse_repository(item) for item in data.get("items", [])])

    async def get_account(self, username: str) -> Account:
        """Fetch a user or organization profile."""
        url = f"/users/{quote(username)}"
        data = await self._get(url)
        return self._parse(url, lambda: _parse_account(data))

    async def get_repository(self, owner: str, repo: str) -> RepoSummary:
        """Fetch full metadata for one repository."""
        url = f"/repos/{quote(owner)}/{quote(repo)}"
        data = await self._get(url)
        return self._parse(url, lambda: _parse_repository(data))

    @staticmethod
    def _parse(url: str, parse: Callable[[], T]) -> T:
        """Run a payload parser, reporting a wrongly shaped body as TransportFailure."""
        try:
            return parse()
        except MALFORMED_PAYLOAD_ERRORS as exc:
            raise TransportFailure(f"GET {url} returned an unexpected payload: {exc!r}") from exc
