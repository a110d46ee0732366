"""Stub transport and payload builders for the core tests."""

from __future__ import annotations

import asyncio
import base64
import itertools
from collections import Counter
from datetime import datetime, timezone
from typing import Optional

from repo_scout.core.errors import NotFound, TransportFailure
from repo_scout.core.models import Account, ContentEntry, RepoSummary

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)

_repo_ids = itertools.count(1)


def file_entry(path: str, size: int = 10, content: Optional[str] = None) -> ContentEntry:
    """A file entry; with ``content`` it carries a base64 payload like GitHub's."""
    name = path.rsplit("/", 1)[-1]
    encoded = base64.b64encode(content.encode("utf-8")).decode("ascii") if content is not None else None
    return ContentEntry(
        type="file",
        name=name,
        path=path,
        size=size,
        sha=f"sha-{path}",
        encoding="base64" if content is not None else None,
        content=encoded,
        download_url=f"https://raw.example/{path}",
    )


def dir_entry(path: str) -> ContentEntry:
    return ContentEntry(type="dir", name=path.rsplit("/", 1)[-1], path=path)


def make_repo(
    name: str,
    owner: str,
    stars: int = 0,
    *,
    repo_id: Optional[int] = None,
    **fields,
) -> RepoSummary:
    return RepoSummary(
        id=repo_id if repo_id is not None else next(_repo_ids),
        name=name,
        full_name=f"{owner}/{name}",
        owner_login=owner,
        url=f"https://github.com/{owner}/{name}",
        star_count=stars,
        **fields,
    )


def make_account(login: str, account_type: str = "Organization", public_repos: int = 20, **fields) -> Account:
    return Account(
        login=login,
        name=fields.pop("name", login.title()),
        type=account_type,
        public_repos=public_repos,
        html_url=f"https://github.com/{login}",
        **fields,
    )


class FakeGitHub:
    """In-memory RemoteRepoClient recording every call.

    ``tree`` maps a path to a directory listing (list) or a single entry.
    Paths in ``failing_paths`` raise TransportFailure; unknown paths raise
    NotFound. ``delays`` lets a test make some listings finish later than
    others.
    """

    def __init__(
        self,
        tree: Optional[dict] = None,
        search_results: Optional[list[RepoSummary]] = None,
        accounts: Optional[dict[str, Account]] = None,
        repositories: Optional[dict[str, RepoSummary]] = None,
        failing_paths: Optional[set[str]] = None,
        failing_accounts: Optional[set[str]] = None,
        delays: Optional[dict[str, float]] = None,
    ):
        self.tree = tree or {}
        self.search_results = search_results or []
        self.accounts = accounts or {}
        self.repositories = repositories or {}
        self.failing_paths = failing_paths or set()
        self.failing_accounts = failing_accounts or set()
        self.delays = delays or {}
        self.search_error: Optional[Exception] = None

        self.content_calls: list[tuple[str, Optional[str]]] = []
        self.search_calls: list[dict] = []
        self.account_calls: Counter = Counter()
        self.repository_calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_contents(self, owner, repo, path="", ref=None):
        self.content_calls.append((path, ref))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(path, 0))
            if path in self.failing_paths:
                raise TransportFailure(f"boom at {path}", status_code=502)
            if path not in self.tree:
                raise NotFound(path)
            return self.tree[path]
        finally:
            self.in_flight -= 1

    async def search_repositories(self, query, *, sort="stars", order="desc", per_page=30, page=1):
        self.search_calls.append({"query": query, "sort": sort, "order": order, "per_page": per_page, "page": page})
        if self.search_error is not None:
            raise self.search_error
        return list(self.search_results)

    async def get_account(self, username):
        self.account_calls[username] += 1
        await asyncio.sleep(0)
        if username in self.failing_accounts:
            raise TransportFailure(f"account lookup failed for {username}", status_code=500)
        if username not in self.accounts:
            raise NotFound(f"/users/{username}")
        return self.accounts[username]

    async def get_repository(self, owner, repo):
        full_name = f"{owner}/{repo}"
        self.repository_calls.append(full_name)
        if full_name in self.failing_paths:
            raise TransportFailure(f"metadata failed for {full_name}")
        if full_name not in self.repositories:
            raise NotFound(f"/repos/{full_name}")
        return self.repositories[full_name]
