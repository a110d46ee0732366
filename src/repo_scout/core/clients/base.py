"""The transport surface the core consumes.

Anything with these four coroutines can drive the crawler, the aggregator
and the analyzer: the GitHub client in production, a stub in tests.
"""

from __future__ import annotations

from typing import Optional, Protocol, Union

from ..models import Account, ContentEntry, RepoSummary


class RemoteRepoClient(Protocol):
    async def get_contents(
        self,
        owner: str,
        repo: str,
        path: str = "",
        ref: Optional[str] = None,
    ) -> Union[ContentEntry, list[ContentEntry]]:
        """A directory listing (list) or a single file/blob entry.

        Raises NotFound when the path does not exist, TransportFailure otherwise.
        """
        ...

    async def search_repositories(
        self,
        query: str,
        *,
        sort: str = "stars",
        order: str = "desc",
        per_page: int = 30,
        page: int = 1,
    ) -> list[RepoSummary]:
        ...

    async def get_account(self, username: str) -> Account:
        ...

    async def get_repository(self, owner: str, repo: str) -> RepoSummary:
        ...
