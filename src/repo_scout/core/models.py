"""Pydantic data models shared by the client, the core and the server.

The GitHub client, the core operations and the MCP tool server all speak
these models. Transport shapes (ContentEntry, Account) mirror the GitHub REST
payloads; the rest are what the core produces.
"""

from __future__ import annotations

import posixpath
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EntryType(str, Enum):
    """Kinds of object a contents listing can return."""

    FILE = "file"
    DIR = "dir"
    SYMLINK = "symlink"
    SUBMODULE = "submodule"


class AccountType(str, Enum):
    """Owner account type."""

    ORGANIZATION = "organization"
    USER = "user"
    UNKNOWN = "unknown"

    @classmethod
    def from_github(cls, value: Optional[str]) -> "AccountType":
        """Map GitHub's 'Organization'/'User' type strings."""
        normalized = (value or "").strip().lower()
        if normalized == "organization":
            return cls.ORGANIZATION
        if normalized == "user":
            return cls.USER
        return cls.UNKNOWN


class TrendWindow(str, Enum):
    """Coarse lookback windows for trending searches."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# ─── Transport shapes ────────────────────────────────────────────────────────


class ContentEntry(BaseModel):
    """One item of a contents listing, or a single file blob."""

    type: EntryType
    name: str
    path: str
    size: int = 0
    sha: Optional[str] = None
    encoding: Optional[str] = None
    content: Optional[str] = None
    download_url: Optional[str] = None


class Account(BaseModel):
    """A GitHub user or organization account."""

    login: str
    name: Optional[str] = None
    type: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    blog: Optional[str] = None
    html_url: Optional[str] = None
    avatar_url: Optional[str] = None
    public_repos: int = 0
    followers: int = 0
    following: int = 0
    created_at: Optional[datetime] = None


# ─── Crawl results ───────────────────────────────────────────────────────────


def extension_of(name: str) -> str:
    """Lower-cased suffix including the dot, or '' (dot-files have none)."""
    return posixpath.splitext(name)[1].lower()


class FileEntry(BaseModel):
    """A file discovered while walking a repository tree."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    size_bytes: int = 0
    download_url: Optional[str] = None
    extension: str = ""


class FileContent(BaseModel):
    """A single file with its content decoded to text."""

    name: str
    path: str
    size_bytes: int = 0
    content: str
    encoding: Optional[str] = None
    content_hash: Optional[str] = Field(None, description="Blob SHA reported by the remote")
    download_url: Optional[str] = None


# ─── Repositories and businesses ─────────────────────────────────────────────


class RepoSummary(BaseModel):
    """Repository metadata as returned by search or a direct lookup."""

    id: int
    name: str
    full_name: str
    owner_login: str
    description: Optional[str] = None
    url: Optional[str] = None
    clone_url: Optional[str] = None
    language: Optional[str] = None
    star_count: int = 0
    fork_count: int = 0
    open_issue_count: int = 0
    topics: set[str] = Field(default_factory=set)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    license_name: Optional[str] = None
    homepage: Optional[str] = None


class RepositoryBrief(BaseModel):
    """Condensed repository entry attached to a business profile."""

    name: str
    description: Optional[str] = None
    language: Optional[str] = None
    star_count: int = 0
    url: Optional[str] = None

    @classmethod
    def from_summary(cls, repo: RepoSummary) -> "RepositoryBrief":
        return cls(
            name=repo.name,
            description=repo.description,
            language=repo.language,
            star_count=repo.star_count,
            url=repo.url,
        )


class BusinessProfile(BaseModel):
    """One owner plus the repositories of theirs matched by a discovery run."""

    owner_login: str
    display_name: Optional[str] = None
    account_type: AccountType = AccountType.UNKNOWN
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    url: Optional[str] = None
    avatar_url: Optional[str] = None
    public_repo_count: int = 0
    follower_count: int = 0
    following_count: int = 0
    created_at: Optional[datetime] = None
    repositories: list[RepositoryBrief] = Field(default_factory=list)

    @classmethod
    def from_account(
        cls,
        account: Account,
        owner_login: Optional[str] = None,
        repositories: Optional[list[RepositoryBrief]] = None,
    ) -> "BusinessProfile":
        return cls(
            owner_login=owner_login or account.login,
            display_name=account.name,
            account_type=AccountType.from_github(account.type),
            bio=account.bio,
            location=account.location,
            website=account.blog or None,
            url=account.html_url,
            avatar_url=account.avatar_url,
            public_repo_count=account.public_repos,
            follower_count=account.followers,
            following_count=account.following,
            created_at=account.created_at,
            repositories=list(repositories or []),
        )

    @property
    def total_stars(self) -> int:
        return sum(r.star_count for r in self.repositories)


class BusinessCriteria(BaseModel):
    """Search criteria for business discovery.

    Every filter is optional. Blank strings count as absent. Unknown keys are
    rejected so a misspelled criterion fails loudly instead of widening the
    search.
    """

    model_config = ConfigDict(extra="forbid")

    industry: Optional[str] = Field(None, description="GitHub topic, e.g. 'fintech'")
    technology: Optional[str] = Field(None, description="Primary language, e.g. 'Go'")
    location: Optional[str] = Field(None, description="Owner location, e.g. 'Berlin'")
    company: Optional[str] = Field(None, description="Substring of repository name or description")
    min_stars: Optional[int] = Field(None, ge=0, description="Lower bound on stars")
    limit: int = Field(50, ge=1, le=100, description="Maximum repositories to inspect")

    @field_validator("industry", "technology", "location", "company", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("location")
    @classmethod
    def _no_quotes(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and '"' in value:
            raise ValueError("location must not contain double quotes")
        return value


# ─── Analysis ────────────────────────────────────────────────────────────────


class AnalyzedRepository(BaseModel):
    """The subset of repository metadata reported alongside an analysis."""

    full_name: str
    description: Optional[str] = None
    language: Optional[str] = None
    star_count: int = 0
    fork_count: int = 0
    open_issue_count: int = 0
    topics: set[str] = Field(default_factory=set)
    license_name: Optional[str] = None
    homepage: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_summary(cls, repo: RepoSummary) -> "AnalyzedRepository":
        return cls(
            full_name=repo.full_name,
            description=repo.description,
            language=repo.language,
            star_count=repo.star_count,
            fork_count=repo.fork_count,
            open_issue_count=repo.open_issue_count,
            topics=set(repo.topics),
            license_name=repo.license_name,
            homepage=repo.homepage,
            created_at=repo.created_at,
            updated_at=repo.updated_at,
        )


class RepoAnalysis(BaseModel):
    """Business-likelihood analysis of a single repository."""

    repository: AnalyzedRepository
    indicators: dict[str, bool] = Field(description="Indicator name to whether it fired")
    matched_keywords: list[str] = Field(default_factory=list, description="Unique, in vocabulary order")
    business_score: int = Field(ge=0, description="True indicators plus matched keywords")
