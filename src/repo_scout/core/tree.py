"""Recursive repository tree listing.

Directories are listed level by level from an explicit work queue, so deep
trees never grow the Python call stack and each level's listings can be
fetched concurrently. The flat file sequence is assembled afterwards in
depth-first document order, which keeps the output identical no matter in
which order the concurrent listings complete.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Optional

from .clients.base import RemoteRepoClient
from .errors import NotFound, TransportFailure
from .models import ContentEntry, EntryType, FileEntry, extension_of

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 4


def _normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    return frozenset(ext.lower() for ext in extensions if ext)


def _to_file_entry(entry: ContentEntry) -> FileEntry:
    return FileEntry(
        name=entry.name,
        path=entry.path,
        size_bytes=entry.size,
        download_url=entry.download_url,
        extension=extension_of(entry.name),
    )


async def _list_directory(
    client: RemoteRepoClient,
    semaphore: asyncio.Semaphore,
    owner: str,
    repo: str,
    path: str,
    ref: Optional[str],
) -> Optional[list[ContentEntry]]:
    """List one directory; None when the listing could not be retrieved."""
    async with semaphore:
        try:
            result = await client.get_contents(owner, repo, path, ref)
        except NotFound:
            logger.warning("Skipping %s/%s:%s, path not found", owner, repo, path or "/")
            return None
        except TransportFailure as exc:
            logger.warning("Skipping %s/%s:%s, listing failed: %s", owner, repo, path or "/", exc)
            return None
    if isinstance(result, list):
        return result
    return [result]


def _assemble(
    listings: dict[str, list[ContentEntry]],
    root: str,
    wanted: frozenset[str],
) -> list[FileEntry]:
    """Flatten the collected listings depth-first, in listing order."""
    if root not in listings:
        return []

    files: list[FileEntry] = []
    stack = [iter(listings[root])]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        if entry.type == EntryType.FILE:
            file_entry = _to_file_entry(entry)
            if not wanted or file_entry.extension in wanted:
                files.append(file_entry)
        elif entry.type == EntryType.DIR and entry.path in listings:
            stack.append(iter(listings[entry.path]))
    return files


async def list_files(
    client: RemoteRepoClient,
    owner: str,
    repo: str,
    path: str = "",
    ref: Optional[str] = None,
    extensions: Iterable[str] = (),
    *,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    max_depth: Optional[int] = None,
) -> list[FileEntry]:
    """List every file under ``path``, optionally filtered by extension.

    Args:
        client: Transport used for the directory listings.
        owner: Repository owner login.
        repo: Repository name.
        path: Directory to start from; '' for the repository root.
        ref: Branch, tag or commit. None means the default branch.
        extensions: Extensions to keep, e.g. ['.py', '.md']. Matching is
            case-insensitive and exact; an empty filter keeps every file.
        max_concurrency: Maximum directory listings in flight at once.
        max_depth: Stop descending below this many levels (0 lists only
            ``path`` itself). None walks the whole tree.

    Returns:
        FileEntry list in depth-first listing order. Subtrees whose listing
        fails are logged and left out; a transport failure never propagates.
    """
    wanted = _normalize_extensions(extensions)
    semaphore = asyncio.Semaphore(max_concurrency)
    listings: dict[str, list[ContentEntry]] = {}

    frontier = [path]
    depth = 0
    while frontier:
        results = await asyncio.gather(
            *(_list_directory(client, semaphore, owner, repo, p, ref) for p in frontier)
        )
        next_frontier: list[str] = []
        for dir_path, entries in zip(frontier, results):
            if entries is None:
                continue
            listings[dir_path] = entries
            if max_depth is not None and depth >= max_depth:
                continue
            next_frontier.extend(e.path for e in entries if e.type == EntryType.DIR)
        frontier = next_frontier
        depth += 1

    files = _assemble(listings, path, wanted)
    logger.info(
        "Listed %d files in %s/%s:%s (%d directories visited)",
        len(files), owner, repo, path or "/", len(listings),
    )
    return files
