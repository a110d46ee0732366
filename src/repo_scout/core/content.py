"""Single-file retrieval with transport decoding."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional

from .clients.base import RemoteRepoClient
from .errors import DecodeFailure, NotFound, TransportFailure
from .models import ContentEntry, EntryType, FileContent

logger = logging.getLogger(__name__)

TEXT_ENCODINGS = {"", "utf-8", "utf8"}


def decode_content(entry: ContentEntry) -> str:
    """Return the entry's content as text.

    Base64 payloads are decoded as UTF-8; payloads without an encoding pass
    through unchanged. Raises DecodeFailure instead of returning partial text.
    """
    encoding = (entry.encoding or "").lower()

    if encoding == "base64":
        if entry.content is None:
            raise DecodeFailure(f"{entry.path}: base64 entry has no content")
        try:
            # GitHub wraps payloads at 60 columns; anything else must be base64.
            raw = base64.b64decode("".join(entry.content.split()), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DecodeFailure(f"{entry.path}: invalid base64 payload") from exc
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeFailure(f"{entry.path}: content is not UTF-8 text") from exc

    if encoding in TEXT_ENCODINGS:
        if entry.content is None:
            raise DecodeFailure(f"{entry.path}: no content returned")
        return entry.content

    # GitHub reports encoding "none" for blobs too large to inline.
    raise DecodeFailure(f"{entry.path}: unsupported encoding {entry.encoding!r}")


async def fetch_file(
    client: RemoteRepoClient,
    owner: str,
    repo: str,
    file_path: str,
    ref: Optional[str] = None,
) -> Optional[FileContent]:
    """Fetch one file and decode it to text.

    Returns None when the file does not exist, is not a file, cannot be
    retrieved, or cannot be decoded. The caller decides whether that matters.
    """
    try:
        result = await client.get_contents(owner, repo, file_path, ref)
    except NotFound:
        logger.debug("%s not found in %s/%s", file_path, owner, repo)
        return None
    except TransportFailure as exc:
        logger.warning("Failed to fetch %s from %s/%s: %s", file_path, owner, repo, exc)
        return None

    if isinstance(result, list) or result.type != EntryType.FILE:
        logger.debug("%s in %s/%s is not a file", file_path, owner, repo)
        return None

    try:
        text = decode_content(result)
    except DecodeFailure as exc:
        logger.warning("Could not decode %s from %s/%s: %s", file_path, owner, repo, exc)
        return None

    return FileContent(
        name=result.name,
        path=result.path,
        size_bytes=result.size,
        content=text,
        encoding=result.encoding,
        content_hash=result.sha,
        download_url=result.download_url,
    )
