from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = ".pdf"


def _suffix_for(url: str) -> str:
    suffix = PurePosixPath(urlparse(url).path).suffix
    return suffix if suffix and len(suffix) <= 5 else DEFAULT_SUFFIX


async def fetch_resume(
    url: str,
    timeout_seconds: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Path:
    """
    Download a resume to a temporary file and return its path.

    The caller owns the file and must delete it (see ``discard_resume``).
    Raises ``httpx.HTTPError`` on transport or status errors, ``httpx.InvalidURL``
    for a malformed URL and ``OSError`` if the temporary file cannot be written.
    """
    async with httpx.AsyncClient(timeout=timeout_seconds, follow_redirects=True, transport=transport) as client:
        resp = await client.get(url)
        resp.raise_for_status()

    with tempfile.NamedTemporaryFile(delete=False, suffix=_suffix_for(url)) as f:
        f.write(resp.content)
        path = Path(f.name)

    logger.info(f"Downloaded resume ({len(resp.content)} bytes) to {path}")
    return path


def discard_resume(path: Optional[Path]) -> None:
    if path is None:
        return
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
