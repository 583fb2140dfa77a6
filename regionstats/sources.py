"""
regionstats.sources — Stream provider for source files.

open_source() turns a location into a readable text stream:

    - a local path       → the file, opened as UTF-8 (a BOM is dropped)
    - an http(s):// URL  → the response body, fetched with requests

Any failure to open or fetch, and any empty result, raises
StreamUnavailableError naming the location.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

import requests

from regionstats.errors import StreamUnavailableError

logger = logging.getLogger("regionstats.sources")

# Timeout for HTTP requests (seconds)
TIMEOUT = 60


def is_url(location: str | Path) -> bool:
    return str(location).lower().startswith(("http://", "https://"))


def fetch_text(url: str) -> str:
    """Fetch a remote source as text."""
    logger.info("GET %s", url)
    try:
        response = requests.get(url, timeout=TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise StreamUnavailableError(f"Failed to fetch: {exc}", source=url) from exc
    response.encoding = response.encoding or "utf-8"
    return response.text


@contextmanager
def open_source(location: str | Path) -> Iterator[TextIO]:
    """Open ``location`` for sequential reading.

    Raises:
        StreamUnavailableError: if the source cannot be opened or is empty.
    """
    name = str(location)

    if is_url(location):
        text = fetch_text(name)
        if not text.strip():
            raise StreamUnavailableError("Source has no content", source=name)
        with io.StringIO(text) as stream:
            yield stream
        return

    path = Path(location)
    try:
        stream = open(path, encoding="utf-8-sig", newline="")
    except OSError as exc:
        raise StreamUnavailableError(
            f"Failed to open file: {exc.strerror or exc}", source=name
        ) from exc

    with stream:
        if path.stat().st_size == 0:
            raise StreamUnavailableError("Source has no content", source=name)
        yield stream
