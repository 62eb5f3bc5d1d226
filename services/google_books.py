# services/google_books.py — title/author search against Google Books
import logging
from typing import Dict, List, Optional

import httpx

from exceptions import InvalidSearch, UpstreamError
from models import (
    DEFAULT_AUTHOR,
    DEFAULT_DESCRIPTION,
    DEFAULT_ISBN,
    DEFAULT_TITLE,
    PLACEHOLDER_IMAGE,
)
from schemas import SearchResult

logger = logging.getLogger(__name__)

GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"
SEARCH_MODES = {"title": "intitle", "author": "inauthor"}


class GoogleBooksClient:
    """Issues one volume search per call. No retries, no caching.

    ``transport`` is handed to ``httpx.AsyncClient`` so tests can stand in a
    ``httpx.MockTransport`` for the real service.
    """

    def __init__(self, base_url: str = GOOGLE_BOOKS_URL,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url
        self._transport = transport

    async def search(self, term: str, mode: str) -> List[Dict]:
        """Return the raw ``volumeInfo`` record of every matching volume.

        Raises :class:`InvalidSearch` for a mode other than ``title`` or ``author``
        and :class:`UpstreamError` when the service cannot be reached or
        answers with a non-2xx status or a body that is not a volume list.
        """
        if mode not in SEARCH_MODES:
            raise InvalidSearch(f"Unknown search mode {mode!r}, expected 'title' or 'author'")
        query = f"{SEARCH_MODES[mode]}:{term}"

        async with httpx.AsyncClient(transport=self._transport, follow_redirects=True) as client:
            try:
                r = await client.get(self.base_url, params={"q": query})
                r.raise_for_status()
                payload = r.json()
            except httpx.HTTPError as e:
                raise UpstreamError(f"Google Books request failed: {e}") from e
            except ValueError as e:
                raise UpstreamError(f"Google Books returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise UpstreamError("Google Books returned an unexpected response shape")
        items = payload.get("items") or []
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise UpstreamError("Google Books returned an unexpected response shape")
        logger.info("Google Books %s search for %r returned %d volumes", mode, term, len(items))
        return [_as_dict(item.get("volumeInfo")) for item in items]


def normalize(info: Dict) -> SearchResult:
    """Shape one raw ``volumeInfo`` record into a search result.

    Each field falls back to its default on its own, so a record with no
    fields at all, or fields of the wrong type, yields the all-defaults book.
    """
    info = _as_dict(info)
    authors = info.get("authors")
    author = authors[0] if isinstance(authors, list) and authors else None
    identifiers = info.get("industryIdentifiers")
    first = _as_dict(identifiers[0]) if isinstance(identifiers, list) and identifiers else {}
    identifier = first.get("identifier")
    thumbnail = _as_dict(info.get("imageLinks")).get("smallThumbnail")

    return SearchResult(
        title=_text(info.get("title")) or DEFAULT_TITLE,
        author=_text(author) or DEFAULT_AUTHOR,
        isbn=f"ISBN_13 {identifier}" if identifier else DEFAULT_ISBN,
        image_url=_https(thumbnail) if isinstance(thumbnail, str) and thumbnail else PLACEHOLDER_IMAGE,
        description=_text(info.get("description")) or DEFAULT_DESCRIPTION,
        id=str(identifier) if identifier else "",
    )


def _as_dict(value) -> Dict:
    return value if isinstance(value, dict) else {}


def _text(value) -> str:
    return value if isinstance(value, str) else ""


def _https(url: str) -> str:
    # only a leading scheme is upgraded
    if url.startswith("http://"):
        return "https://" + url[len("http://"):]
    return url
