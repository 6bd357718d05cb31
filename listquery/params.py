"""Normalization of the accepted query-parameter input shapes.

Every supported shape is classified once by ``classify_input`` and turned
into a starlette ``QueryParams``: an immutable, ordered multi-map that keeps
repeated keys (``multi_items()``) and answers ``get()`` with the last
occurrence.
"""

import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, List, Tuple
from urllib.parse import urlsplit

from starlette.datastructures import QueryParams

logger = logging.getLogger(__name__)


class InputKind(str, Enum):
    """Input shapes accepted by ``resolve_params``."""

    PAIRS = "pairs"  # QueryParams-like multi-map, or an iterable of pairs
    REQUEST = "request"  # anything exposing a .url
    URL = "url"  # URL object or URL / query string
    MAPPING = "mapping"  # plain single-valued dict
    UNKNOWN = "unknown"


def classify_input(raw: Any) -> InputKind:
    """Decide which input shape ``raw`` is.

    The checks run in a fixed order: starlette's ``Request`` is itself a
    Mapping, so the ``.url`` check has to come before the Mapping check.
    """
    if hasattr(raw, "multi_items"):
        return InputKind.PAIRS
    if isinstance(raw, (str, bytes)):
        return InputKind.URL
    if hasattr(raw, "url"):
        return InputKind.REQUEST
    if hasattr(raw, "query") and hasattr(raw, "scheme"):
        return InputKind.URL
    if isinstance(raw, Mapping):
        return InputKind.MAPPING
    if isinstance(raw, Iterable):
        return InputKind.PAIRS
    return InputKind.UNKNOWN


def _looks_like_url(text: str) -> bool:
    # "/resources?status=x" has a path before "?"; "q=what?&next=http://x" does not.
    head = text.partition("?")[0]
    if "=" in head or "&" in head:
        return False
    return "?" in text or "://" in head


def _query_string(url: Any) -> str:
    if isinstance(url, bytes):
        url = url.decode("latin-1")
    if isinstance(url, str):
        if _looks_like_url(url):
            return urlsplit(url).query
        # Bare query string ("status=active&limit=5")
        return url
    query = url.query
    if isinstance(query, bytes):
        query = query.decode("ascii")
    return query or ""


def _pairs_from_mapping(raw: Mapping) -> List[Tuple[str, str]]:
    pairs: List[Tuple[str, str]] = []
    for key, value in raw.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((str(key), str(item)) for item in value)
        else:
            pairs.append((str(key), str(value)))
    return pairs


def _pairs_from_iterable(raw: Any) -> List[Tuple[str, str]]:
    items = raw.multi_items() if hasattr(raw, "multi_items") else raw
    return [(str(key), str(value)) for key, value in items]


def resolve_params(raw: Any) -> QueryParams:
    """Normalize any supported input into an ordered ``QueryParams``.

    Accepted shapes:
        - QueryParams-like objects (starlette / FastAPI, httpx) and iterables
          of ``(key, value)`` pairs; order and duplicates are kept
        - Request-like objects (starlette ``Request``, ``httpx.Request``);
          the query string of ``request.url`` is used
        - URL objects and strings; a string is read as a URL when it has a
          path or ``scheme://`` before its first ``?``, otherwise as a bare
          query string
        - Plain mappings; list/tuple values become repeated keys and
          ``None`` values are dropped

    Never raises. Anything unrecognized normalizes to empty params.
    """
    kind = classify_input(raw)
    try:
        if kind is InputKind.PAIRS:
            return QueryParams(_pairs_from_iterable(raw))
        if kind is InputKind.REQUEST:
            return QueryParams(_query_string(raw.url))
        if kind is InputKind.URL:
            return QueryParams(_query_string(raw))
        if kind is InputKind.MAPPING:
            return QueryParams(_pairs_from_mapping(raw))
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning(f"Could not read query parameters from {type(raw).__name__}: {e}")
        return QueryParams()

    logger.warning(f"Unsupported query parameter input: {type(raw).__name__}")
    return QueryParams()
