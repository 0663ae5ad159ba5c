"""Archive URL resolution and validation for location terms."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Optional
from urllib.parse import quote, urlparse

from venue_hierarchy.schemas.location import TermNode

logger = logging.getLogger(__name__)

ArchiveUrlResolver = Callable[[TermNode], Optional[str]]

_ALLOWED_SCHEMES = {"http", "https"}


def is_safe_url(url: str | None) -> bool:
    """
    Accept absolute http(s) URLs and root-relative paths only.

    Rejects ``javascript:`` and other schemes, protocol-relative URLs and
    anything containing whitespace or control characters.
    """
    if not url or any(ch.isspace() or ord(ch) < 32 for ch in url):
        return False
    if url.startswith("//"):
        return False
    if url.startswith("/"):
        return True
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme.lower() in _ALLOWED_SCHEMES and bool(parsed.netloc)


class TermArchiveLinker:
    """Build archive URLs of the form ``{base_url}/{slug}/``."""

    def __init__(self, base_url: str = "/location") -> None:
        self.base_url = base_url.rstrip("/")

    def __call__(self, term: TermNode) -> str | None:
        if not term.slug:
            return None
        return f"{self.base_url}/{quote(term.slug, safe='-')}/"


def resolve_url(resolver: ArchiveUrlResolver | None, term: TermNode) -> str | None:
    """
    Run ``resolver`` for ``term``, returning None on failure or unsafe output.

    Link resolution failing for one term must not break the rest of the
    rendering.
    """
    if resolver is None:
        return None
    try:
        url = resolver(term)
    except Exception as e:
        logger.warning(f"Could not resolve archive URL for term {term.term_id}: {e}")
        return None
    return url if is_safe_url(url) else None
