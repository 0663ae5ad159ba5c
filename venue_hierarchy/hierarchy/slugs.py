"""
Slug generation for location terms.

Slugs are the identity of a term within its namespace, so generation must be
deterministic: the same name and locale always give the same slug.

Transliteration runs in two passes. Locale-specific replacements come first
(German umlauts become two letters, ``München`` -> ``muenchen``), then Unicode
NFKD decomposition strips the remaining accents (``São`` -> ``sao``). Names
with nothing transliterable (``東京``) get a hash-derived slug instead of an
empty one.
"""

from __future__ import annotations

import hashlib
import re
import unicodedata

from venue_hierarchy.schemas.location import HierarchyLevel

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

# Applied for every locale, after the locale-specific table.
_COMMON_REPLACEMENTS: dict[str, str] = {
    "ß": "ss",
    "ẞ": "ss",
    "æ": "ae",
    "Æ": "ae",
    "œ": "oe",
    "Œ": "oe",
    "ø": "o",
    "Ø": "o",
    "đ": "d",
    "Đ": "d",
    "ð": "d",
    "Ð": "d",
    "ł": "l",
    "Ł": "l",
    "þ": "th",
    "Þ": "th",
    "ı": "i",
}

_LOCALE_REPLACEMENTS: dict[str, dict[str, str]] = {
    "de": {
        "ä": "ae",
        "Ä": "ae",
        "ö": "oe",
        "Ö": "oe",
        "ü": "ue",
        "Ü": "ue",
    },
    "da": {"æ": "ae", "Æ": "ae", "ø": "oe", "Ø": "oe", "å": "aa", "Å": "aa"},
}
_LOCALE_REPLACEMENTS["nb"] = _LOCALE_REPLACEMENTS["da"]
_LOCALE_REPLACEMENTS["nn"] = _LOCALE_REPLACEMENTS["da"]
_LOCALE_REPLACEMENTS["no"] = _LOCALE_REPLACEMENTS["da"]

# Country codes whose names are slugged with the country's own rules.
COUNTRY_LOCALES: dict[str, str] = {
    "de": "de",
    "at": "de",
    "ch": "de",
    "lu": "de",
    "li": "de",
    "dk": "da",
    "no": "nb",
}

HASH_FALLBACK_PREFIX = "term-"


def _language(locale: str | None) -> str:
    """``de_AT`` / ``de-at`` -> ``de``."""
    if not locale:
        return ""
    return re.split(r"[_-]", locale.strip().lower(), maxsplit=1)[0]


def transliterate(text: str, locale: str | None = None) -> str:
    """Return an ASCII approximation of ``text`` using ``locale`` rules."""
    table = _LOCALE_REPLACEMENTS.get(_language(locale), {})
    if table:
        text = "".join(table.get(ch, ch) for ch in text)
    text = "".join(_COMMON_REPLACEMENTS.get(ch, ch) for ch in text)

    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).encode(
        "ascii", "ignore"
    ).decode("ascii")


def hash_slug(name: str) -> str:
    """Deterministic fallback for names with no ASCII representation."""
    digest = hashlib.sha1(name.strip().encode("utf-8")).hexdigest()
    return f"{HASH_FALLBACK_PREFIX}{digest[:10]}"


class SlugGenerator:
    """Produce canonical, URL-safe slugs for location term names."""

    def __init__(self, default_locale: str | None = None) -> None:
        self.default_locale = default_locale

    def slugify(self, name: str, locale: str | None = None) -> str:
        """
        Slug for ``name``.

        Returns an empty string only for blank input.
        """
        if not name or not name.strip():
            return ""
        ascii_text = transliterate(name, locale or self.default_locale).lower()
        slug = _NON_ALNUM_RE.sub("-", ascii_text).strip("-")
        return slug or hash_slug(name)

    def for_level(
        self,
        name: str,
        level: HierarchyLevel | int,
        country_code: str | None = None,
    ) -> str:
        """
        Slug for a term at ``level``.

        Country terms use the lower-cased country code, which keeps country
        archive URLs short and independent of the geocoder's language. Other
        levels are transliterated with the country's locale rules.
        """
        code = (country_code or "").strip().lower()
        if int(level) == HierarchyLevel.COUNTRY and code:
            return code
        return self.slugify(name, COUNTRY_LOCALES.get(code))
