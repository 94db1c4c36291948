"""
Free-text query parsing

Turns what a user typed into a best-guess (artist, title) pair. Heuristics are
tried in a fixed order and the first match wins:

1. "Artist - Title"   (split on the first " - ", the rest stays in the title)
2. "Artist: Title"    (same rule with ": ")
3. "Title by Artist"  ("by" as a whole word, any case)
4. "Title (Artist)"   (trailing parenthetical)
5. anything else      -> title only

Parsing never fails; the worst case is the trimmed input as the title.
"""

import re

from .models import ParsedQuery
from ..utils.logger import get_logger


logger = get_logger(__name__)

_SEPARATORS = (" - ", ": ")
_BY_PATTERN = re.compile(r'^(.+?)\s+by\s+(.+)$', re.IGNORECASE)
_PARENTHESES_PATTERN = re.compile(r'^(.+?)\s*\((.+?)\)$')


def parse_query(raw: str) -> ParsedQuery:
    """
    Parse a raw search string into artist and title

    Args:
        raw: Search text as typed by the user

    Returns:
        ParsedQuery with ``artist`` set when a heuristic matched

    Example:
        >>> parse_query("Sia - Chandelier - Live")
        ParsedQuery(title='Chandelier - Live', artist='Sia')
        >>> parse_query("Hotel California by Eagles")
        ParsedQuery(title='Hotel California', artist='Eagles')
    """
    trimmed = (raw or "").strip()

    for separator in _SEPARATORS:
        if separator in trimmed:
            artist, _, title = trimmed.partition(separator)
            return _build(title, artist)

    by_match = _BY_PATTERN.match(trimmed)
    if by_match:
        return _build(by_match.group(1), by_match.group(2))

    parentheses_match = _PARENTHESES_PATTERN.match(trimmed)
    if parentheses_match:
        return _build(parentheses_match.group(1), parentheses_match.group(2))

    logger.debug(f"No artist pattern matched, using whole query as title: '{trimmed}'")
    return ParsedQuery(title=trimmed)


def _build(title: str, artist: str) -> ParsedQuery:
    """Trim both parts; an empty artist becomes None"""
    return ParsedQuery(title=title.strip(), artist=artist.strip() or None)


class QueryParser:
    """
    Thin object wrapper around :func:`parse_query`

    Sources receive a parser instance so tests can substitute their own.
    """

    def parse(self, raw: str) -> ParsedQuery:
        return parse_query(raw)
