"""
Helper functions for text handling shared by the lyrics sources and the
analysis pipeline
"""

import re
from datetime import datetime, timezone
from typing import Any, Optional


# Sentinel stored when a lyrics source matched a song but had no lyric text
LYRICS_NOT_FOUND = "Lyrics not found"

_YEAR_PATTERN = re.compile(r'\d{4}')


def extract_year(value: Any) -> Optional[int]:
    """
    Extract the first 4-digit year from a date-like value

    Args:
        value: Date string such as "March 3, 1999", "1999-03-03" or an int

    Returns:
        Year as integer or None if no year is present
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value if 1000 <= value <= 9999 else None

    match = _YEAR_PATTERN.search(str(value))
    if not match:
        return None
    return int(match.group(0))


def clean_text(value: Any) -> Optional[str]:
    """
    Collapse whitespace and strip a value

    Args:
        value: Any value, typically a string from an API response

    Returns:
        Cleaned string or None when nothing meaningful remains
    """
    if value is None:
        return None
    text = re.sub(r'\s+', ' ', str(value)).strip()
    return text or None


def clean_lyrics_text(lyrics: str) -> str:
    """
    Clean lyrics text by removing metadata and page artifacts

    Section headers like ``[Chorus]`` are dropped, Genius page leftovers
    ("123 Contributors", "Embed", "You might also like") are removed and runs
    of blank lines are collapsed to a single stanza break.

    Args:
        lyrics: Raw lyrics text

    Returns:
        Cleaned lyrics text
    """
    if not lyrics:
        return ""

    patterns_to_remove = [
        r'^\s*\[.*?\]\s*$',                   # Section headers on their own line
        r'^.*?\d*\s*Contributors?.*?Lyrics',  # Genius page title prefix
        r'\d*\s*Embed\s*$',                   # Genius embed counter
        r'You might also like',
    ]

    cleaned = lyrics
    for pattern in patterns_to_remove:
        cleaned = re.sub(pattern, '', cleaned, flags=re.IGNORECASE | re.MULTILINE)

    # Normalize line endings and collapse blank-line runs
    lines = [line.strip() for line in cleaned.replace('\r\n', '\n').split('\n')]
    cleaned = '\n'.join(lines)
    cleaned = re.sub(r'\n{3,}', '\n\n', cleaned)

    return cleaned.strip()


def validate_lyrics_content(lyrics: Optional[str], min_length: int = 20) -> bool:
    """
    Validate if lyrics content is meaningful

    Args:
        lyrics: Lyrics text to validate
        min_length: Minimum length for valid lyrics

    Returns:
        True if lyrics are valid
    """
    if not lyrics or len(lyrics.strip()) < min_length:
        return False

    if lyrics.strip() == LYRICS_NOT_FOUND:
        return False

    # Check for common "no lyrics" indicators
    no_lyrics_indicators = [
        '[instrumental]',
        'lyrics not available',
        'sorry, no lyrics',
        "we do not have the lyrics",
    ]

    lyrics_lower = lyrics.lower()
    for indicator in no_lyrics_indicators:
        if indicator in lyrics_lower:
            return False

    if lyrics_lower.strip() in ('instrumental', 'no lyrics', 'music only'):
        return False

    # Check if it's mostly non-text characters
    text_chars = sum(1 for c in lyrics if c.isalnum() or c.isspace())
    if text_chars / len(lyrics) < 0.7:
        return False

    return True


def has_lyrics(lyrics: Optional[str]) -> bool:
    """True when ``lyrics`` holds actual lyric text rather than nothing or the sentinel"""
    return bool(lyrics and lyrics.strip() and lyrics.strip() != LYRICS_NOT_FOUND)


def get_current_timestamp() -> str:
    """Get current UTC timestamp in ISO format"""
    return datetime.now(timezone.utc).isoformat()
