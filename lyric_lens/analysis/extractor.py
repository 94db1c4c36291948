"""
Metadata extraction from free-text analysis

Metadata-only analyses end with two lines the model was asked to produce:

    Genre: <genre>
    Release Year: <year>

This module pulls those values out and strips the lines from the text shown
to the user. Matching is label based and case-insensitive; the model does not
always follow the format, so a missing or malformed label simply yields no
value.
"""

import re
from dataclasses import dataclass
from typing import Optional


_GENRE_PATTERN = re.compile(r'\bGenre:[ \t]*([^\n]*)', re.IGNORECASE)
_YEAR_PATTERN = re.compile(r'\bRelease Year:[^\d\n]*(\d{4})', re.IGNORECASE)
_METADATA_LINE_PATTERN = re.compile(r'\b(?:Genre|Release Year):', re.IGNORECASE)

# "Genre: Pop, Release Year: 1999" on a single line
_INLINE_YEAR_SUFFIX = re.compile(r'[,;|]?\s*\bRelease Year:.*$', re.IGNORECASE)


@dataclass(frozen=True)
class ExtractedMetadata:
    """Values found in an analysis plus the text with metadata lines removed"""
    cleaned_text: str
    genre: Optional[str] = None
    year: Optional[int] = None


def extract_metadata(analysis_text: str) -> ExtractedMetadata:
    """
    Extract genre and release year from free-text analysis

    Args:
        analysis_text: Raw model output

    Returns:
        ExtractedMetadata with genre/year when present and the cleaned text

    Example:
        >>> result = extract_metadata("## Core Theme\\nText\\nGenre: Pop\\nRelease Year: 1999")
        >>> result.genre, result.year, result.cleaned_text
        ('Pop', 1999, '## Core Theme\\nText')
    """
    text = analysis_text or ""

    return ExtractedMetadata(
        cleaned_text=_strip_metadata_lines(text),
        genre=_extract_genre(text),
        year=_extract_year(text)
    )


def _extract_genre(text: str) -> Optional[str]:
    match = _GENRE_PATTERN.search(text)
    if not match:
        return None

    genre = _INLINE_YEAR_SUFFIX.sub('', match.group(1))
    # Markdown emphasis around the value ("**Genre:** Pop")
    genre = genre.strip().strip('*_').strip()
    return genre or None


def _extract_year(text: str) -> Optional[int]:
    match = _YEAR_PATTERN.search(text)
    if not match:
        return None
    return int(match.group(1))


def _strip_metadata_lines(text: str) -> str:
    lines = [line for line in text.splitlines() if not _METADATA_LINE_PATTERN.search(line)]
    return '\n'.join(lines).strip()
