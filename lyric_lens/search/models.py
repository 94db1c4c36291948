"""
Data models for song search and resolution

These dataclasses carry song information between the query parser, the song
sources and the resolver:

- ParsedQuery: best-guess (artist, title) split of the raw user query
- SongLookup: what a source is asked about (raw query plus known title/artist)
- PartialSongInfo: whatever one source knew about the song
- ResolvedSong: merged view after all sources have been consulted

All of them are frozen: once a source has answered, its answer never changes.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from ..utils.helpers import has_lyrics


UNKNOWN_ARTIST = "Unknown Artist"

# Fields merged by the resolver, in record order
SONG_FIELDS = ('title', 'artist', 'genre', 'year', 'lyrics')


@dataclass(frozen=True)
class ParsedQuery:
    """
    Result of parsing a free-text search query

    ``artist`` is None when no heuristic matched; ``title`` then holds the
    whole trimmed query.
    """
    title: str
    artist: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """True when both artist and title were recovered"""
        return bool(self.artist and self.title)


@dataclass(frozen=True)
class SongLookup:
    """
    Request handed to a song source

    Lyrics sources work from ``raw_query``; enrichment and catalog sources
    use the ``title``/``artist`` already established by earlier sources.
    """
    raw_query: str
    title: Optional[str] = None
    artist: Optional[str] = None

    @classmethod
    def for_song(cls, raw_query: str, title: str, artist: Optional[str]) -> "SongLookup":
        return cls(raw_query=raw_query, title=title, artist=artist)


@dataclass(frozen=True)
class PartialSongInfo:
    """
    Song data returned by a single source

    Any field may be missing. ``source`` names the provider for logging and
    field provenance.
    """
    title: Optional[str] = None
    artist: Optional[str] = None
    genre: Optional[str] = None
    year: Optional[int] = None
    lyrics: Optional[str] = None
    source: str = "unknown"

    @property
    def has_lyrics(self) -> bool:
        return has_lyrics(self.lyrics)

    def is_empty(self) -> bool:
        return all(getattr(self, name) in (None, "") for name in SONG_FIELDS)


@dataclass(frozen=True)
class ResolvedSong:
    """
    Merged, best-available view of a song

    For every field the value comes from the first source (in priority order)
    that supplied a non-empty value. ``title`` and ``artist`` are always set.

    Attributes:
        provenance: (field, source) pairs recording which source won each field
    """
    title: str
    artist: str
    genre: Optional[str] = None
    year: Optional[int] = None
    lyrics: Optional[str] = None
    provenance: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def has_lyrics(self) -> bool:
        """True when lyrics hold actual lyric text (not absent, not the sentinel)"""
        return has_lyrics(self.lyrics)

    def source_of(self, field_name: str) -> Optional[str]:
        """Name of the source that supplied ``field_name``, if any"""
        for name, source in self.provenance:
            if name == field_name:
                return source
        return None

    def with_metadata(self, genre: Optional[str], year: Optional[int]) -> "ResolvedSong":
        """Copy of this song with genre/year replaced where new values are given"""
        return replace(
            self,
            genre=genre if genre else self.genre,
            year=year if year else self.year,
        )
