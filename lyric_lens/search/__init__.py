"""
Song search package

- parser: free-text query -> (artist, title)
- models: song records exchanged between sources and the resolver
- resolver: consults the sources in priority order and merges their answers

The resolver is imported from ``lyric_lens.search.resolver`` directly; it
depends on the sources package, which itself depends on these models.
"""

from .models import (
    UNKNOWN_ARTIST,
    ParsedQuery,
    SongLookup,
    PartialSongInfo,
    ResolvedSong
)
from .parser import parse_query, QueryParser

__all__ = [
    'UNKNOWN_ARTIST',
    'ParsedQuery',
    'SongLookup',
    'PartialSongInfo',
    'ResolvedSong',
    'parse_query',
    'QueryParser',
]
