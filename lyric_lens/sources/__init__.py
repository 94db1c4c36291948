"""
Song data sources

Each source wraps one external service behind the same soft-failure
``attempt(lookup)`` contract:

- GeniusLyricsSource: primary lyrics (Genius search + song page lyrics)
- LyricsOvhSource: fallback lyrics (lyrics.ovh)
- LastFmEnrichmentSource: genre/year enrichment (Last.fm, API key required)
- MusicBrainzCatalogSource: canonical title/artist/year/genre (MusicBrainz)
"""

from .base import SongSource
from .genius import GeniusLyricsSource
from .lyricsovh import LyricsOvhSource
from .lastfm import LastFmEnrichmentSource
from .musicbrainz import MusicBrainzCatalogSource

__all__ = [
    'SongSource',
    'GeniusLyricsSource',
    'LyricsOvhSource',
    'LastFmEnrichmentSource',
    'MusicBrainzCatalogSource',
]
