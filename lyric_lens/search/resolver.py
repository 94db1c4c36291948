"""
Song resolution across multiple unreliable sources

The resolver turns a raw query into one ResolvedSong by consulting the song
sources in a fixed order:

1. Lyrics sources (Genius, then lyrics.ovh); the first one with data wins
   and Last.fm enrichment is keyed on its title/artist.
2. When no lyrics source has data, the query itself is parsed into a
   minimal record (artist "Unknown Artist" when it cannot be split).
3. MusicBrainz is always consulted last with the title/artist known so far.

Partial answers are combined by :func:`merge_partials`, a reducer that takes
each field from the first source (in priority order) that supplied a
non-empty value. Because MusicBrainz sits at the end of that list, catalog
data only ever fills gaps.
"""

from typing import List, Optional, Sequence

import requests

from ..config.settings import Settings, get_settings
from ..core.exceptions import SongNotFoundError
from ..sources.base import SongSource
from ..utils.logger import get_logger, OperationLogger
from .models import (
    SONG_FIELDS,
    UNKNOWN_ARTIST,
    PartialSongInfo,
    ResolvedSong,
    SongLookup
)
from .parser import parse_query


logger = get_logger(__name__)


def _has_value(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def merge_partials(
    partials: Sequence[PartialSongInfo],
    default_title: str,
    default_artist: str = UNKNOWN_ARTIST
) -> ResolvedSong:
    """
    Merge partial song records field by field, first non-empty value wins

    Args:
        partials: Source answers in priority order (highest first)
        default_title: Title used when no partial has one
        default_artist: Artist used when no partial has one

    Returns:
        ResolvedSong whose every field comes from exactly one partial
    """
    values = {}
    provenance = []

    for field_name in SONG_FIELDS:
        for partial in partials:
            value = getattr(partial, field_name)
            if _has_value(value):
                values[field_name] = value
                provenance.append((field_name, partial.source))
                logger.debug(f"field={field_name} source={partial.source}")
                break

    return ResolvedSong(
        title=values.get('title') or default_title,
        artist=values.get('artist') or default_artist,
        genre=values.get('genre'),
        year=values.get('year'),
        lyrics=values.get('lyrics'),
        provenance=tuple(provenance)
    )


class SongResolver:
    """
    Orchestrates song sources and merges their answers

    Attributes:
        lyrics_sources: Lyrics sources in priority order
        enrichment_source: Optional metadata enrichment source
        catalog_source: Optional canonical catalog source, consulted last
    """

    def __init__(
        self,
        lyrics_sources: Sequence[SongSource],
        enrichment_source: Optional[SongSource] = None,
        catalog_source: Optional[SongSource] = None
    ):
        self.lyrics_sources = list(lyrics_sources)
        self.enrichment_source = enrichment_source
        self.catalog_source = catalog_source

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SongResolver":
        """
        Build the standard Genius -> lyrics.ovh -> Last.fm -> MusicBrainz chain

        All sources share one HTTP session so connections are pooled.
        """
        from ..sources import (
            GeniusLyricsSource,
            LyricsOvhSource,
            LastFmEnrichmentSource,
            MusicBrainzCatalogSource
        )

        settings = settings or get_settings()
        session = requests.Session()
        session.headers.update({'User-Agent': settings.network.user_agent})

        return cls(
            lyrics_sources=[
                GeniusLyricsSource(settings, session),
                LyricsOvhSource(settings, session),
            ],
            enrichment_source=LastFmEnrichmentSource(settings, session),
            catalog_source=MusicBrainzCatalogSource(settings, session),
        )

    @property
    def sources(self) -> List[SongSource]:
        """Every configured source in consultation order"""
        sources = list(self.lyrics_sources)
        for source in (self.enrichment_source, self.catalog_source):
            if source is not None:
                sources.append(source)
        return sources

    def resolve(self, raw_query: str) -> ResolvedSong:
        """
        Resolve a raw query into a merged song record

        Args:
            raw_query: Search text as typed by the user

        Returns:
            ResolvedSong with at least title and artist populated

        Raises:
            SongNotFoundError: If the query is empty or whitespace
        """
        query = (raw_query or "").strip()
        if not query:
            raise SongNotFoundError("Song not found", details={'query': raw_query})

        operation = OperationLogger(logger, f"Resolve: {query}")
        operation.start()

        parsed = parse_query(query)
        default_title = parsed.title or query
        default_artist = parsed.artist or UNKNOWN_ARTIST

        partials: List[PartialSongInfo] = []
        lyrics_result = self._first_lyrics_result(SongLookup(raw_query=query))

        if lyrics_result is not None:
            partials.append(lyrics_result)
            enrichment = self._enrich(query, lyrics_result, default_title, default_artist)
            if enrichment is not None:
                partials.append(enrichment)
        else:
            operation.progress("no lyrics source had data, falling back to query parse")
            partials.append(self._from_query(query))

        known = merge_partials(partials, default_title, default_artist)

        if self.catalog_source is not None:
            canonical = self.catalog_source.attempt(
                SongLookup.for_song(query, known.title, known.artist)
            )
            if canonical is not None:
                partials.append(canonical)

        resolved = merge_partials(partials, default_title, default_artist)
        operation.complete()
        logger.info(
            f"Resolved '{query}' to {resolved.artist} - {resolved.title} "
            f"(genre={resolved.genre}, year={resolved.year}, lyrics={resolved.has_lyrics})"
        )
        return resolved

    def _first_lyrics_result(self, lookup: SongLookup) -> Optional[PartialSongInfo]:
        for source in self.lyrics_sources:
            result = source.attempt(lookup)
            if result is not None:
                return result
        return None

    def _enrich(
        self,
        query: str,
        lyrics_result: PartialSongInfo,
        default_title: str,
        default_artist: str
    ) -> Optional[PartialSongInfo]:
        if self.enrichment_source is None:
            return None
        lookup = SongLookup.for_song(
            query,
            lyrics_result.title or default_title,
            lyrics_result.artist or default_artist
        )
        return self.enrichment_source.attempt(lookup)

    @staticmethod
    def _from_query(query: str) -> PartialSongInfo:
        """Minimal record from the query alone; no network call"""
        parsed = parse_query(query)
        if not parsed.is_complete:
            return PartialSongInfo(title=query, artist=UNKNOWN_ARTIST, source="query")
        return PartialSongInfo(title=parsed.title, artist=parsed.artist, source="query")
