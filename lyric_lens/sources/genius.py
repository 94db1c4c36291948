"""
Genius integration: primary lyrics source

Genius is searched with the artist and title recovered from the user's query.
The first hit supplies the canonical title, primary artist and release year,
and the lyric text is then fetched from the hit's song page through
lyricsgenius.

When the song page yields no usable lyrics the hit is still returned (its
metadata is valuable) with the "Lyrics not found" sentinel in place of the
text, which routes the song to metadata-only analysis.
"""

from typing import Any, Dict, Optional

import lyricsgenius
import requests

from ..config.settings import Settings
from ..core.exceptions import SourceUnavailableError
from ..search.models import PartialSongInfo, SongLookup
from ..search.parser import QueryParser
from ..utils.helpers import (
    LYRICS_NOT_FOUND,
    clean_lyrics_text,
    extract_year,
    validate_lyrics_content
)
from .base import SongSource


class GeniusLyricsSource(SongSource):
    """
    Genius API lyrics source

    Needs ``lyrics.genius_access_token``. The lyricsgenius client is created
    lazily on first use and configured without retries: every Genius call is
    a single best-effort attempt.
    """

    name = "genius"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        parser: Optional[QueryParser] = None,
        client: Optional[lyricsgenius.Genius] = None
    ):
        super().__init__(settings, session)
        self.parser = parser or QueryParser()
        self.access_token = self.settings.lyrics.genius_access_token
        self.clean_lyrics = self.settings.lyrics.clean_lyrics
        self.min_length = self.settings.lyrics.min_length

        # Lazy-initialized Genius client (created when first needed)
        self._genius_client = client

    @property
    def genius_client(self) -> lyricsgenius.Genius:
        """
        Get authenticated Genius API client with lazy initialization

        Raises:
            SourceUnavailableError: If the access token is not configured
        """
        if not self._genius_client:
            if not self.access_token:
                raise SourceUnavailableError(
                    "Genius access token not configured",
                    details={'reason': 'missing_credential'}
                )

            self._genius_client = lyricsgenius.Genius(
                access_token=self.access_token,
                timeout=self.timeout,
                retries=0,
                remove_section_headers=True,
                skip_non_songs=True,
                verbose=False
            )
            self.logger.debug("Genius API client initialized")

        return self._genius_client

    def is_configured(self) -> bool:
        return bool(self.access_token)

    def fetch(self, lookup: SongLookup) -> Optional[PartialSongInfo]:
        """
        Search Genius for the song named in the raw query

        Args:
            lookup: Lookup carrying the raw query

        Returns:
            PartialSongInfo with title, artist, year and lyrics (or the sentinel)

        Raises:
            SourceUnavailableError: Query lacks artist or title, token missing,
                or Genius returned no hits
        """
        parsed = self.parser.parse(lookup.raw_query)
        if not parsed.is_complete:
            raise SourceUnavailableError(
                f"could not parse artist and title from '{lookup.raw_query}'",
                details={'query': lookup.raw_query}
            )

        search_term = f"{parsed.artist} {parsed.title}"
        self.logger.info(f"Searching Genius for: {parsed.artist} - {parsed.title}")

        response = self.genius_client.search_songs(search_term, per_page=1)
        hits = (response or {}).get('hits') or []
        if not hits:
            raise SourceUnavailableError(
                f"no Genius results for '{search_term}'",
                details={'query': search_term}
            )

        song = hits[0].get('result') or {}
        primary_artist = song.get('primary_artist') or {}

        return PartialSongInfo(
            title=song.get('title') or parsed.title,
            artist=primary_artist.get('name') or parsed.artist,
            year=extract_year(song.get('release_date_for_display')),
            lyrics=self._fetch_lyrics(song),
            source=self.name
        )

    def _fetch_lyrics(self, song: Dict[str, Any]) -> str:
        """
        Fetch, clean and validate lyrics from a Genius song page

        Page scraping is fragile, so any failure here degrades to the
        sentinel instead of discarding the hit's metadata.
        """
        song_url = song.get('url')
        if not song_url:
            return LYRICS_NOT_FOUND

        try:
            lyrics = self.genius_client.lyrics(song_url=song_url)
        except Exception as e:
            self.logger.info(f"Failed to fetch lyrics from Genius page {song_url}: {e}")
            return LYRICS_NOT_FOUND

        if lyrics and self.clean_lyrics:
            lyrics = clean_lyrics_text(lyrics)

        if not validate_lyrics_content(lyrics, self.min_length):
            self.logger.debug(f"Lyrics validation failed for: {song.get('title')}")
            return LYRICS_NOT_FOUND

        return lyrics
