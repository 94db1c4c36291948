"""
lyrics.ovh integration: fallback lyrics source
Unauthenticated lookup by exact artist and title
"""

from typing import Optional
from urllib.parse import quote

import requests

from ..config.settings import Settings
from ..core.exceptions import SourceUnavailableError
from ..search.models import PartialSongInfo, SongLookup
from ..search.parser import QueryParser
from ..utils.helpers import clean_lyrics_text, validate_lyrics_content
from .base import SongSource


class LyricsOvhSource(SongSource):
    """lyrics.ovh lyrics source, consulted when Genius has nothing"""

    name = "lyrics.ovh"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        parser: Optional[QueryParser] = None
    ):
        super().__init__(settings, session)
        self.parser = parser or QueryParser()
        self.base_url = self.settings.lyrics.lyrics_ovh_url.rstrip('/')
        self.clean_lyrics = self.settings.lyrics.clean_lyrics
        self.min_length = self.settings.lyrics.min_length

    def fetch(self, lookup: SongLookup) -> Optional[PartialSongInfo]:
        """
        Fetch lyrics for the artist/title parsed from the raw query

        Args:
            lookup: Lookup carrying the raw query

        Returns:
            PartialSongInfo with the parsed title/artist and the lyric text
        """
        parsed = self.parser.parse(lookup.raw_query)
        if not parsed.is_complete:
            raise SourceUnavailableError(
                f"could not parse artist and title from '{lookup.raw_query}'",
                details={'query': lookup.raw_query}
            )

        url = f"{self.base_url}/{quote(parsed.artist, safe='')}/{quote(parsed.title, safe='')}"
        self.logger.info(f"Searching lyrics.ovh for: {parsed.artist} - {parsed.title}")

        data = self._get_json(url)
        lyrics = data.get('lyrics')

        if lyrics and self.clean_lyrics:
            lyrics = clean_lyrics_text(lyrics)

        if not validate_lyrics_content(lyrics, self.min_length):
            raise SourceUnavailableError(
                f"no usable lyrics for {parsed.artist} - {parsed.title}",
                details={'url': url}
            )

        return PartialSongInfo(
            title=parsed.title,
            artist=parsed.artist,
            lyrics=lyrics,
            source=self.name
        )
