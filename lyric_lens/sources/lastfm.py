"""
Last.fm integration: genre and release-year enrichment

Uses ``track.getInfo``: the first top tag becomes the genre and the album's
``@attr.year`` the release year. Enrichment is optional; without an API key
the source logs a warning and contributes nothing.
"""

from typing import Any, Optional

from ..core.exceptions import SourceUnavailableError
from ..search.models import PartialSongInfo, SongLookup
from ..utils.helpers import clean_text, extract_year
from .base import SongSource


class LastFmEnrichmentSource(SongSource):
    """Last.fm track metadata source keyed on an already known title/artist"""

    name = "lastfm"

    def is_configured(self) -> bool:
        return bool(self.settings.enrichment.enabled and self.settings.enrichment.lastfm_api_key)

    def fetch(self, lookup: SongLookup) -> Optional[PartialSongInfo]:
        """
        Look up genre and year for ``lookup.title`` by ``lookup.artist``

        Returns:
            PartialSongInfo carrying only genre and/or year
        """
        config = self.settings.enrichment
        if not config.enabled:
            raise SourceUnavailableError("Last.fm enrichment disabled")
        if not config.lastfm_api_key:
            raise SourceUnavailableError(
                "Last.fm API key not configured",
                details={'reason': 'missing_credential'}
            )
        if not lookup.title or not lookup.artist:
            raise SourceUnavailableError("title and artist required for Last.fm lookup")

        params = {
            'method': 'track.getInfo',
            'api_key': config.lastfm_api_key,
            'artist': lookup.artist,
            'track': lookup.title,
            'format': 'json'
        }
        data = self._get_json(config.lastfm_url, params=params)

        # Last.fm reports "track not found" as a 200 with an error body
        track = data.get('track')
        if not track:
            raise SourceUnavailableError(
                f"Last.fm has no track {lookup.artist} - {lookup.title}",
                details={'lastfm_error': data.get('message')}
            )

        album = track.get('album') or {}
        return PartialSongInfo(
            genre=self._first_tag(track.get('toptags')),
            year=extract_year((album.get('@attr') or {}).get('year')),
            source=self.name
        )

    @staticmethod
    def _first_tag(toptags: Any) -> Optional[str]:
        # A single tag comes back as an object rather than a list
        tags = (toptags or {}).get('tag') or []
        if isinstance(tags, dict):
            tags = [tags]
        for tag in tags:
            name = clean_text(tag.get('name')) if isinstance(tag, dict) else None
            if name:
                return name
        return None
