"""
MusicBrainz integration: canonical catalog metadata

Searches the public recording index for the best match of a known
title/artist and returns the canonical title, credited artist, year of the
first release and first tag.

Unlike the other sources this one never reports "no data": when the catalog
errors or has no recordings it echoes the title and artist it was given,
with no year or genre.
"""

from typing import Any, Dict, Optional

from ..search.models import PartialSongInfo, SongLookup
from ..utils.helpers import clean_text, extract_year
from .base import SongSource


class MusicBrainzCatalogSource(SongSource):
    """MusicBrainz recording search (no authentication required)"""

    name = "musicbrainz"

    def fetch(self, lookup: SongLookup) -> Optional[PartialSongInfo]:
        if not self.settings.catalog.enabled or not lookup.title:
            return self.on_unavailable(lookup)

        url = f"{self.settings.catalog.musicbrainz_url.rstrip('/')}/recording/"
        params = {
            'query': self._build_query(lookup.title, lookup.artist),
            'fmt': 'json',
            'limit': 1
        }
        self.logger.info(f"Searching MusicBrainz for: {lookup.artist} - {lookup.title}")

        data = self._get_json(url, params=params)
        recordings = data.get('recordings')
        if not recordings:
            self.logger.info(f"MusicBrainz has no recording for {lookup.artist} - {lookup.title}")
            return self.on_unavailable(lookup)

        return self._to_partial(recordings[0], lookup)

    def on_unavailable(self, lookup: SongLookup) -> Optional[PartialSongInfo]:
        """Echo the input unchanged so the caller always gets a record back"""
        return PartialSongInfo(title=lookup.title, artist=lookup.artist, source=self.name)

    def _to_partial(self, recording: Dict[str, Any], lookup: SongLookup) -> PartialSongInfo:
        artist_credit = recording.get('artist-credit') or [{}]
        releases = recording.get('releases') or [{}]
        tags = recording.get('tags') or [{}]

        return PartialSongInfo(
            title=clean_text(recording.get('title')) or lookup.title,
            artist=clean_text(artist_credit[0].get('name')) or lookup.artist,
            year=extract_year(releases[0].get('date')),
            genre=clean_text(tags[0].get('name')),
            source=self.name
        )

    @staticmethod
    def _build_query(title: str, artist: Optional[str]) -> str:
        """Lucene query for the recording index"""
        query = f'recording:"{_escape(title)}"'
        if artist:
            query += f' AND artist:"{_escape(artist)}"'
        return query


def _escape(value: Any) -> str:
    return str(value).replace('\\', '\\\\').replace('"', '\\"')
