# tests/test_sources.py
"""Test song source adapters (no network: sessions and clients are mocked)"""

import logging

import pytest
import requests
from unittest.mock import Mock

from lyric_lens.core.exceptions import SourceUnavailableError
from lyric_lens.search.models import PartialSongInfo, SongLookup
from lyric_lens.sources.base import SongSource
from lyric_lens.sources.genius import GeniusLyricsSource
from lyric_lens.sources.lastfm import LastFmEnrichmentSource
from lyric_lens.sources.lyricsovh import LyricsOvhSource
from lyric_lens.sources.musicbrainz import MusicBrainzCatalogSource
from lyric_lens.utils.helpers import LYRICS_NOT_FOUND
from lyric_lens.utils.logger import ConsoleMessageFilter


def _genius_hit(title="Chandelier", artist="Sia", date="March 17, 2014", url="https://genius.com/sia-chandelier"):
    return {
        'hits': [{
            'result': {
                'title': title,
                'primary_artist': {'name': artist},
                'release_date_for_display': date,
                'url': url,
            }
        }]
    }


class TestSongSourceContract:
    """Test the soft-failure attempt() wrapper"""

    class _RaisingSource(SongSource):
        name = "raising"

        def __init__(self, error, **kwargs):
            super().__init__(**kwargs)
            self.error = error

        def fetch(self, lookup):
            raise self.error

    @pytest.mark.parametrize("error", [
        SourceUnavailableError("nothing here"),
        requests.exceptions.ConnectionError("boom"),
        requests.exceptions.Timeout("slow"),
        KeyError("unexpected"),
    ])
    def test_attempt_never_raises(self, mock_settings, mock_session, error):
        source = self._RaisingSource(error, settings=mock_settings, session=mock_session)
        assert source.attempt(SongLookup(raw_query="Sia - Chandelier")) is None

    def test_empty_result_is_absent(self, mock_settings, mock_session):
        source = self._RaisingSource(None, settings=mock_settings, session=mock_session)
        source.fetch = Mock(return_value=PartialSongInfo(source="raising"))
        assert source.attempt(SongLookup(raw_query="x")) is None

    def test_get_json_raises_on_error_status(self, mock_settings, mock_session, make_response):
        mock_session.get.return_value = make_response(status_code=500)
        source = self._RaisingSource(None, settings=mock_settings, session=mock_session)

        with pytest.raises(SourceUnavailableError) as exc_info:
            source._get_json("https://example.org")
        assert exc_info.value.details['status_code'] == 500

    def test_get_json_uses_timeout(self, mock_settings, mock_session, make_response):
        mock_session.get.return_value = make_response(json_data={'ok': True})
        source = self._RaisingSource(None, settings=mock_settings, session=mock_session)

        assert source._get_json("https://example.org", params={'a': 1}) == {'ok': True}
        mock_session.get.assert_called_once_with("https://example.org", params={'a': 1}, timeout=5)


class TestGeniusLyricsSource:
    """Test the primary lyrics source"""

    def test_fetch_returns_metadata_and_lyrics(self, mock_settings, mock_session, sample_lyrics):
        client = Mock()
        client.search_songs.return_value = _genius_hit()
        client.lyrics.return_value = sample_lyrics

        source = GeniusLyricsSource(mock_settings, mock_session, client=client)
        result = source.attempt(SongLookup(raw_query="Sia - Chandelier"))

        client.search_songs.assert_called_once_with("Sia Chandelier", per_page=1)
        client.lyrics.assert_called_once_with(song_url="https://genius.com/sia-chandelier")
        assert result.title == "Chandelier"
        assert result.artist == "Sia"
        assert result.year == 2014
        assert result.has_lyrics
        assert result.source == "genius"

    def test_unparseable_query_is_absent(self, mock_settings, mock_session):
        client = Mock()
        source = GeniusLyricsSource(mock_settings, mock_session, client=client)

        assert source.attempt(SongLookup(raw_query="Stay")) is None
        client.search_songs.assert_not_called()

    def test_no_hits_is_absent(self, mock_settings, mock_session):
        client = Mock()
        client.search_songs.return_value = {'hits': []}
        source = GeniusLyricsSource(mock_settings, mock_session, client=client)

        assert source.attempt(SongLookup(raw_query="Sia - Chandelier")) is None

    def test_missing_lyrics_keeps_metadata(self, mock_settings, mock_session):
        """A hit without usable lyrics still returns title/artist/year"""
        client = Mock()
        client.search_songs.return_value = _genius_hit()
        client.lyrics.side_effect = requests.exceptions.HTTPError("page gone")

        source = GeniusLyricsSource(mock_settings, mock_session, client=client)
        result = source.attempt(SongLookup(raw_query="Sia - Chandelier"))

        assert result.title == "Chandelier"
        assert result.lyrics == LYRICS_NOT_FOUND
        assert not result.has_lyrics

    def test_missing_token_logs_warning(self, mock_settings, mock_session, caplog):
        mock_settings.lyrics.genius_access_token = ""
        source = GeniusLyricsSource(mock_settings, mock_session)

        with caplog.at_level(logging.WARNING):
            assert source.attempt(SongLookup(raw_query="Sia - Chandelier")) is None

        assert "Genius access token not configured" in caplog.text
        assert not source.is_configured()


class TestLyricsOvhSource:
    """Test the fallback lyrics source"""

    def test_fetch_builds_url_and_returns_lyrics(self, mock_settings, mock_session, make_response, sample_lyrics):
        mock_session.get.return_value = make_response(json_data={'lyrics': sample_lyrics})
        source = LyricsOvhSource(mock_settings, mock_session)

        result = source.attempt(SongLookup(raw_query="AC/DC - Back In Black"))

        url = mock_session.get.call_args[0][0]
        assert url == "https://api.lyrics.ovh/v1/AC%2FDC/Back%20In%20Black"
        assert result.artist == "AC/DC"
        assert result.title == "Back In Black"
        assert result.has_lyrics

    def test_not_found_is_absent(self, mock_settings, mock_session, make_response):
        mock_session.get.return_value = make_response(status_code=404, json_data={'error': 'No lyrics found'})
        source = LyricsOvhSource(mock_settings, mock_session)

        assert source.attempt(SongLookup(raw_query="Sia - Chandelier")) is None

    def test_not_found_reaches_console(self, mock_settings, mock_session, make_response, caplog):
        mock_session.get.return_value = make_response(status_code=404, json_data={'error': 'No lyrics found'})
        source = LyricsOvhSource(mock_settings, mock_session)

        with caplog.at_level(logging.DEBUG, logger="lyric_lens.sources"):
            source.attempt(SongLookup(raw_query="Sia - Chandelier"))

        console_filter = ConsoleMessageFilter()
        shown = [r.getMessage() for r in caplog.records if console_filter.filter(r)]
        assert len(shown) == 1
        assert shown[0].startswith("lyrics.ovh:") and "404" in shown[0]

    def test_instrumental_is_absent(self, mock_settings, mock_session, make_response):
        mock_session.get.return_value = make_response(json_data={'lyrics': '[Instrumental]'})
        source = LyricsOvhSource(mock_settings, mock_session)

        assert source.attempt(SongLookup(raw_query="Artist - Song")) is None


class TestLastFmEnrichmentSource:
    """Test genre/year enrichment"""

    def test_fetch_first_tag_and_album_year(self, mock_settings, mock_session, make_response):
        mock_session.get.return_value = make_response(json_data={
            'track': {
                'name': 'Chandelier',
                'toptags': {'tag': [{'name': 'pop'}, {'name': 'electropop'}]},
                'album': {'@attr': {'year': '2014'}},
            }
        })
        source = LastFmEnrichmentSource(mock_settings, mock_session)

        result = source.attempt(SongLookup.for_song("Sia - Chandelier", "Chandelier", "Sia"))

        params = mock_session.get.call_args[1]['params']
        assert params['method'] == 'track.getInfo'
        assert params['api_key'] == 'lastfm-key'
        assert params['track'] == 'Chandelier'
        assert result.genre == "pop"
        assert result.year == 2014
        assert result.title is None

    def test_single_tag_object(self, mock_settings, mock_session, make_response):
        mock_session.get.return_value = make_response(json_data={
            'track': {'toptags': {'tag': {'name': 'rock'}}}
        })
        source = LastFmEnrichmentSource(mock_settings, mock_session)

        result = source.attempt(SongLookup.for_song("q", "Song", "Artist"))
        assert result.genre == "rock"

    def test_missing_key_logs_and_skips_request(self, mock_settings, mock_session, caplog):
        mock_settings.enrichment.lastfm_api_key = ""
        source = LastFmEnrichmentSource(mock_settings, mock_session)

        with caplog.at_level(logging.WARNING):
            assert source.attempt(SongLookup.for_song("q", "Song", "Artist")) is None

        mock_session.get.assert_not_called()
        assert "Last.fm API key not configured" in caplog.text

    def test_track_not_found_is_absent(self, mock_settings, mock_session, make_response):
        mock_session.get.return_value = make_response(json_data={'error': 6, 'message': 'Track not found'})
        source = LastFmEnrichmentSource(mock_settings, mock_session)

        assert source.attempt(SongLookup.for_song("q", "Song", "Artist")) is None


class TestMusicBrainzCatalogSource:
    """Test canonical catalog lookups"""

    def test_fetch_first_recording(self, mock_settings, mock_session, make_response):
        mock_session.get.return_value = make_response(json_data={
            'recordings': [{
                'title': 'Stay',
                'artist-credit': [{'name': 'Rihanna'}],
                'releases': [{'date': '2012-11-19'}],
                'tags': [{'name': 'r&b'}],
            }]
        })
        source = MusicBrainzCatalogSource(mock_settings, mock_session)

        result = source.attempt(SongLookup.for_song("stay", "stay", "rihanna"))

        params = mock_session.get.call_args[1]['params']
        assert params['query'] == 'recording:"stay" AND artist:"rihanna"'
        assert params['fmt'] == 'json'
        assert params['limit'] == 1
        assert result == PartialSongInfo(
            title="Stay", artist="Rihanna", genre="r&b", year=2012, source="musicbrainz"
        )

    @pytest.mark.parametrize("status_code,json_data", [
        (503, {}),
        (200, {'recordings': []}),
        (200, {}),
    ])
    def test_failure_echoes_input(self, mock_settings, mock_session, make_response, status_code, json_data):
        """Errors and empty results return the input unchanged, never absent"""
        mock_session.get.return_value = make_response(status_code=status_code, json_data=json_data)
        source = MusicBrainzCatalogSource(mock_settings, mock_session)

        result = source.attempt(SongLookup.for_song("Stay", "Stay", "Unknown Artist"))

        assert result == PartialSongInfo(title="Stay", artist="Unknown Artist", source="musicbrainz")

    def test_network_error_echoes_input(self, mock_settings, mock_session):
        mock_session.get.side_effect = requests.exceptions.ConnectionError("offline")
        source = MusicBrainzCatalogSource(mock_settings, mock_session)

        result = source.attempt(SongLookup.for_song("q", "Song", "Artist"))
        assert result.title == "Song"
        assert result.artist == "Artist"
        assert result.year is None

    def test_query_escapes_quotes(self, mock_settings, mock_session, make_response):
        mock_session.get.return_value = make_response(json_data={'recordings': []})
        source = MusicBrainzCatalogSource(mock_settings, mock_session)

        source.attempt(SongLookup.for_song("q", 'Say "Hi"', "Band"))

        assert mock_session.get.call_args[1]['params']['query'] == 'recording:"Say \\"Hi\\"" AND artist:"Band"'
