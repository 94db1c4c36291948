"""Test configuration and fixtures"""

import pytest
import tempfile
from pathlib import Path
from unittest.mock import Mock

from lyric_lens.config.settings import (
    AnalysisConfig,
    CatalogConfig,
    EnrichmentConfig,
    LoggingConfig,
    LyricsConfig,
    NetworkConfig,
    StorageConfig
)
from lyric_lens.core.database import Database
from lyric_lens.search.models import PartialSongInfo


SAMPLE_LYRICS = (
    "Turn around, every now and then I get a little bit lonely\n"
    "And you're never coming round\n\n"
    "Turn around, every now and then I get a little bit tired"
)


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def mock_settings(temp_dir):
    """Settings with every credential configured and a temporary database"""
    settings = Mock()
    settings.lyrics = LyricsConfig(genius_access_token="genius-token")
    settings.enrichment = EnrichmentConfig(lastfm_api_key="lastfm-key")
    settings.catalog = CatalogConfig()
    settings.analysis = AnalysisConfig(openai_api_key="sk-test")
    settings.network = NetworkConfig(request_timeout=5)
    settings.storage = StorageConfig(database_path=str(temp_dir / "test.db"))
    settings.logging = LoggingConfig()
    settings.get_database_path.return_value = temp_dir / "test.db"
    return settings


@pytest.fixture
def database(temp_dir):
    """Fresh SQLite database in the temporary directory"""
    db = Database(temp_dir / "lyric_lens.db")
    yield db
    db.close()


@pytest.fixture
def make_response():
    """Factory for fake requests responses"""
    def _make(status_code=200, json_data=None, json_error=None):
        response = Mock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 400
        if json_error is not None:
            response.json.side_effect = json_error
        else:
            response.json.return_value = json_data if json_data is not None else {}
        return response
    return _make


@pytest.fixture
def mock_session():
    """HTTP session whose get() is configured per test"""
    return Mock()


@pytest.fixture
def fake_source():
    """Factory for sources that answer with a fixed PartialSongInfo (or None)"""
    def _make(name, result=None):
        source = Mock()
        source.name = name
        source.attempt.return_value = result
        source.get_status.return_value = {'name': name, 'configured': True, 'timeout': 5}
        return source
    return _make


@pytest.fixture
def echo_catalog():
    """Catalog source that echoes the title/artist it is given"""
    source = Mock()
    source.name = "musicbrainz"
    source.attempt.side_effect = lambda lookup: PartialSongInfo(
        title=lookup.title, artist=lookup.artist, source="musicbrainz"
    )
    source.get_status.return_value = {'name': "musicbrainz", 'configured': True, 'timeout': 5}
    return source


@pytest.fixture
def make_completion():
    """Factory for fake OpenAI chat completion responses"""
    def _make(content):
        message = Mock()
        message.content = content
        choice = Mock()
        choice.message = message
        completion = Mock()
        completion.choices = [choice]
        return completion
    return _make


@pytest.fixture
def openai_client(make_completion):
    """Fake OpenAI client; set chat.completions.create per test"""
    client = Mock()
    client.chat.completions.create.return_value = make_completion("{}")
    return client


@pytest.fixture
def sample_lyrics():
    return SAMPLE_LYRICS
