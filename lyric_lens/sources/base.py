"""
Common interface for song data sources

Every external service the resolver consults (lyrics sites, Last.fm,
MusicBrainz) is wrapped in a SongSource. Sources share one contract:

    attempt(lookup) -> PartialSongInfo or None

``attempt`` never raises. Subclasses implement ``fetch`` and are free to raise
SourceUnavailableError or let requests exceptions escape; the base class
logs the cause for operators and converts it into "no data". That keeps the
resolver a simple loop over an ordered list of sources with no per-source
error handling.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from ..config.settings import Settings, get_settings
from ..core.exceptions import SourceUnavailableError
from ..search.models import PartialSongInfo, SongLookup
from ..utils.logger import get_logger


class SongSource(ABC):
    """
    Base class for optional song data sources

    Attributes:
        name: Short source identifier used in logs and field provenance
        timeout: Per-request timeout in seconds
    """

    name = "source"

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        """
        Initialize source with configuration and HTTP session

        Args:
            settings: Settings instance, defaults to the global settings
            session: Pre-built HTTP session (tests pass a mock)
        """
        self.settings = settings or get_settings()
        self.logger = get_logger(f"{__name__.rsplit('.', 1)[0]}.{self.name}")
        self.timeout = self.settings.network.request_timeout

        if session is None:
            session = requests.Session()
            session.headers.update({
                'User-Agent': self.settings.network.user_agent
            })
        self.session = session

    def attempt(self, lookup: SongLookup) -> Optional[PartialSongInfo]:
        """
        Ask this source about a song without ever raising

        Args:
            lookup: Raw query and any title/artist already known

        Returns:
            PartialSongInfo with whatever the source knew, or the result of
            ``on_unavailable`` when it had nothing
        """
        try:
            result = self.fetch(lookup)
        except SourceUnavailableError as e:
            suffix = ", skipping" if e.details.get('reason') == 'missing_credential' else ""
            self.logger.warning(f"{self.name}: {e.message}{suffix}")
            return self.on_unavailable(lookup)
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"{self.name} request failed: {e}")
            return self.on_unavailable(lookup)
        except Exception as e:
            self.logger.error(f"Unexpected error in {self.name} lookup: {e}")
            return self.on_unavailable(lookup)

        if result is None or result.is_empty():
            self.logger.warning(f"{self.name}: no data for '{lookup.raw_query}'")
            return self.on_unavailable(lookup)

        self.logger.debug(f"{self.name}: found {result.artist} - {result.title}")
        return result

    @abstractmethod
    def fetch(self, lookup: SongLookup) -> Optional[PartialSongInfo]:
        """Query the external service; may raise on any failure"""

    def on_unavailable(self, lookup: SongLookup) -> Optional[PartialSongInfo]:
        """Value returned when the source has no data (None by default)"""
        return None

    def is_configured(self) -> bool:
        """True when the source has every credential it needs"""
        return True

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        GET a JSON document with the configured timeout

        Raises:
            SourceUnavailableError: On non-2xx responses or undecodable bodies
        """
        response = self.session.get(url, params=params, timeout=self.timeout)

        if not response.ok:
            raise SourceUnavailableError(
                f"{self.name} API error: {response.status_code}",
                details={'status_code': response.status_code, 'url': url}
            )

        try:
            return response.json()
        except ValueError as e:
            raise SourceUnavailableError(
                f"{self.name} returned invalid JSON",
                details={'url': url, 'original_error': str(e)}
            ) from e

    def get_status(self) -> Dict[str, Any]:
        """Status summary used by the ``sources`` command"""
        return {
            'name': self.name,
            'configured': self.is_configured(),
            'timeout': self.timeout,
        }
