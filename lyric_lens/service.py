"""
Search service: the operations exposed to the command line

SearchService ties the pipeline together:

    resolve -> analyze -> normalize (extract metadata) -> store analysis
    -> store history entry

and adds the history and favorites operations around it. Source failures are
absorbed by the resolver; analysis and persistence failures propagate to the
caller unchanged.
"""

from typing import Any, Dict, List, Optional

from .analysis.engine import AnalysisEngine
from .config.settings import Settings, get_settings
from .core.database import Database
from .core.exceptions import AnalysisNotFoundError, PersistenceError, SongNotFoundError
from .core.models import FavoriteEntry, HistoryEntry, StoredAnalysis
from .search.resolver import SongResolver
from .utils.logger import create_operation_logger, get_logger


logger = get_logger(__name__)


class SearchService:
    """
    Song search with persistent history and favorites

    Attributes:
        resolver: Multi-source song resolver
        engine: Analysis engine
        database: SQLite store
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        resolver: Optional[SongResolver] = None,
        engine: Optional[AnalysisEngine] = None,
        database: Optional[Database] = None
    ):
        self.settings = settings or get_settings()
        self.resolver = resolver or SongResolver.from_settings(self.settings)
        self.engine = engine or AnalysisEngine(self.settings)
        self.database = database or Database(self.settings.get_database_path())

    def search(self, query: str, user_id: str) -> StoredAnalysis:
        """
        Run the full pipeline for one query and store the result

        Args:
            query: Free-text song query
            user_id: User the analysis and history entry belong to

        Returns:
            The stored analysis

        Raises:
            SongNotFoundError: Empty or non-string query
            AnalysisGenerationError: Language model call failed (nothing stored)
            PersistenceError: Database write failed; ``details['record']``
                holds the unsaved record, or ``details['analysis']`` the
                stored analysis when only the history write failed
        """
        if not isinstance(query, str) or not query.strip():
            raise SongNotFoundError("Query is required", details={'query': query})

        search_text = query.strip()
        operation = create_operation_logger(__name__, f"Search: {search_text}")
        operation.start()

        song = self.resolver.resolve(search_text)
        operation.progress(f"resolved to {song.artist} - {song.title}")

        result = self.engine.analyze(song)
        record = result.to_record(song)
        operation.progress(f"{result.kind} analysis generated")

        try:
            stored = self.database.create_analysis(user_id, record)
        except PersistenceError as e:
            # Computed but not saved
            e.details['record'] = record
            operation.error("analysis could not be saved", e)
            raise

        # History keeps the query exactly as typed
        try:
            self.database.create_history_entry(user_id, query, stored.id)
        except PersistenceError as e:
            # The analysis row stays; the caller still gets to see it
            e.details['analysis'] = stored
            operation.error(f"analysis {stored.id} saved but history entry failed", e)
            raise

        operation.complete(f"Stored analysis {stored.id} for {stored.artist} - {stored.title}")
        return stored

    def get_analysis(self, analysis_id: int) -> StoredAnalysis:
        """
        Raises:
            AnalysisNotFoundError: If no analysis has this id
        """
        analysis = self.database.get_analysis(analysis_id)
        if analysis is None:
            raise AnalysisNotFoundError(
                f"Analysis {analysis_id} not found",
                details={'analysis_id': analysis_id}
            )
        return analysis

    def list_analyses(self, user_id: str, limit: int = 50) -> List[StoredAnalysis]:
        return self.database.get_user_analyses(user_id, limit)

    def list_history(self, user_id: str, limit: Optional[int] = None) -> List[HistoryEntry]:
        if limit is None:
            limit = self.settings.storage.history_limit
        return self.database.get_user_history(user_id, limit)

    def clear_history(self, user_id: str) -> int:
        deleted = self.database.clear_user_history(user_id)
        logger.info(f"Cleared {deleted} history entries")
        return deleted

    def add_favorite(self, user_id: str, analysis_id: int) -> FavoriteEntry:
        """
        Raises:
            DuplicateFavoriteError: Already a favorite
            AnalysisNotFoundError: Unknown analysis id
        """
        favorite = self.database.add_favorite(user_id, analysis_id)
        logger.info(f"Added analysis {analysis_id} to favorites")
        return favorite

    def remove_favorite(self, user_id: str, analysis_id: int) -> bool:
        removed = self.database.remove_favorite(user_id, analysis_id)
        if removed:
            logger.info(f"Removed analysis {analysis_id} from favorites")
        return removed

    def list_favorites(self, user_id: str) -> List[FavoriteEntry]:
        return self.database.get_user_favorites(user_id)

    def is_favorite(self, user_id: str, analysis_id: int) -> bool:
        return self.database.is_favorite(user_id, analysis_id)

    def source_status(self) -> List[Dict[str, Any]]:
        """Configuration status of every source plus the language model"""
        statuses = [source.get_status() for source in self.resolver.sources]
        statuses.append({
            'name': 'openai',
            'configured': self.engine.is_configured(),
            'timeout': self.settings.analysis.timeout,
        })
        return statuses

    def close(self) -> None:
        self.database.close()


# Global service instance management
_search_service: Optional[SearchService] = None


def get_search_service() -> SearchService:
    """Get the global search service (singleton pattern)"""
    global _search_service
    if not _search_service:
        _search_service = SearchService()
    return _search_service


def reset_search_service() -> None:
    """Close and drop the global service"""
    global _search_service
    if _search_service is not None:
        _search_service.close()
    _search_service = None
