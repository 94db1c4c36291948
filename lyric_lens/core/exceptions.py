"""
Exception classes for lyric-lens.

This module defines all custom exceptions used throughout the application.
Each exception is designed to provide clear, actionable error messages
and to distinguish between failures that are absorbed locally and failures
that must reach the user.

Exception Hierarchy:
    LyricLensError (base)
        ConfigError - Configuration issues
        SourceUnavailableError - A lyrics/metadata source had no data (absorbed)
        SongNotFoundError - Not even a title could be derived from the query
        AnalysisGenerationError - The language model call failed
        PersistenceError - The analysis database could not be read or written
        DuplicateFavoriteError - The analysis is already a favorite
        AnalysisNotFoundError - No analysis exists with the requested id
"""

from typing import Optional


class LyricLensError(Exception):
    """
    Base exception for all lyric-lens errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., query, source).

    Example:
        try:
            service.search(query, user_id)
        except LyricLensError as e:
            logger.error(f"Search failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'query': Raw search query involved in the error
                     - 'source': Name of the external source
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(LyricLensError):
    """
    Raised when the configuration cannot support the requested operation.

    Example:
        raise ConfigError(
            "OpenAI API key not configured",
            details={'setting': 'analysis.openai_api_key'}
        )
    """
    pass


class SourceUnavailableError(LyricLensError):
    """
    Raised inside a song source when it cannot provide data.

    This is a NON-CRITICAL error. It never leaves the source: the source base
    class logs it and turns it into "no data" so the resolver moves on to the
    next source.

    Common causes:
        - Missing credential (Genius token, Last.fm key)
        - Network error or timeout
        - Not-found / empty response
    """
    pass


class SongNotFoundError(LyricLensError):
    """
    Raised when a query cannot be resolved to even a minimal song record.

    Only an empty or whitespace-only query ends up here; any other text at
    least becomes a title.
    """
    pass


class AnalysisGenerationError(LyricLensError):
    """
    Raised when the language model call itself fails.

    This is a CRITICAL error for the search request: without analysis text
    there is nothing to store, so the user is told the analysis failed.

    Example:
        raise AnalysisGenerationError(
            "Failed to analyze lyrics: rate limit exceeded",
            details={'original_error': str(e), 'title': 'Stay'}
        )
    """
    pass


class PersistenceError(LyricLensError):
    """
    Raised when the analysis database cannot be read or written.

    When the analysis row was saved but the history entry was not,
    ``details['analysis']`` holds the stored analysis so the caller can still
    see what was computed.
    """
    pass


class DuplicateFavoriteError(LyricLensError):
    """
    Raised when a user favorites an analysis that is already a favorite.

    This is a user-visible rejection, not an internal failure.
    """
    pass


class AnalysisNotFoundError(LyricLensError):
    """Raised when an analysis id does not exist."""
    pass
