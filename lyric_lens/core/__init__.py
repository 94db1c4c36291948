"""
Core module for lyric-lens.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - models: Stored analysis, history and favorite records
    - database: Thread-safe SQLite store for analyses, history and favorites

Usage:
    from lyric_lens.core import (
        Database,
        AnalysisRecord, StoredAnalysis,
        LyricLensError, PersistenceError, DuplicateFavoriteError
    )
"""

from .database import Database, DATABASE_VERSION
from .exceptions import (
    AnalysisGenerationError,
    AnalysisNotFoundError,
    ConfigError,
    DuplicateFavoriteError,
    LyricLensError,
    PersistenceError,
    SongNotFoundError,
    SourceUnavailableError,
)
from .models import AnalysisRecord, FavoriteEntry, HistoryEntry, StoredAnalysis

__all__ = [
    # Database
    "Database",
    "DATABASE_VERSION",
    # Models
    "AnalysisRecord",
    "StoredAnalysis",
    "HistoryEntry",
    "FavoriteEntry",
    # Exceptions
    "LyricLensError",
    "ConfigError",
    "SourceUnavailableError",
    "SongNotFoundError",
    "AnalysisGenerationError",
    "PersistenceError",
    "DuplicateFavoriteError",
    "AnalysisNotFoundError",
]
