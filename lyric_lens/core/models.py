"""
Stored record models

AnalysisRecord is the normalized shape both analysis variants are reduced to
before persistence. The Stored*/HistoryEntry/FavoriteEntry classes mirror the
rows of the SQLite tables and are built from ``sqlite3.Row`` objects.
"""

import sqlite3
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class AnalysisRecord:
    """
    Normalized analysis ready to be persisted

    Attributes:
        title: Resolved song title
        artist: Resolved artist name
        genre: Genre, if any source (or the model) supplied one
        year_released: Release year, if known
        lyrics_analysis: Display text of the analysis
    """
    title: str
    artist: str
    lyrics_analysis: str
    genre: Optional[str] = None
    year_released: Optional[int] = None


@dataclass(frozen=True)
class StoredAnalysis:
    """Analysis row as stored in ``song_analyses``"""
    id: int
    user_id: str
    title: str
    artist: str
    lyrics_analysis: str
    genre: Optional[str] = None
    year_released: Optional[int] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "StoredAnalysis":
        return cls(
            id=row['id'],
            user_id=row['user_id'],
            title=row['title'],
            artist=row['artist'],
            lyrics_analysis=row['lyrics_analysis'],
            genre=row['genre'],
            year_released=row['year_released'],
            created_at=row['created_at']
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HistoryEntry:
    """One search made by a user, pointing at the analysis it produced"""
    id: int
    user_id: str
    search_query: str
    song_analysis_id: int
    created_at: Optional[str] = None
    analysis: Optional[StoredAnalysis] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row, analysis: Optional[StoredAnalysis] = None) -> "HistoryEntry":
        return cls(
            id=row['id'],
            user_id=row['user_id'],
            search_query=row['search_query'],
            song_analysis_id=row['song_analysis_id'],
            created_at=row['created_at'],
            analysis=analysis
        )


@dataclass(frozen=True)
class FavoriteEntry:
    """A (user, analysis) favorite link"""
    id: int
    user_id: str
    song_analysis_id: int
    created_at: Optional[str] = None
    analysis: Optional[StoredAnalysis] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row, analysis: Optional[StoredAnalysis] = None) -> "FavoriteEntry":
        return cls(
            id=row['id'],
            user_id=row['user_id'],
            song_analysis_id=row['song_analysis_id'],
            created_at=row['created_at'],
            analysis=analysis
        )
