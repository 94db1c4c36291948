"""
Thread-safe SQLite database for lyric-lens.

Every successful search stores one immutable analysis row and one history
row pointing at it. Favorites link a user to an analysis. History and
favorites are join-like tables: deleting from them never deletes the
analysis they reference.

Schema:
    song_analyses:   One row per successful search (never updated in place)
    search_history:  (user_id, search_query, song_analysis_id)
    favorites:       (user_id, song_analysis_id), unique per pair

Usage:
    db = Database(settings.get_database_path())

    stored = db.create_analysis(user_id, record)
    db.create_history_entry(user_id, query, stored.id)

    db.add_favorite(user_id, stored.id)
    for favorite in db.get_user_favorites(user_id):
        print(favorite.analysis.title)
"""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, List, Optional

from ..utils.helpers import get_current_timestamp
from ..utils.logger import get_logger
from .exceptions import AnalysisNotFoundError, DuplicateFavoriteError, PersistenceError
from .models import AnalysisRecord, FavoriteEntry, HistoryEntry, StoredAnalysis


logger = get_logger(__name__)

DATABASE_VERSION = 1


_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS song_analyses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    artist TEXT NOT NULL,
    genre TEXT,
    year_released INTEGER,
    lyrics_analysis TEXT NOT NULL,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS search_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    search_query TEXT NOT NULL,
    song_analysis_id INTEGER NOT NULL,
    created_at TEXT,
    FOREIGN KEY (song_analysis_id) REFERENCES song_analyses(id)
);

CREATE TABLE IF NOT EXISTS favorites (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    song_analysis_id INTEGER NOT NULL,
    created_at TEXT,
    FOREIGN KEY (song_analysis_id) REFERENCES song_analyses(id),
    UNIQUE(user_id, song_analysis_id)
);

CREATE INDEX IF NOT EXISTS idx_song_analyses_user ON song_analyses(user_id);
CREATE INDEX IF NOT EXISTS idx_search_history_user ON search_history(user_id);
CREATE INDEX IF NOT EXISTS idx_favorites_user ON favorites(user_id);
"""

_ANALYSIS_COLUMNS = "id, user_id, title, artist, genre, year_released, lyrics_analysis, created_at"

# Joined analysis columns are aliased with an "a_" prefix
_JOINED_ANALYSIS_COLUMNS = """
    a.id AS a_id, a.user_id AS a_user_id, a.title AS a_title, a.artist AS a_artist,
    a.genre AS a_genre, a.year_released AS a_year_released,
    a.lyrics_analysis AS a_lyrics_analysis, a.created_at AS a_created_at
"""


class Database:
    """
    Thread-safe SQLite store for analyses, search history and favorites.

    Uses a single persistent connection with thread locking for safety.
    All public methods acquire self._lock before executing, and every
    sqlite3 error is re-raised as PersistenceError.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

        if not self.db_path.parent.exists():
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise PersistenceError(
                    f"Cannot create database directory: {self.db_path.parent}",
                    details={"path": str(self.db_path.parent), "original_error": str(e)}
                ) from e

        try:
            self._init_database()
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to initialize database: {e}",
                details={"path": str(self.db_path)}
            ) from e

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Get the persistent database connection as a context manager.

        The connection is created once and reused for all operations;
        leaving the context does not close it.
        """
        if self._conn is None:
            self._conn = sqlite3.connect(
                str(self.db_path),
                timeout=30.0,
                check_same_thread=False  # Thread safety is handled by _lock
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.execute("PRAGMA journal_mode = WAL")
        yield self._conn

    @contextmanager
    def _transaction(self, operation: str) -> Generator[sqlite3.Connection, None, None]:
        """Locked connection that commits on success and wraps sqlite errors"""
        with self._lock:
            with self._get_connection() as conn:
                try:
                    yield conn
                    conn.commit()
                except sqlite3.Error as e:
                    conn.rollback()
                    logger.error(f"Database error during {operation}: {e}")
                    raise PersistenceError(
                        f"Failed to {operation}: {e}",
                        details={"operation": operation, "original_error": str(e)}
                    ) from e
                except Exception:
                    conn.rollback()
                    raise

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __del__(self) -> None:
        """Ensure connection is closed on garbage collection."""
        if getattr(self, '_conn', None) is not None:
            try:
                self._conn.close()
            except Exception:
                pass

    def _init_database(self) -> None:
        with self._get_connection() as conn:
            conn.executescript(_SCHEMA_SQL)

            cursor = conn.execute("SELECT version FROM schema_version LIMIT 1")
            row = cursor.fetchone()

            if row is None:
                conn.execute("INSERT INTO schema_version (version) VALUES (?)", (DATABASE_VERSION,))
            elif row[0] != DATABASE_VERSION:
                raise PersistenceError(
                    f"Database version mismatch: expected {DATABASE_VERSION}, got {row[0]}",
                    details={"expected": DATABASE_VERSION, "actual": row[0]}
                )
            conn.commit()

    @staticmethod
    def _joined_analysis(row: sqlite3.Row) -> Optional[StoredAnalysis]:
        if row["a_id"] is None:
            return None
        return StoredAnalysis(
            id=row["a_id"],
            user_id=row["a_user_id"],
            title=row["a_title"],
            artist=row["a_artist"],
            lyrics_analysis=row["a_lyrics_analysis"],
            genre=row["a_genre"],
            year_released=row["a_year_released"],
            created_at=row["a_created_at"]
        )

    @staticmethod
    def _fetch_analysis(conn: sqlite3.Connection, analysis_id: int) -> Optional[StoredAnalysis]:
        cursor = conn.execute(
            f"SELECT {_ANALYSIS_COLUMNS} FROM song_analyses WHERE id = ?",
            (analysis_id,)
        )
        row = cursor.fetchone()
        return StoredAnalysis.from_row(row) if row else None

    # =========================================================================
    # Song Analyses
    # =========================================================================

    def create_analysis(self, user_id: str, record: AnalysisRecord) -> StoredAnalysis:
        """Insert a new analysis row. A repeat search creates a new row."""
        with self._transaction("create analysis") as conn:
            cursor = conn.execute("""
                INSERT INTO song_analyses
                    (user_id, title, artist, genre, year_released, lyrics_analysis, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                user_id, record.title, record.artist, record.genre,
                record.year_released, record.lyrics_analysis, get_current_timestamp()
            ))
            stored = self._fetch_analysis(conn, cursor.lastrowid)

        logger.debug(f"Stored analysis {stored.id} for {record.artist} - {record.title}")
        return stored

    def get_analysis(self, analysis_id: int) -> Optional[StoredAnalysis]:
        with self._transaction("read analysis") as conn:
            return self._fetch_analysis(conn, analysis_id)

    def get_user_analyses(self, user_id: str, limit: int = 50) -> List[StoredAnalysis]:
        """Analyses created by a user, newest first."""
        with self._transaction("list analyses") as conn:
            cursor = conn.execute(f"""
                SELECT {_ANALYSIS_COLUMNS} FROM song_analyses
                WHERE user_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
            """, (user_id, limit))
            return [StoredAnalysis.from_row(row) for row in cursor.fetchall()]

    # =========================================================================
    # Search History
    # =========================================================================

    def create_history_entry(self, user_id: str, search_query: str, analysis_id: int) -> HistoryEntry:
        """
        Record a search. The analysis must already be committed.

        Raises:
            AnalysisNotFoundError: If analysis_id does not exist
        """
        with self._transaction("create history entry") as conn:
            analysis = self._fetch_analysis(conn, analysis_id)
            if analysis is None:
                raise AnalysisNotFoundError(
                    f"Analysis {analysis_id} not found",
                    details={"analysis_id": analysis_id}
                )

            now = get_current_timestamp()
            cursor = conn.execute("""
                INSERT INTO search_history (user_id, search_query, song_analysis_id, created_at)
                VALUES (?, ?, ?, ?)
            """, (user_id, search_query, analysis_id, now))

            return HistoryEntry(
                id=cursor.lastrowid,
                user_id=user_id,
                search_query=search_query,
                song_analysis_id=analysis_id,
                created_at=now,
                analysis=analysis
            )

    def get_user_history(self, user_id: str, limit: int = 20) -> List[HistoryEntry]:
        """A user's searches, newest first, each joined with its analysis."""
        with self._transaction("read history") as conn:
            cursor = conn.execute(f"""
                SELECT h.id, h.user_id, h.search_query, h.song_analysis_id, h.created_at,
                       {_JOINED_ANALYSIS_COLUMNS}
                FROM search_history h
                LEFT JOIN song_analyses a ON a.id = h.song_analysis_id
                WHERE h.user_id = ?
                ORDER BY h.created_at DESC, h.id DESC
                LIMIT ?
            """, (user_id, limit))
            return [
                HistoryEntry.from_row(row, self._joined_analysis(row))
                for row in cursor.fetchall()
            ]

    def clear_user_history(self, user_id: str) -> int:
        """Delete a user's history rows. Analyses are kept. Returns rows deleted."""
        with self._transaction("clear history") as conn:
            cursor = conn.execute("DELETE FROM search_history WHERE user_id = ?", (user_id,))
            deleted = cursor.rowcount

        logger.debug(f"Cleared {deleted} history entries for {user_id}")
        return deleted

    # =========================================================================
    # Favorites
    # =========================================================================

    def is_favorite(self, user_id: str, analysis_id: int) -> bool:
        with self._transaction("read favorite") as conn:
            cursor = conn.execute(
                "SELECT 1 FROM favorites WHERE user_id = ? AND song_analysis_id = ?",
                (user_id, analysis_id)
            )
            return cursor.fetchone() is not None

    def add_favorite(self, user_id: str, analysis_id: int) -> FavoriteEntry:
        """
        Mark an analysis as a favorite of the user.

        Raises:
            AnalysisNotFoundError: If analysis_id does not exist
            DuplicateFavoriteError: If the pair is already a favorite
        """
        with self._transaction("add favorite") as conn:
            analysis = self._fetch_analysis(conn, analysis_id)
            if analysis is None:
                raise AnalysisNotFoundError(
                    f"Analysis {analysis_id} not found",
                    details={"analysis_id": analysis_id}
                )

            now = get_current_timestamp()
            try:
                cursor = conn.execute("""
                    INSERT INTO favorites (user_id, song_analysis_id, created_at)
                    VALUES (?, ?, ?)
                """, (user_id, analysis_id, now))
            except sqlite3.IntegrityError as e:
                raise DuplicateFavoriteError(
                    "Song is already in favorites",
                    details={"user_id": user_id, "analysis_id": analysis_id}
                ) from e

            return FavoriteEntry(
                id=cursor.lastrowid,
                user_id=user_id,
                song_analysis_id=analysis_id,
                created_at=now,
                analysis=analysis
            )

    def remove_favorite(self, user_id: str, analysis_id: int) -> bool:
        """Remove a favorite link. Returns False if it did not exist."""
        with self._transaction("remove favorite") as conn:
            cursor = conn.execute(
                "DELETE FROM favorites WHERE user_id = ? AND song_analysis_id = ?",
                (user_id, analysis_id)
            )
            return cursor.rowcount > 0

    def get_user_favorites(self, user_id: str) -> List[FavoriteEntry]:
        """A user's favorites, newest first, each joined with its analysis."""
        with self._transaction("read favorites") as conn:
            cursor = conn.execute(f"""
                SELECT f.id, f.user_id, f.song_analysis_id, f.created_at,
                       {_JOINED_ANALYSIS_COLUMNS}
                FROM favorites f
                LEFT JOIN song_analyses a ON a.id = f.song_analysis_id
                WHERE f.user_id = ?
                ORDER BY f.created_at DESC, f.id DESC
            """, (user_id,))
            return [
                FavoriteEntry.from_row(row, self._joined_analysis(row))
                for row in cursor.fetchall()
            ]

    def count_favorites(self, user_id: str) -> int:
        with self._transaction("count favorites") as conn:
            cursor = conn.execute("SELECT COUNT(*) FROM favorites WHERE user_id = ?", (user_id,))
            return cursor.fetchone()[0]
