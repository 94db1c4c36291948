"""
Lyric-Lens: song search, metadata reconciliation and AI lyric analysis

Lyric-Lens takes a loosely structured song query ("Sia - Chandelier",
"Hotel California by Eagles", or just "Stay"), finds the song's lyrics and
metadata across several public services, asks a language model for an
interpretive analysis and keeps the result in a local SQLite database with a
per-user search history and favorites.

## Pipeline

query -> parser -> lyrics sources (Genius, lyrics.ovh) -> Last.fm enrichment
-> MusicBrainz canonical metadata -> merge -> analysis (lyrics-grounded or
metadata-only) -> metadata extraction -> persistence

Every external source is optional and fails soft: a missing credential, a
network error or an empty answer only lowers the quality of the data. Only a
failing language-model call or a failing database write fails the search.

## Modules

**Configuration (`lyric_lens/config/`)**
- YAML configuration with environment variable overrides (.env supported)

**Search (`lyric_lens/search/`)**
- Query parser, song record models and the multi-source resolver

**Sources (`lyric_lens/sources/`)**
- One soft-failing adapter per external service

**Analysis (`lyric_lens/analysis/`)**
- OpenAI analysis variants and free-text metadata extraction

**Core (`lyric_lens/core/`)**
- Exceptions, stored record models and the SQLite store

**Service and CLI (`lyric_lens/service.py`, `lyric_lens/main.py`)**
- The search/history/favorites surface and the click command line
"""

# Version information for the Lyric-Lens package
__version__ = "0.3.0"

# Package author information
__author__ = "Lyric-Lens contributors"

# Concise description used by setup.py and the CLI
__description__ = "Search songs, reconcile lyrics and metadata, and get AI analyses of their meaning"

__all__ = [
    "__version__",
    "__author__",
    "__description__"
]
