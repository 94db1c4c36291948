"""
Song analysis package

- engine: OpenAI-backed analysis with lyrics-grounded and metadata-only variants
- extractor: genre/year extraction from free-text analyses
"""

from .engine import (
    AnalysisEngine,
    AnalysisResult,
    LyricsAnalysis,
    MetadataAnalysis,
)
from .extractor import ExtractedMetadata, extract_metadata

__all__ = [
    'AnalysisEngine',
    'AnalysisResult',
    'LyricsAnalysis',
    'MetadataAnalysis',
    'ExtractedMetadata',
    'extract_metadata',
]
