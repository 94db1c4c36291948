# lyric_lens/utils/__init__.py
"""
Utilities package
Common helpers, logging, and utility functions
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    OperationLogger,
    create_operation_logger,
    log_performance,
    get_current_log_file
)
from .helpers import (
    LYRICS_NOT_FOUND,
    extract_year,
    clean_text,
    clean_lyrics_text,
    validate_lyrics_content,
    has_lyrics,
    get_current_timestamp
)

__all__ = [
    # Logger exports
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'OperationLogger',
    'create_operation_logger',
    'log_performance',
    'get_current_log_file',

    # Helper exports
    'LYRICS_NOT_FOUND',
    'extract_year',
    'clean_text',
    'clean_lyrics_text',
    'validate_lyrics_content',
    'has_lyrics',
    'get_current_timestamp',
]
