"""
Configuration management package for Lyric-Lens

Settings are loaded from YAML files and environment variables (with ``.env``
support) into dataclass sections and exposed through a singleton:

    from lyric_lens.config import get_settings

    settings = get_settings()
    token = settings.lyrics.genius_access_token

Configuration sources in order of precedence:
1. Environment variables (highest priority, for API keys and tokens)
2. YAML configuration files
3. Default values
"""

from .settings import get_settings, reload_settings, Settings

__all__ = [
    'get_settings',      # Factory function for singleton settings access
    'reload_settings',   # Function to reload settings from files
    'Settings',          # Settings class for direct instantiation
]
