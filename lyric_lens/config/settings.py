"""
Configuration management for Lyric-Lens

This module handles loading, validation, and management of application settings
from multiple sources including YAML files and environment variables. It provides
a centralized configuration system that supports reloading and validation.

The configuration is organized into logical sections using dataclasses:
- Lyrics sources (Genius token, lyrics.ovh endpoint, cleaning rules)
- Metadata enrichment (Last.fm credentials)
- Canonical catalog lookups (MusicBrainz endpoint)
- Language-model analysis (OpenAI key, model, token budgets)
- Network, storage and logging options

All sensitive data (API keys, tokens) can be loaded from environment variables
for security, while non-sensitive settings can be stored in YAML files.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()


@dataclass
class LyricsConfig:
    """
    Lyrics source configuration

    Genius is the primary lyrics source and needs an access token; lyrics.ovh
    is the unauthenticated fallback. Lyrics shorter than ``min_length`` after
    cleaning are treated as missing.
    """
    genius_access_token: str = ""
    lyrics_ovh_url: str = "https://api.lyrics.ovh/v1"
    clean_lyrics: bool = True
    min_length: int = 20


@dataclass
class EnrichmentConfig:
    """
    Last.fm enrichment settings

    Enrichment is optional: without an API key the source is skipped and
    songs simply resolve without Last.fm tags.
    """
    enabled: bool = True
    lastfm_api_key: str = ""
    lastfm_url: str = "https://ws.audioscrobbler.com/2.0/"


@dataclass
class CatalogConfig:
    """MusicBrainz catalog lookups (no authentication required)"""
    enabled: bool = True
    musicbrainz_url: str = "https://musicbrainz.org/ws/2"


@dataclass
class AnalysisConfig:
    """
    Language-model analysis configuration

    Token budgets mirror the two analysis styles: structured JSON output
    needs more room than the free-text metadata-only analysis.
    """
    openai_api_key: str = ""
    model: str = "gpt-4o"
    json_max_tokens: int = 800
    text_max_tokens: int = 400
    timeout: int = 60


@dataclass
class NetworkConfig:
    """
    Network and HTTP configuration settings

    ``request_timeout`` bounds every call to an external metadata or lyrics
    service so a hanging provider degrades to "no data" instead of stalling
    the whole search.
    """
    user_agent: str = "Lyric-Lens/1.0 ( https://github.com/lyric-lens/lyric-lens )"
    request_timeout: int = 10


@dataclass
class StorageConfig:
    """Local analysis database location and listing defaults"""
    database_path: str = "~/.lyric-lens/lyric_lens.db"
    history_limit: int = 20


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    Controls application logging behavior including log levels, file output,
    rotation, and console formatting.
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


class Settings:
    """
    Main settings class that manages all configuration

    This class serves as the central configuration manager, loading settings
    from multiple sources (YAML files, environment variables) and providing
    a unified interface for accessing configuration throughout the application.

    The class handles:
    - Loading configuration from YAML files
    - Overriding with environment variables
    - Creating the configuration directory
    - Validating configuration values
    - Saving configuration back to files
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".lyric-lens"

        # Initialize all configuration objects with default values
        self.lyrics = LyricsConfig()
        self.enrichment = EnrichmentConfig()
        self.catalog = CatalogConfig()
        self.analysis = AnalysisConfig()
        self.network = NetworkConfig()
        self.storage = StorageConfig()
        self.logging = LoggingConfig()

        # Load configuration from various sources in order of precedence
        self._load_config()
        self._load_environment_variables()
        self._create_directories()

    def _sections(self) -> Dict[str, Any]:
        """Map YAML section names to their dataclass instances"""
        return {
            'lyrics': self.lyrics,
            'enrichment': self.enrichment,
            'catalog': self.catalog,
            'analysis': self.analysis,
            'network': self.network,
            'storage': self.storage,
            'logging': self.logging,
        }

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches for configuration files in multiple locations in order of
        precedence. The first file found will be used.
        """
        config_paths = [
            self.config_path,
            self.config_dir / "config.yaml",
            Path("config/config.yaml"),
            Path("config.yaml")
        ]

        config_data = {}
        for path in config_paths:
            if path and Path(path).exists():
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except Exception as e:
                    print(f"Warning: Failed to load config from {path}: {e}")

        # Apply loaded configuration to dataclass instances
        self._apply_config(config_data)

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only attributes that exist on the target dataclass are updated;
        unknown keys and sections are ignored.

        Args:
            config_data: Dictionary containing configuration sections
        """
        config_mapping = self._sections()

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """
        Load sensitive configuration from environment variables

        Environment variables take precedence over file-based configuration
        for security-sensitive values.
        """
        env_mappings = {
            'GENIUS_ACCESS_TOKEN': lambda v: setattr(self.lyrics, 'genius_access_token', v),
            'LASTFM_API_KEY': lambda v: setattr(self.enrichment, 'lastfm_api_key', v),
            'OPENAI_KEY': lambda v: setattr(self.analysis, 'openai_api_key', v),
            # OPENAI_API_KEY wins over the legacy OPENAI_KEY name
            'OPENAI_API_KEY': lambda v: setattr(self.analysis, 'openai_api_key', v),
            'LYRIC_LENS_DB': lambda v: setattr(self.storage, 'database_path', v),
            'LYRIC_LENS_LOG_LEVEL': lambda v: setattr(self.logging, 'level', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def _create_directories(self) -> None:
        """Create the configuration directory, warning on permission errors"""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            print(f"Warning: Failed to create directory {self.config_dir}: {e}")

    def get_config_directory(self) -> Path:
        """Get the expanded config directory path"""
        return self.config_dir.expanduser()

    def get_database_path(self) -> Path:
        """
        Get the expanded database file path

        Returns:
            Path object for the SQLite analysis database
        """
        return Path(self.storage.database_path).expanduser()

    def save_config(self, path: Optional[str] = None) -> None:
        """
        Save current configuration to file

        Serializes the current configuration to a YAML file, excluding
        sensitive data like API keys and tokens.

        Args:
            path: Custom path to save config, defaults to user config directory

        Raises:
            ConfigError: If the configuration cannot be saved
        """
        from ..core.exceptions import ConfigError

        if not path:
            path = self.get_config_directory() / "config.yaml"
        else:
            path = Path(path)

        config_data = {
            name: self._dataclass_to_dict(section)
            for name, section in self._sections().items()
        }

        # Remove sensitive data from saved config for security
        config_data['lyrics']['genius_access_token'] = ""
        config_data['enrichment']['lastfm_api_key'] = ""
        config_data['analysis']['openai_api_key'] = ""

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                yaml.dump(config_data, f, default_flow_style=False, indent=2)
        except OSError as e:
            raise ConfigError(
                f"Failed to save config to {path}: {e}",
                details={'path': str(path)}
            ) from e

    def _dataclass_to_dict(self, obj) -> Dict[str, Any]:
        """Convert dataclass to dictionary for YAML output"""
        result = {}
        for key, value in obj.__dict__.items():
            result[key] = value
        return result

    def validate(self) -> List[str]:
        """
        Validate current configuration

        Missing credentials for optional sources are reported as warnings
        (prefixed ``warning:``); everything else is an error that prevents
        searches from producing an analysis.

        Returns:
            List of problems, empty when the configuration is usable
        """
        problems = []

        if not self.analysis.openai_api_key:
            problems.append("OpenAI API key is required (set OPENAI_API_KEY)")

        if not self.lyrics.genius_access_token:
            problems.append("warning: Genius access token not set, Genius lyrics disabled")

        if self.enrichment.enabled and not self.enrichment.lastfm_api_key:
            problems.append("warning: Last.fm API key not set, genre enrichment disabled")

        if self.network.request_timeout <= 0:
            problems.append(f"Invalid request timeout: {self.network.request_timeout}")

        if self.analysis.json_max_tokens <= 0 or self.analysis.text_max_tokens <= 0:
            problems.append("Analysis token budgets must be positive")

        if self.logging.level.upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            problems.append(f"Invalid logging level: {self.logging.level}")

        return problems

    def __str__(self) -> str:
        """String summary of key configuration values"""
        sections = [
            f"Model: {self.analysis.model}",
            f"Genius: {'configured' if self.lyrics.genius_access_token else 'missing'}",
            f"Last.fm: {'configured' if self.enrichment.lastfm_api_key else 'missing'}",
            f"Database: {self.storage.database_path}",
        ]
        return f"Settings({', '.join(sections)})"


# Global settings instance for singleton pattern
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance

    Provides access to the singleton settings instance that is shared
    throughout the application.

    Returns:
        The global Settings instance
    """
    return settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Creates a new settings instance with updated configuration from files
    and environment variables.

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global settings
    settings = Settings(config_path)
    return settings
