"""
AI analysis of songs through the OpenAI chat completions API

Two analysis variants exist and the engine picks one per song:

- LyricsAnalysis: the song has real lyric text. The model is asked for a
  JSON object (meaning, themes, mood, interpretation); missing or malformed
  keys are replaced with fixed defaults, and an unparseable reply degrades to
  all defaults instead of failing the request.
- MetadataAnalysis: no lyrics are available. The model writes a sectioned
  free-text analysis from title/artist/genre/year and ends it with
  ``Genre:`` and ``Release Year:`` lines, which are extracted and stripped
  before the text is stored.

Both variants expose ``to_record(song)``, so callers normalize a result into
an AnalysisRecord without having to know which variant they hold; only the
metadata-only variant runs the extractor.

Failures of the model call itself (network, auth, rate limit) are never
swallowed: they surface as AnalysisGenerationError.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

import openai

from ..config.settings import Settings, get_settings
from ..core.exceptions import AnalysisGenerationError
from ..core.models import AnalysisRecord
from ..search.models import ResolvedSong
from ..utils.logger import get_logger, log_performance
from .extractor import extract_metadata


logger = get_logger(__name__)


DEFAULT_MEANING = "Unable to analyze the meaning of this song."
DEFAULT_MOOD = "Unknown"
DEFAULT_INTERPRETATION = "No additional interpretation available."
EMPTY_ANALYSIS_TEXT = "Unable to generate analysis for this song."

CRITIC_PERSONA = (
    "Adopt the voice of a seasoned lyricist and literary critic. Imagine you've spent "
    "years dissecting songs from all eras and all music genres. Your tone should be "
    "thoughtful, precise, direct, no fluff and no vague generalities. Your goal is to "
    "provide deep, insightful analysis of song lyrics."
)

LYRICS_SYSTEM_PROMPT = CRITIC_PERSONA + """ Respond with JSON in this exact format:
{
  "meaning": "A comprehensive explanation of the song's overall meaning and message",
  "themes": ["array", "of", "main", "themes"],
  "mood": "overall emotional tone/mood",
  "interpretation": "deeper artistic interpretation and context"
}"""

METADATA_SYSTEM_PROMPT = """Adopt the voice of a seasoned lyricist and literary critic. Your goal is to provide original and insightful analysis of song lyrics.

METADATA:
- Always return the accurate genre and release year for the song from your knowledge

ANALYSIS FORMAT - Start directly with these headers, no introduction:

## Core Theme
Identify the primary message in the lyrics (1-2 sentences)

## Emotional Tone
Describe predominant moods and emotional journey

## Key Symbolism
Highlight 2-3 important metaphors, imagery, or recurring motifs

## Personal or Universal?
Note whether the message is autobiographical or intended to be broadly relatable

End your analysis with this exact format:
Genre: [actual genre]
Release Year: [actual year]

IMPORTANT: Do not include "Analysis of..." headers. Focus on providing accurate metadata from your knowledge."""


@dataclass(frozen=True)
class LyricsAnalysis:
    """Structured analysis grounded in the lyric text"""
    meaning: str = DEFAULT_MEANING
    themes: Tuple[str, ...] = field(default_factory=tuple)
    mood: str = DEFAULT_MOOD
    interpretation: str = DEFAULT_INTERPRETATION

    kind = "lyrics"

    @classmethod
    def from_response(cls, content: Optional[str]) -> "LyricsAnalysis":
        """
        Build an analysis from the model's JSON reply, filling defaults

        A reply that is not a JSON object yields the all-defaults analysis.
        """
        try:
            data = json.loads(content or "{}")
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Model returned malformed JSON, using default analysis: {e}")
            return cls()

        if not isinstance(data, dict):
            logger.warning(f"Model returned {type(data).__name__} instead of an object, using default analysis")
            return cls()

        themes = data.get('themes')
        if isinstance(themes, list):
            themes = tuple(
                theme.strip() for theme in themes
                if isinstance(theme, str) and theme.strip()
            )
        else:
            themes = ()

        return cls(
            meaning=_text_or_default(data.get('meaning'), DEFAULT_MEANING),
            themes=themes,
            mood=_text_or_default(data.get('mood'), DEFAULT_MOOD),
            interpretation=_text_or_default(data.get('interpretation'), DEFAULT_INTERPRETATION)
        )

    def to_display_text(self) -> str:
        """Join the four fields into the stored display string"""
        return (
            f"{self.meaning}\n\n"
            f"Key themes: {', '.join(self.themes)}\n"
            f"Mood: {self.mood}\n\n"
            f"{self.interpretation}"
        )

    def to_record(self, song: ResolvedSong) -> AnalysisRecord:
        return AnalysisRecord(
            title=song.title,
            artist=song.artist,
            genre=song.genre,
            year_released=song.year,
            lyrics_analysis=self.to_display_text()
        )


@dataclass(frozen=True)
class MetadataAnalysis:
    """Free-text analysis written from song metadata alone"""
    text: str

    kind = "metadata"

    def to_record(self, song: ResolvedSong) -> AnalysisRecord:
        """
        Normalize into a record, letting the model's stated genre/year win

        Values the model did not state fall back to the resolved song's.
        """
        extracted = extract_metadata(self.text)
        enriched = song.with_metadata(extracted.genre, extracted.year)

        return AnalysisRecord(
            title=enriched.title,
            artist=enriched.artist,
            genre=enriched.genre,
            year_released=enriched.year,
            lyrics_analysis=extracted.cleaned_text or EMPTY_ANALYSIS_TEXT
        )


AnalysisResult = Union[LyricsAnalysis, MetadataAnalysis]


def _text_or_default(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


class AnalysisEngine:
    """
    Generates song analyses with an OpenAI chat model

    The OpenAI client is created lazily and without automatic retries.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[openai.OpenAI] = None):
        """
        Args:
            settings: Settings instance, defaults to the global settings
            client: Pre-built OpenAI client (tests pass a mock)
        """
        self.settings = settings or get_settings()
        self.config = self.settings.analysis
        self._client = client

    @property
    def client(self) -> openai.OpenAI:
        """
        OpenAI client with lazy initialization

        Raises:
            AnalysisGenerationError: If no API key is configured
        """
        if self._client is None:
            if not self.config.openai_api_key:
                raise AnalysisGenerationError(
                    "OpenAI API key not configured. Set OPENAI_API_KEY.",
                    details={'reason': 'missing_credential'}
                )
            self._client = openai.OpenAI(
                api_key=self.config.openai_api_key,
                timeout=self.config.timeout,
                max_retries=0
            )
            logger.debug("OpenAI client initialized")
        return self._client

    def is_configured(self) -> bool:
        return self._client is not None or bool(self.config.openai_api_key)

    def analyze(self, song: ResolvedSong) -> AnalysisResult:
        """
        Analyze a resolved song, choosing the variant by lyric availability

        Args:
            song: Merged song record

        Returns:
            LyricsAnalysis when the song has lyric text, else MetadataAnalysis

        Raises:
            AnalysisGenerationError: If the model call fails
        """
        if song.has_lyrics:
            logger.info(f"Analyzing lyrics of {song.artist} - {song.title}")
            return self.analyze_lyrics(song.title, song.artist, song.lyrics)

        logger.info(f"No lyrics for {song.artist} - {song.title}, analyzing from metadata")
        return self.generate_song_meaning(song.title, song.artist, song.genre, song.year)

    def analyze_lyrics(self, title: str, artist: str, lyrics: str) -> LyricsAnalysis:
        """Lyrics-grounded analysis returned as structured fields"""
        messages = [
            {'role': 'system', 'content': LYRICS_SYSTEM_PROMPT},
            {
                'role': 'user',
                'content': (
                    f'Analyze the lyrics of "{title}" by {artist}. Here are the lyrics:\n\n'
                    f'{lyrics}\n\n'
                    "Provide a thoughtful analysis of the song's meaning, themes, mood, "
                    "and interpretation."
                )
            }
        ]

        content = self._complete(
            messages,
            max_tokens=self.config.json_max_tokens,
            failure_message="Failed to analyze lyrics",
            response_format={'type': 'json_object'}
        )
        return LyricsAnalysis.from_response(content)

    def generate_song_meaning(
        self,
        title: str,
        artist: str,
        genre: Optional[str] = None,
        year: Optional[int] = None
    ) -> MetadataAnalysis:
        """Metadata-only analysis returned as raw free text"""
        context = f' ({genre})' if genre else ''
        if year:
            context += f' from {year}'

        messages = [
            {'role': 'system', 'content': METADATA_SYSTEM_PROMPT},
            {
                'role': 'user',
                'content': (
                    f'Analyze the song "{title}" by {artist}{context}.\n\n'
                    "Use your knowledge to provide accurate genre and release year "
                    "information for this song in your analysis. Follow the exact format "
                    'specified in the system prompt starting with "## Core Theme". Do not '
                    'include any title header or "Analysis of..." text.'
                )
            }
        ]

        content = self._complete(
            messages,
            max_tokens=self.config.text_max_tokens,
            failure_message="Failed to generate song meaning"
        )
        if not content or not content.strip():
            return MetadataAnalysis(text=EMPTY_ANALYSIS_TEXT)
        return MetadataAnalysis(text=content)

    @log_performance
    def _complete(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int,
        failure_message: str,
        response_format: Optional[Dict[str, str]] = None
    ) -> Optional[str]:
        """
        Run one chat completion and return the message content

        Raises:
            AnalysisGenerationError: On any API or client failure
        """
        client = self.client
        request = {
            'model': self.config.model,
            'messages': messages,
            'max_tokens': max_tokens,
        }
        if response_format:
            request['response_format'] = response_format

        try:
            response = client.chat.completions.create(**request)
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise AnalysisGenerationError(
                f"{failure_message}: {e}",
                details={'model': self.config.model, 'original_error': str(e)}
            ) from e
        except Exception as e:
            logger.error(f"Unexpected error calling OpenAI: {e}")
            raise AnalysisGenerationError(
                f"{failure_message}: {e}",
                details={'model': self.config.model, 'original_error': str(e)}
            ) from e

        if not response.choices:
            return None
        return response.choices[0].message.content
