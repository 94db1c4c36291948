# tests/test_analysis.py
"""Test the analysis engine and free-text metadata extraction"""

import pytest
from unittest.mock import Mock

from lyric_lens.analysis.engine import (
    DEFAULT_INTERPRETATION,
    DEFAULT_MEANING,
    DEFAULT_MOOD,
    EMPTY_ANALYSIS_TEXT,
    AnalysisEngine,
    LyricsAnalysis,
    MetadataAnalysis
)
from lyric_lens.analysis.extractor import extract_metadata
from lyric_lens.core.exceptions import AnalysisGenerationError
from lyric_lens.search.models import ResolvedSong
from lyric_lens.utils.helpers import LYRICS_NOT_FOUND


METADATA_REPLY = """## Core Theme
Holding on to someone you know you should let go.

## Emotional Tone
Vulnerable and torn.

## Key Symbolism
The repeated plea to stay.

## Personal or Universal?
Broadly relatable.

Genre: R&B
Release Year: 2012"""


class TestLyricsAnalysis:
    """Test JSON parsing with documented defaults"""

    def test_empty_object_gives_all_defaults(self):
        analysis = LyricsAnalysis.from_response("{}")

        assert (analysis.meaning, analysis.themes, analysis.mood, analysis.interpretation) == (
            DEFAULT_MEANING, (), DEFAULT_MOOD, DEFAULT_INTERPRETATION
        )
        assert analysis == LyricsAnalysis()

    @pytest.mark.parametrize("content", ["not json at all", "[1, 2]", None, ""])
    def test_malformed_reply_degrades_to_defaults(self, content):
        assert LyricsAnalysis.from_response(content) == LyricsAnalysis()

    def test_partial_reply_fills_missing_keys(self):
        analysis = LyricsAnalysis.from_response('{"meaning": "About loss", "themes": "grief"}')

        assert analysis.meaning == "About loss"
        assert analysis.themes == ()
        assert analysis.mood == DEFAULT_MOOD

    def test_non_string_themes_are_dropped(self):
        analysis = LyricsAnalysis.from_response('{"themes": ["grief", null, 3, {"x": 1}, "  ", " memory "]}')

        assert analysis.themes == ("grief", "memory")

    def test_display_text_layout(self):
        analysis = LyricsAnalysis(
            meaning="About loss.",
            themes=("grief", "memory"),
            mood="Somber",
            interpretation="A eulogy."
        )

        assert analysis.to_display_text() == (
            "About loss.\n\nKey themes: grief, memory\nMood: Somber\n\nA eulogy."
        )

    def test_record_keeps_resolved_metadata(self):
        song = ResolvedSong(title="Chandelier", artist="Sia", genre="pop", year=2014, lyrics="words")
        record = LyricsAnalysis(meaning="M").to_record(song)

        assert record.genre == "pop"
        assert record.year_released == 2014
        assert record.lyrics_analysis.startswith("M\n\nKey themes: ")


class TestMetadataAnalysis:
    """Test normalization of free-text analyses"""

    def test_extracted_metadata_overrides_resolved(self):
        song = ResolvedSong(title="Stay", artist="Rihanna", genre="pop", year=2013)
        record = MetadataAnalysis(text=METADATA_REPLY).to_record(song)

        assert record.genre == "R&B"
        assert record.year_released == 2012
        assert "Genre:" not in record.lyrics_analysis
        assert "Release Year:" not in record.lyrics_analysis
        assert record.lyrics_analysis.startswith("## Core Theme")

    def test_resolved_metadata_kept_when_nothing_extracted(self):
        song = ResolvedSong(title="Stay", artist="Rihanna", genre="pop", year=2013)
        record = MetadataAnalysis(text="## Core Theme\nText").to_record(song)

        assert record.genre == "pop"
        assert record.year_released == 2013


class TestExtractMetadata:
    """Test Genre:/Release Year: extraction"""

    def test_round_trip_example(self):
        result = extract_metadata("## Core Theme\nText\nGenre: Pop\nRelease Year: 1999")

        assert result.genre == "Pop"
        assert result.year == 1999
        assert result.cleaned_text == "## Core Theme\nText"

    def test_case_insensitive_labels(self):
        result = extract_metadata("text\ngenre: Soul\nrelease year: 1967")

        assert result.genre == "Soul"
        assert result.year == 1967

    def test_no_labels(self):
        result = extract_metadata("  Just prose.  ")

        assert result.genre is None
        assert result.year is None
        assert result.cleaned_text == "Just prose."

    def test_non_numeric_year(self):
        result = extract_metadata("Genre: Jazz\nRelease Year: Unknown")

        assert result.genre == "Jazz"
        assert result.year is None
        assert result.cleaned_text == ""

    def test_single_line_metadata(self):
        result = extract_metadata("Text\nGenre: Pop, Release Year: 1999")

        assert result.genre == "Pop"
        assert result.year == 1999
        assert result.cleaned_text == "Text"

    def test_markdown_emphasis_around_genre(self):
        assert extract_metadata("**Genre:** Pop Rock").genre == "Pop Rock"

    def test_empty_genre_label_does_not_take_next_line(self):
        result = extract_metadata("## Core Theme\nText\nGenre:\nNeon streets and longing\nRelease Year: 1999")

        assert result.genre is None
        assert result.year == 1999
        assert result.cleaned_text == "## Core Theme\nText\nNeon streets and longing"


class TestAnalysisEngine:
    """Test variant dispatch and model calls"""

    def test_lyrics_song_uses_json_mode(self, mock_settings, openai_client, make_completion):
        openai_client.chat.completions.create.return_value = make_completion(
            '{"meaning": "M", "themes": ["a", "b"], "mood": "Calm", "interpretation": "I"}'
        )
        engine = AnalysisEngine(mock_settings, client=openai_client)
        song = ResolvedSong(title="Chandelier", artist="Sia", lyrics="Party girls don't get hurt")

        result = engine.analyze(song)

        assert isinstance(result, LyricsAnalysis)
        assert result.themes == ("a", "b")
        kwargs = openai_client.chat.completions.create.call_args[1]
        assert kwargs['model'] == "gpt-4o"
        assert kwargs['max_tokens'] == 800
        assert kwargs['response_format'] == {'type': 'json_object'}
        assert "Party girls don't get hurt" in kwargs['messages'][1]['content']

    @pytest.mark.parametrize("lyrics", [None, "", LYRICS_NOT_FOUND])
    def test_song_without_lyrics_uses_free_text(self, mock_settings, openai_client, make_completion, lyrics):
        openai_client.chat.completions.create.return_value = make_completion(METADATA_REPLY)
        engine = AnalysisEngine(mock_settings, client=openai_client)
        song = ResolvedSong(title="Stay", artist="Rihanna", genre="pop", year=2012, lyrics=lyrics)

        result = engine.analyze(song)

        assert isinstance(result, MetadataAnalysis)
        assert result.text == METADATA_REPLY
        kwargs = openai_client.chat.completions.create.call_args[1]
        assert kwargs['max_tokens'] == 400
        assert 'response_format' not in kwargs
        assert '"Stay" by Rihanna (pop) from 2012' in kwargs['messages'][1]['content']

    def test_empty_free_text_reply(self, mock_settings, openai_client, make_completion):
        openai_client.chat.completions.create.return_value = make_completion(None)
        engine = AnalysisEngine(mock_settings, client=openai_client)

        result = engine.generate_song_meaning("Stay", "Unknown Artist")
        assert result.text == EMPTY_ANALYSIS_TEXT

    def test_api_failure_raises_generation_error(self, mock_settings, openai_client):
        openai_client.chat.completions.create.side_effect = RuntimeError("rate limited")
        engine = AnalysisEngine(mock_settings, client=openai_client)

        with pytest.raises(AnalysisGenerationError) as exc_info:
            engine.analyze_lyrics("Chandelier", "Sia", "lyrics")

        assert "Failed to analyze lyrics" in str(exc_info.value)
        assert exc_info.value.details['original_error'] == "rate limited"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_missing_api_key(self, mock_settings):
        mock_settings.analysis.openai_api_key = ""
        engine = AnalysisEngine(mock_settings)

        assert not engine.is_configured()
        with pytest.raises(AnalysisGenerationError):
            engine.generate_song_meaning("Stay", "Unknown Artist")
