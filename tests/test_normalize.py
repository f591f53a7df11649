"""Tests for provider reply normalization and validation."""

import json

import pytest

from linguasync.core.errors import MalformedResponse
from linguasync.llm.normalize import (
    parse_definition,
    parse_json_response,
    parse_score,
    parse_transcription,
    strip_fences,
)

from helpers import segment


class TestParseJsonResponse:
    def test_fenced_with_language_tag(self):
        assert parse_json_response('```json\n{"a":1}\n```') == {"a": 1}

    def test_unfenced(self):
        assert parse_json_response('{"a":1}') == {"a": 1}

    def test_fence_without_tag(self):
        assert parse_json_response('```\n{"a": [1, 2]}\n```') == {"a": [1, 2]}

    def test_surrounding_whitespace(self):
        assert parse_json_response('  ```json\n{"a":1}\n```  \n') == {"a": 1}

    def test_not_json_raises_with_raw_text(self):
        with pytest.raises(MalformedResponse) as exc_info:
            parse_json_response("not json")
        assert exc_info.value.raw_text == "not json"

    def test_truncated_json_raises(self):
        with pytest.raises(MalformedResponse):
            parse_json_response('{"segments": [{"start": 0')

    def test_strip_fences_leaves_plain_text(self):
        assert strip_fences('{"a":1}') == '{"a":1}'


def _transcription(**overrides) -> str:
    data = {
        "language": "en-US",
        "meta": {"wordCount": 12, "estimatedLevel": "B2", "speed": "normal"},
        "segments": [segment("Hello there everyone today", 0.0, 2.5)],
    }
    data.update(overrides)
    return json.dumps(data)


class TestParseTranscription:
    def test_valid(self):
        result = parse_transcription(_transcription())
        assert result.language == "en-US"
        assert result.meta.word_count == 12
        assert result.meta.estimated_level == "B2"
        seg = result.segments[0]
        assert seg.text == "Hello there everyone today"
        assert seg.translation == "zh:Hello there everyone today"
        assert seg.end == 2.5
        assert seg.is_favorite is False

    def test_empty_segments(self):
        result = parse_transcription(_transcription(segments=[]))
        assert result.segments == []

    def test_meta_fields_default_to_zero_values(self):
        result = parse_transcription(_transcription(meta={}))
        assert result.meta.word_count == 0
        assert result.meta.estimated_level == ""
        assert result.meta.speed == ""

    def test_missing_meta_is_malformed(self):
        data = json.loads(_transcription())
        del data["meta"]
        with pytest.raises(MalformedResponse, match="meta"):
            parse_transcription(json.dumps(data))

    def test_missing_segment_field(self):
        bad = segment("Hi", 0.0, 1.0)
        del bad["idiomExplanation"]
        with pytest.raises(MalformedResponse, match="idiomExplanation"):
            parse_transcription(_transcription(segments=[bad]))

    def test_wrong_type(self):
        bad = segment("Hi", 0.0, 1.0)
        bad["start"] = "zero"
        with pytest.raises(MalformedResponse, match="start"):
            parse_transcription(_transcription(segments=[bad]))

    def test_bool_is_not_a_number(self):
        bad = segment("Hi", 0.0, 1.0)
        bad["end"] = True
        with pytest.raises(MalformedResponse):
            parse_transcription(_transcription(segments=[bad]))

    def test_end_before_start(self):
        with pytest.raises(MalformedResponse, match="ends before"):
            parse_transcription(_transcription(segments=[segment("Hi", 3.0, 1.0)]))

    def test_out_of_order_segments(self):
        segments = [segment("later", 5.0, 8.0), segment("earlier", 0.0, 4.0)]
        with pytest.raises(MalformedResponse, match="starts before"):
            parse_transcription(_transcription(segments=segments))

    def test_overlapping_segments(self):
        segments = [segment("first", 0.0, 6.0), segment("second", 5.0, 8.0)]
        with pytest.raises(MalformedResponse, match="overlaps"):
            parse_transcription(_transcription(segments=segments))

    def test_touching_segments_accepted(self):
        segments = [segment("first", 0.0, 2.0), segment("second", 2.0, 3.5)]
        result = parse_transcription(_transcription(segments=segments))
        assert [seg.start for seg in result.segments] == [0.0, 2.0]

    def test_segments_not_a_list(self):
        with pytest.raises(MalformedResponse):
            parse_transcription(_transcription(segments={"start": 0}))

    def test_top_level_array(self):
        with pytest.raises(MalformedResponse):
            parse_transcription("[]")


class TestParseScore:
    def test_valid(self):
        score = parse_score('{"score": 85, "feedback": "Clear.", "accuracy": "good"}')
        assert score.score == 85
        assert score.accuracy == "good"

    def test_unknown_accuracy(self):
        with pytest.raises(MalformedResponse):
            parse_score('{"score": 85, "feedback": "", "accuracy": "excellent"}')

    def test_out_of_range(self):
        with pytest.raises(MalformedResponse):
            parse_score('{"score": 140, "feedback": "", "accuracy": "good"}')


class TestParseDefinition:
    def test_with_phonetic(self):
        result = parse_definition(
            '```json\n{"word": "run", "definition": "to move fast", '
            '"example": "I run daily.", "phonetic": "/rʌn/"}\n```'
        )
        assert result.word == "run"
        assert result.phonetic == "/rʌn/"

    def test_phonetic_optional(self):
        result = parse_definition('{"word": "run", "definition": "d", "example": "e"}')
        assert result.phonetic is None

    def test_missing_definition(self):
        with pytest.raises(MalformedResponse, match="definition"):
            parse_definition('{"word": "run", "example": "e"}')
