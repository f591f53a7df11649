"""CLI tests with the provider router mocked out."""

import io
import json
import wave
from unittest.mock import AsyncMock, patch

import pytest
from rich.console import Console
from typer.testing import CliRunner

from linguasync.cli.app import app
from linguasync.cli.speak import write_pcm_wav
from linguasync.cli.transcribe import _format_time, display_transcription
from linguasync.core.errors import PermanentProviderError, TransientProviderError
from linguasync.core.models import (
    AudioInput,
    PronunciationScore,
    TranscriptionResult,
    TranscriptionSegment,
    WordDefinition,
)
from linguasync.history.store import JsonHistoryStore
from linguasync.llm.router import ProviderRouter

runner = CliRunner()


def _last_json_line(output: str) -> dict:
    return json.loads(output.strip().splitlines()[-1])


def _result() -> TranscriptionResult:
    return TranscriptionResult(
        language="en-US",
        segments=[
            TranscriptionSegment(
                start=0.0,
                end=2.5,
                text="I wanna grab a coffee",
                translation="我想去喝杯咖啡",
                idiomatic="I'm going to grab a coffee",
                idiom_explanation="更自然",
            )
        ],
    )


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("LSYNC_HISTORY__BASE_DIR", str(tmp_path / "history"))


class TestTranscribeCommand:
    def test_writes_json_and_history(self, tmp_path):
        clip = tmp_path / "clip.m4a"
        clip.write_bytes(b"audio")

        with patch.object(
            ProviderRouter, "transcribe", new_callable=AsyncMock, return_value=_result()
        ):
            result = runner.invoke(app, ["transcribe", str(clip)])

        assert result.exit_code == 0, result.output
        data = json.loads((tmp_path / "clip.transcription.json").read_text(encoding="utf-8"))
        assert data["segments"][0]["idiomatic"] == "I'm going to grab a coffee"
        entries = JsonHistoryStore(tmp_path / "history").get_all()
        assert len(entries) == 1
        assert entries[0].filename == "clip.m4a"

    def test_no_history(self, tmp_path):
        clip = tmp_path / "clip.m4a"
        clip.write_bytes(b"audio")

        with patch.object(
            ProviderRouter, "transcribe", new_callable=AsyncMock, return_value=_result()
        ):
            result = runner.invoke(app, ["transcribe", str(clip), "--no-history", "--no-json"])

        assert result.exit_code == 0, result.output
        assert JsonHistoryStore(tmp_path / "history").get_all() == []
        assert not (tmp_path / "clip.transcription.json").exists()

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["transcribe", str(tmp_path / "nope.m4a")])
        assert result.exit_code == 1

    def test_provider_failure_exits_one(self, tmp_path):
        clip = tmp_path / "clip.m4a"
        clip.write_bytes(b"audio")

        with patch.object(
            ProviderRouter,
            "transcribe",
            new_callable=AsyncMock,
            side_effect=TransientProviderError("[503] overloaded", 503),
        ):
            result = runner.invoke(app, ["transcribe", str(clip)])

        assert result.exit_code == 1
        assert "overloaded" in result.output

    def test_batch_summary(self, tmp_path):
        (tmp_path / "a.m4a").write_bytes(b"a")
        (tmp_path / "b.m4a").write_bytes(b"b")

        with patch.object(
            ProviderRouter, "transcribe", new_callable=AsyncMock, return_value=_result()
        ) as mock_transcribe:
            result = runner.invoke(app, ["transcribe", "*.m4a", "--no-history"])

        assert result.exit_code == 0, result.output
        assert mock_transcribe.call_count == 2
        assert "Batch Summary" in result.output


class TestDefineCommand:
    def test_json_output(self):
        definition = WordDefinition(
            word="gist", definition="main point", example="Get the gist.", phonetic="/dʒɪst/"
        )
        with patch.object(
            ProviderRouter, "define_word", new_callable=AsyncMock, return_value=definition
        ) as mock_define:
            result = runner.invoke(app, ["define", "gist", "-c", "Get the gist.", "--json"])

        assert result.exit_code == 0, result.output
        assert _last_json_line(result.stdout)["phonetic"] == "/dʒɪst/"
        mock_define.assert_awaited_once_with("gist", "Get the gist.")

    def test_plain_output_keeps_brackets(self):
        definition = WordDefinition(
            word="gist", definition="the main point [noun]", example="[/i]Get the gist."
        )
        with patch.object(
            ProviderRouter, "define_word", new_callable=AsyncMock, return_value=definition
        ):
            result = runner.invoke(app, ["define", "gist"])

        assert result.exit_code == 0, result.output
        assert "[noun]" in result.output
        assert "[/i]Get the gist." in result.output

    def test_failure(self):
        with patch.object(
            ProviderRouter,
            "define_word",
            new_callable=AsyncMock,
            side_effect=PermanentProviderError("[401] API key not valid", 401),
        ):
            result = runner.invoke(app, ["define", "gist"])
        assert result.exit_code == 1


class TestScoreCommand:
    def test_json_output(self, tmp_path):
        recording = tmp_path / "attempt.webm"
        recording.write_bytes(b"audio")
        score = PronunciationScore(score=88, feedback="Nice", accuracy="good")

        with patch.object(
            ProviderRouter, "score_pronunciation", new_callable=AsyncMock, return_value=score
        ):
            result = runner.invoke(app, ["score", str(recording), "Hello world", "--json"])

        assert result.exit_code == 0, result.output
        assert _last_json_line(result.stdout) == {
            "score": 88,
            "feedback": "Nice",
            "accuracy": "good",
        }


class TestSpeakCommand:
    def test_writes_wav(self, tmp_path):
        out = tmp_path / "phrase.wav"
        pcm_b64 = "AAABAAIAAwA="  # 4 frames of 16-bit PCM

        with patch.object(
            ProviderRouter, "synthesize_speech", new_callable=AsyncMock, return_value=pcm_b64
        ):
            result = runner.invoke(app, ["speak", "Hello", "-o", str(out)])

        assert result.exit_code == 0, result.output
        with wave.open(str(out), "rb") as wav:
            assert wav.getnchannels() == 1
            assert wav.getframerate() == 24000
            assert wav.getnframes() == 4

    def test_invalid_audio_payload(self, tmp_path):
        out = tmp_path / "phrase.wav"
        with patch.object(
            ProviderRouter, "synthesize_speech", new_callable=AsyncMock, return_value="not base64!"
        ):
            result = runner.invoke(app, ["speak", "Hello", "-o", str(out)])

        assert result.exit_code == 1
        assert "not valid base64" in result.output
        assert not out.exists()

    def test_write_pcm_wav_creates_parent(self, tmp_path):
        out = tmp_path / "nested" / "a.wav"
        write_pcm_wav(b"\x00\x00" * 10, out, sample_rate=16000)
        with wave.open(str(out), "rb") as wav:
            assert wav.getframerate() == 16000
            assert wav.getnframes() == 10


class TestHistoryCommands:
    def test_list_show_favorite_delete(self, tmp_path):
        store = JsonHistoryStore(tmp_path / "history")
        entry = store.save(AudioInput(b"x", "audio/webm", "clip.webm"), _result())

        result = runner.invoke(app, ["history", "list"])
        assert result.exit_code == 0, result.output
        assert entry.id in result.output

        result = runner.invoke(app, ["history", "show", entry.id, "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["language"] == "en-US"

        result = runner.invoke(app, ["history", "favorite", entry.id, "0"])
        assert result.exit_code == 0, result.output
        assert store.get(entry.id).transcription.segments[0].is_favorite is True

        result = runner.invoke(app, ["history", "delete", entry.id])
        assert result.exit_code == 0, result.output
        assert store.get(entry.id) is None

    def test_show_unknown(self):
        result = runner.invoke(app, ["history", "show", "123"])
        assert result.exit_code == 1

    def test_favorite_out_of_range(self, tmp_path):
        store = JsonHistoryStore(tmp_path / "history")
        entry = store.save(AudioInput(b"x", "audio/webm", "clip.webm"), _result())
        result = runner.invoke(app, ["history", "favorite", entry.id, "5"])
        assert result.exit_code == 1


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "lsync" in result.output


class TestDisplay:
    def _render(self, result: TranscriptionResult) -> str:
        buffer = io.StringIO()
        with patch("linguasync.cli.transcribe.console", Console(file=buffer, width=200)):
            display_transcription(result)
        return buffer.getvalue()

    def test_bracketed_text_is_literal(self):
        result = TranscriptionResult(
            language="en-US",
            segments=[
                TranscriptionSegment(
                    start=0.0,
                    end=3.0,
                    text="so [/laughs] anyway [inaudible]",
                    translation="所以[笑]",
                    idiomatic="[bold]anyway",
                    idiom_explanation="[/dim]",
                )
            ],
        )
        output = self._render(result)
        assert "[/laughs]" in output
        assert "[inaudible]" in output
        assert "[bold]anyway" in output

    @pytest.mark.parametrize(
        "seconds, expected",
        [(0.0, "00:00.0"), (59.96, "01:00.0"), (61.3, "01:01.3"), (125.5, "02:05.5")],
    )
    def test_format_time(self, seconds, expected):
        assert _format_time(seconds) == expected
