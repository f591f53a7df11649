"""Task-level provider routing with retry and definition fallback.

Audio tasks (transcription, speech synthesis, pronunciation scoring) need
the multimodal primary provider and have no fallback. Word definitions are
text-only, so a failed primary call is re-routed once to the secondary
provider when its key is configured.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, TypeVar

from linguasync.core.config import Credentials, MergeConfig, ProvidersConfig, RetryPolicy
from linguasync.core.errors import EmptyResponse, MissingCredential, NoAudioData
from linguasync.core.models import (
    AudioInput,
    PronunciationScore,
    TranscriptionResult,
    WordDefinition,
)
from linguasync.core.retry import with_retry
from linguasync.llm.client import acomplete, response_audio, response_text
from linguasync.llm.normalize import parse_definition, parse_score, parse_transcription
from linguasync.llm.prompts import (
    DEFINITION_FALLBACK_SYSTEM,
    DEFINITION_SCHEMA,
    SCORE_SCHEMA,
    TRANSCRIPTION_SCHEMA,
    TRANSCRIPTION_SYSTEM,
    TRANSCRIPTION_USER,
    format_definition_prompt,
    format_score_prompt,
    json_schema_format,
)
from linguasync.transcriber.postprocess import merge_short_segments
from linguasync.utils.audio import resolve_mime_type, to_data_uri
from linguasync.utils.console import console

T = TypeVar("T")

# Recorder output is always webm; the declared type is not consulted for scoring.
SCORING_MIME_TYPE = "audio/webm"

# Gemini TTS returns raw 16-bit mono PCM at this rate.
SPEECH_SAMPLE_RATE = 24000


class Provider(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


class DefinitionOutcome(str, Enum):
    """Terminal states of the define-word state machine."""

    SUCCESS = "success"
    PRIMARY_FAILED_NO_FALLBACK = "primary_failed_no_fallback"
    FALLBACK_FAILED = "fallback_failed"


@dataclass
class ProviderTask:
    """One remote call: which provider serves it and what to send."""

    name: str
    provider: Provider
    model: str
    messages: list[dict]
    options: dict = field(default_factory=dict)


def _audio_part(audio: bytes, mime_type: str) -> dict:
    return {"type": "file", "file": {"file_data": to_data_uri(audio, mime_type)}}


class ProviderRouter:
    """Exposes the four provider-backed tasks.

    The router holds only read-only configuration, so one instance can
    serve any number of concurrent calls.

    Example:
        router = ProviderRouter(Credentials(primary_key="..."))
        result = asyncio.run(router.transcribe(AudioInput.from_path(path)))
    """

    def __init__(
        self,
        credentials: Credentials,
        providers: ProvidersConfig | None = None,
        policy: RetryPolicy | None = None,
        merge: MergeConfig | None = None,
    ) -> None:
        self.credentials = credentials
        self.providers = providers or ProvidersConfig()
        self.policy = policy or RetryPolicy()
        self.merge = merge or MergeConfig()

    def _primary_key(self) -> str:
        if not self.credentials.primary_key:
            raise MissingCredential(
                "API Key is missing. Set GEMINI_API_KEY in your environment or .env file."
            )
        return self.credentials.primary_key

    def _fallback_key(self) -> str:
        if not self.credentials.fallback_key:
            raise MissingCredential("DeepSeek API Key is missing")
        return self.credentials.fallback_key

    async def _send(self, task: ProviderTask, api_key: str):
        return await acomplete(
            task.messages,
            task.model,
            api_key,
            timeout=self.policy.attempt_timeout,
            **task.options,
        )

    async def _retried(self, operation: Callable[[], Awaitable[T]]) -> T:
        return await with_retry(operation, self.policy)

    async def transcribe(self, audio: AudioInput) -> TranscriptionResult:
        """Transcribe, translate and idiomatically rewrite a recording.

        Raises:
            MissingCredential: If no primary key is configured.
            EmptyResponse: If the provider returned no text.
            MalformedResponse: If the text is not a valid transcription payload.
        """
        api_key = self._primary_key()
        mime_type = resolve_mime_type(audio.filename, audio.mime_type)
        console.print(
            f"[bold]Uploading:[/bold] {audio.filename} "
            f"(detected {mime_type}, declared {audio.mime_type or 'none'})"
        )

        task = ProviderTask(
            name="transcribe",
            provider=Provider.PRIMARY,
            model=self.providers.primary_model,
            messages=[
                {"role": "system", "content": TRANSCRIPTION_SYSTEM},
                {
                    "role": "user",
                    "content": [
                        _audio_part(audio.data, mime_type),
                        {"type": "text", "text": TRANSCRIPTION_USER},
                    ],
                },
            ],
            options={
                "response_format": json_schema_format("transcription", TRANSCRIPTION_SCHEMA),
                "max_tokens": self.providers.max_output_tokens,
            },
        )

        async def attempt() -> TranscriptionResult:
            text = response_text(await self._send(task, api_key))
            if text is None:
                raise EmptyResponse("Empty response from provider")
            result = parse_transcription(text)
            result.segments = merge_short_segments(
                result.segments,
                min_words=self.merge.min_words,
                max_duration=self.merge.max_duration,
            )
            return result

        result = await self._retried(attempt)
        console.print(f"[green]Transcription complete:[/green] {len(result.segments)} segments")
        return result

    async def synthesize_speech(self, text: str) -> str:
        """Read text aloud; returns base64-encoded 16-bit PCM audio.

        Raises:
            MissingCredential: If no primary key is configured.
            NoAudioData: If the response carries no audio payload.
        """
        api_key = self._primary_key()
        task = ProviderTask(
            name="synthesize_speech",
            provider=Provider.PRIMARY,
            model=self.providers.tts_model,
            messages=[{"role": "user", "content": text}],
            options={
                "modalities": ["audio"],
                "audio": {"voice": self.providers.voice, "format": "pcm16"},
            },
        )

        async def attempt() -> str:
            audio = response_audio(await self._send(task, api_key))
            if audio is None:
                raise NoAudioData("No audio data returned")
            return audio

        return await self._retried(attempt)

    async def score_pronunciation(
        self, audio: AudioInput, reference_text: str
    ) -> PronunciationScore:
        """Grade a user's recording of ``reference_text``.

        Raises:
            MissingCredential: If no primary key is configured.
            EmptyResponse: If the provider returned no text.
            MalformedResponse: If the text is not a valid score payload.
        """
        api_key = self._primary_key()
        task = ProviderTask(
            name="score_pronunciation",
            provider=Provider.PRIMARY,
            model=self.providers.primary_model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        _audio_part(audio.data, SCORING_MIME_TYPE),
                        {"type": "text", "text": format_score_prompt(reference_text)},
                    ],
                },
            ],
            options={"response_format": json_schema_format("pronunciation_score", SCORE_SCHEMA)},
        )

        async def attempt() -> PronunciationScore:
            text = response_text(await self._send(task, api_key))
            if text is None:
                raise EmptyResponse("Scoring failed: empty response from provider")
            return parse_score(text)

        return await self._retried(attempt)

    async def define_word(self, word: str, context_sentence: str) -> WordDefinition:
        """Define a word in context, falling back to the secondary provider.

        Raises:
            MissingCredential: If no primary key is configured.
            Exception: The primary's error when no fallback key is set, or
                the fallback's error when both providers fail.
        """
        outcome, result = await self.resolve_definition(word, context_sentence)
        if outcome is DefinitionOutcome.SUCCESS:
            return result
        raise result

    async def resolve_definition(
        self, word: str, context_sentence: str
    ) -> tuple[DefinitionOutcome, WordDefinition | Exception]:
        """Run the define-word state machine without raising provider errors.

        Returns:
            The terminal outcome paired with either the definition (SUCCESS)
            or the error that survives (the primary's when no fallback is
            configured, the fallback's when both fail).
        """
        api_key = self._primary_key()
        prompt = format_definition_prompt(word, context_sentence)

        try:
            return DefinitionOutcome.SUCCESS, await self._define_primary(prompt, api_key)
        except Exception as primary_error:
            if not self.credentials.has_fallback:
                return DefinitionOutcome.PRIMARY_FAILED_NO_FALLBACK, primary_error
            console.print(
                f"[yellow]Primary definition failed, switching to fallback provider:[/yellow] "
                f"{primary_error}"
            )

        try:
            return DefinitionOutcome.SUCCESS, await self._define_fallback(prompt)
        except Exception as fallback_error:
            console.print(f"[red]Fallback definition also failed:[/red] {fallback_error}")
            return DefinitionOutcome.FALLBACK_FAILED, fallback_error

    async def _define_primary(self, prompt: str, api_key: str) -> WordDefinition:
        task = ProviderTask(
            name="define_word",
            provider=Provider.PRIMARY,
            model=self.providers.primary_model,
            messages=[{"role": "user", "content": prompt}],
            options={"response_format": json_schema_format("word_definition", DEFINITION_SCHEMA)},
        )

        async def attempt() -> WordDefinition:
            text = response_text(await self._send(task, api_key))
            if text is None:
                raise EmptyResponse("Empty definition response from provider")
            return parse_definition(text)

        return await self._retried(attempt)

    async def _define_fallback(self, prompt: str) -> WordDefinition:
        task = ProviderTask(
            name="define_word",
            provider=Provider.FALLBACK,
            model=self.providers.fallback_model,
            messages=[
                {"role": "system", "content": DEFINITION_FALLBACK_SYSTEM},
                {"role": "user", "content": prompt},
            ],
            options={"response_format": {"type": "json_object"}},
        )
        text = response_text(await self._send(task, self._fallback_key()))
        if text is None:
            raise EmptyResponse("Empty definition response from fallback provider")
        return parse_definition(text)
