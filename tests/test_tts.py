"""
Tests for the TTS domain.
"""

import pytest

from durable_ai.errors import ErrorKind, TTSError
from durable_ai.tts import (
    AudioSample,
    BaseTTSProvider,
    DurableTTS,
    SynthesisMetadata,
    SynthesisResult,
    TextInput,
    TimingInfo,
    Voice,
    VoiceFilter,
    infer_language,
)


class FakeTTSProvider(BaseTTSProvider):
    max_characters = 100

    def __init__(self):
        self.synthesized = []

    @property
    def name(self):
        return "fake-tts"

    async def list_voices(self, filter):
        voices = [
            Voice(id="en-US-A", name="en-US-Wavenet-A", language="en-US"),
            Voice(id="es-B", name="Lucia", language="es"),
        ]
        if filter and filter.language:
            voices = [v for v in voices if v.language.startswith(filter.language)]
        return voices

    async def synthesize(self, input, voice_id, options):
        self.synthesized.append(input.content)
        timing = None
        if options and options.enable_timing:
            timing = [TimingInfo(start_time_seconds=0.0, end_time_seconds=0.4, text_offset_start=0)]
        audio = f"audio:{input.content}".encode() + b"\x00\xff"
        return SynthesisResult(
            audio_data=audio,
            metadata=SynthesisMetadata(character_count=len(input.content), audio_size_bytes=len(audio)),
            timing_info=timing,
        )


class TestDurableTTS:
    """Tests for journaled TTS operations."""

    @pytest.mark.asyncio
    async def test_audio_survives_journal(self, host):
        provider = FakeTTSProvider()
        tts = DurableTTS(provider, host=host)

        live = await tts.synthesize(TextInput(content="Hello"), "en-US-A")
        host.restart()
        replayed = await tts.synthesize(TextInput(content="Hello"), "en-US-A")

        assert replayed.audio_data == b"audio:Hello\x00\xff"
        assert replayed == live
        assert isinstance(host.entries[0].output["audio_data"], str)
        assert provider.synthesized == ["Hello"]

    @pytest.mark.asyncio
    async def test_batch_is_sequential(self, host):
        provider = FakeTTSProvider()
        results = await DurableTTS(provider, host=host).synthesize_batch(
            [TextInput(content="one"), TextInput(content="two")], "en-US-A"
        )

        assert [r.metadata.character_count for r in results] == [3, 3]
        assert provider.synthesized == ["one", "two"]
        assert len(host.entries) == 1

    @pytest.mark.asyncio
    async def test_get_voice_default(self, host):
        tts = DurableTTS(FakeTTSProvider(), host=host)

        voice = await tts.get_voice("es-B")
        assert voice.name == "Lucia"

        with pytest.raises(TTSError) as exc_info:
            await tts.get_voice("missing")
        assert exc_info.value.kind == ErrorKind.VOICE_NOT_FOUND
        assert exc_info.value.element_id == "missing"

    @pytest.mark.asyncio
    async def test_validate_input(self, host):
        tts = DurableTTS(FakeTTSProvider(), host=host)

        ok = await tts.validate_input(TextInput(content="Hello there"), "en-US-A")
        empty = await tts.validate_input(TextInput(content="   "), "en-US-A")
        long = await tts.validate_input(TextInput(content="x" * 101), "en-US-A")
        close = await tts.validate_input(TextInput(content="x" * 95), "en-US-A")

        assert ok.is_valid and ok.character_count == 11
        assert not empty.is_valid
        assert not long.is_valid
        assert close.is_valid and close.warnings
        assert host.entries[0].function_type.value == "read-remote"

    @pytest.mark.asyncio
    async def test_timing_marks_via_synthesis(self, host):
        marks = await DurableTTS(FakeTTSProvider(), host=host).get_timing_marks(
            TextInput(content="Hi"), "en-US-A"
        )

        assert marks[0].end_time_seconds == 0.4
        assert host.entries[0].function_type.value == "write-remote"

    @pytest.mark.asyncio
    async def test_voice_clone_unsupported_is_journaled(self, host):
        tts = DurableTTS(FakeTTSProvider(), host=host)
        samples = [AudioSample(data=b"\x01\x02", transcript="hi")]

        with pytest.raises(TTSError) as exc_info:
            await tts.create_voice_clone("mine", samples)

        assert exc_info.value.kind == ErrorKind.UNSUPPORTED_OPERATION
        assert host.entries[0].input["samples"][0]["data"] == "AQI="

    @pytest.mark.asyncio
    async def test_list_voices_filter(self, host):
        voices = await DurableTTS(FakeTTSProvider(), host=host).list_voices(VoiceFilter(language="es"))
        assert [v.id for v in voices] == ["es-B"]


class TestInferLanguage:
    """Tests for the voice language heuristic."""

    def test_locale_in_name(self):
        assert infer_language("en-US-Wavenet-A") == "en-US"

    def test_language_word(self):
        assert infer_language("Warm British English narrator") == "en"

    def test_unknown(self):
        assert infer_language("Rachel") is None
