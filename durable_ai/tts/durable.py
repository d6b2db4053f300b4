"""
Durable TTS wrapper.

Voice lookups and validation are journaled as reads. Synthesis, timing
marks and voice cloning are billed by the provider and journaled as
writes so a migrated worker never re-issues them.
"""

from __future__ import annotations

from typing import Optional

from ..durability import DurableWrapper, FunctionType
from ..errors import TTSError
from .provider import TTSProvider
from .types import (
    AudioSample,
    SynthesisOptions,
    SynthesisResult,
    TextInput,
    TimingInfo,
    ValidationResult,
    Voice,
    VoiceFilter,
)

NAMESPACE = "durable_tts"

READ = FunctionType.READ_REMOTE
WRITE = FunctionType.WRITE_REMOTE


class DurableTTS(DurableWrapper[TTSProvider]):
    """
    Journaling wrapper around a TTS provider.

    Usage:
        tts = DurableTTS(provider)
        result = await tts.synthesize(TextInput(content="Hello"), voice_id="en-US-A")
        audio = result.audio_data
    """

    namespace = NAMESPACE
    error_cls = TTSError

    async def list_voices(self, filter: Optional[VoiceFilter] = None) -> list[Voice]:
        return await self._call(
            "list_voices",
            READ,
            {"filter": filter},
            lambda: self.provider.list_voices(filter),
            list[Voice],
        )

    async def get_voice(self, voice_id: str) -> Voice:
        return await self._call(
            "get_voice",
            READ,
            {"voice_id": voice_id},
            lambda: self.provider.get_voice(voice_id),
            Voice,
        )

    async def synthesize(
        self,
        input: TextInput,
        voice_id: str,
        options: Optional[SynthesisOptions] = None,
    ) -> SynthesisResult:
        return await self._call(
            "synthesize",
            WRITE,
            {"input": input, "voice_id": voice_id, "options": options},
            lambda: self.provider.synthesize(input.model_copy(), voice_id, options),
            SynthesisResult,
        )

    async def synthesize_batch(
        self,
        inputs: list[TextInput],
        voice_id: str,
        options: Optional[SynthesisOptions] = None,
    ) -> list[SynthesisResult]:
        return await self._call(
            "synthesize_batch",
            WRITE,
            {"inputs": inputs, "voice_id": voice_id, "options": options},
            lambda: self.provider.synthesize_batch(
                [item.model_copy() for item in inputs], voice_id, options
            ),
            list[SynthesisResult],
        )

    async def validate_input(self, input: TextInput, voice_id: str) -> ValidationResult:
        return await self._call(
            "validate_input",
            READ,
            {"input": input, "voice_id": voice_id},
            lambda: self.provider.validate_input(input.model_copy(), voice_id),
            ValidationResult,
        )

    async def get_timing_marks(self, input: TextInput, voice_id: str) -> list[TimingInfo]:
        return await self._call(
            "get_timing_marks",
            WRITE,
            {"input": input, "voice_id": voice_id},
            lambda: self.provider.get_timing_marks(input.model_copy(), voice_id),
            list[TimingInfo],
        )

    async def create_voice_clone(
        self,
        name: str,
        samples: list[AudioSample],
        description: Optional[str] = None,
    ) -> Voice:
        return await self._call(
            "create_voice_clone",
            WRITE,
            {"name": name, "samples": samples, "description": description},
            lambda: self.provider.create_voice_clone(name, list(samples), description),
            Voice,
        )


__all__ = ["DurableTTS", "NAMESPACE"]
