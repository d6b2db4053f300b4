"""
TTS Provider Protocol.

BaseTTSProvider supplies defaults every provider can share: batch
synthesis as sequential synthesize() calls, input validation by length,
and unsupported-operation for voice cloning.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Optional, Protocol, runtime_checkable

from ..errors import ErrorKind, TTSError, unsupported
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

# Average speaking rate used for duration estimates
CHARACTERS_PER_SECOND = 15.0

_LOCALE = re.compile(r"\b([a-z]{2,3})[-_]([A-Z]{2})\b")
_LANGUAGE_NAMES = {
    "english": "en",
    "spanish": "es",
    "french": "fr",
    "german": "de",
    "italian": "it",
    "portuguese": "pt",
    "japanese": "ja",
    "chinese": "zh",
}


def infer_language(text: str) -> Optional[str]:
    """
    Best-effort language code from a voice name or description.

    "en-US-Wavenet-A" -> "en-US"; "Warm British English" -> "en".
    """
    match = _LOCALE.search(text)
    if match:
        return f"{match.group(1)}-{match.group(2)}"
    lowered = text.lower()
    for name, code in _LANGUAGE_NAMES.items():
        if name in lowered:
            return code
    return None


@runtime_checkable
class TTSProvider(Protocol):
    @property
    def name(self) -> str:
        ...

    async def list_voices(self, filter: Optional[VoiceFilter]) -> list[Voice]:
        ...

    async def get_voice(self, voice_id: str) -> Voice:
        ...

    async def synthesize(
        self, input: TextInput, voice_id: str, options: Optional[SynthesisOptions]
    ) -> SynthesisResult:
        ...

    async def synthesize_batch(
        self, inputs: list[TextInput], voice_id: str, options: Optional[SynthesisOptions]
    ) -> list[SynthesisResult]:
        ...

    async def validate_input(self, input: TextInput, voice_id: str) -> ValidationResult:
        ...

    async def get_timing_marks(self, input: TextInput, voice_id: str) -> list[TimingInfo]:
        ...

    async def create_voice_clone(
        self, name: str, samples: list[AudioSample], description: Optional[str]
    ) -> Voice:
        ...


class BaseTTSProvider(ABC):
    """Base class for TTS providers."""

    max_characters: int = 5000

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def list_voices(self, filter: Optional[VoiceFilter]) -> list[Voice]:
        pass

    @abstractmethod
    async def synthesize(
        self, input: TextInput, voice_id: str, options: Optional[SynthesisOptions]
    ) -> SynthesisResult:
        pass

    async def get_voice(self, voice_id: str) -> Voice:
        for voice in await self.list_voices(None):
            if voice.id == voice_id:
                return voice
        raise TTSError(ErrorKind.VOICE_NOT_FOUND, f"Voice not found: {voice_id}", element_id=voice_id)

    async def synthesize_batch(
        self, inputs: list[TextInput], voice_id: str, options: Optional[SynthesisOptions]
    ) -> list[SynthesisResult]:
        return [await self.synthesize(item, voice_id, options) for item in inputs]

    async def validate_input(self, input: TextInput, voice_id: str) -> ValidationResult:
        count = len(input.content)
        errors = []
        warnings = []
        if not input.content.strip():
            errors.append("Input text is empty")
        if count > self.max_characters:
            errors.append(f"Input exceeds {self.max_characters} characters")
        elif count > self.max_characters * 0.9:
            warnings.append("Input is close to the character limit")
        return ValidationResult(
            is_valid=not errors,
            character_count=count,
            estimated_duration=count / CHARACTERS_PER_SECOND,
            warnings=warnings,
            errors=errors,
        )

    async def get_timing_marks(self, input: TextInput, voice_id: str) -> list[TimingInfo]:
        options = SynthesisOptions(enable_timing=True, enable_word_timing=True)
        result = await self.synthesize(input, voice_id, options)
        return result.timing_info or []

    async def create_voice_clone(
        self, name: str, samples: list[AudioSample], description: Optional[str]
    ) -> Voice:
        raise unsupported(f"voice cloning on {self.name}", TTSError)


__all__ = ["BaseTTSProvider", "TTSProvider", "infer_language"]
