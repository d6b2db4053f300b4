"""
Speech-to-text data model.

Request audio is carried as AudioBytes, so it is journaled as base64 text
like synthesized speech.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..errors import ErrorPayload
from ..tts.types import AudioBytes


class AudioFormat(str, Enum):
    WAV = "wav"
    MP3 = "mp3"
    FLAC = "flac"
    OGG = "ogg"
    AAC = "aac"
    PCM = "pcm"

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]


_MIME_TYPES = {
    AudioFormat.WAV: "audio/wav",
    AudioFormat.MP3: "audio/mpeg",
    AudioFormat.FLAC: "audio/flac",
    AudioFormat.OGG: "audio/ogg",
    AudioFormat.AAC: "audio/aac",
    AudioFormat.PCM: "audio/pcm",
}


class AudioConfig(BaseModel):
    format: AudioFormat = AudioFormat.WAV
    sample_rate: Optional[int] = Field(default=None, gt=0)
    channels: Optional[int] = Field(default=None, gt=0)


class Phrase(BaseModel):
    value: str
    boost: Optional[float] = None


class Vocabulary(BaseModel):
    phrases: list[Phrase] = Field(default_factory=list)


class TranscriptionOptions(BaseModel):
    language: Optional[str] = None
    model: Optional[str] = None
    enable_timestamps: bool = False
    enable_speaker_diarization: bool = False
    profanity_filter: bool = False
    vocabulary: Optional[Vocabulary] = None


class TranscriptionRequest(BaseModel):
    """One audio clip to transcribe."""

    request_id: str
    audio: AudioBytes
    config: AudioConfig = Field(default_factory=AudioConfig)
    options: Optional[TranscriptionOptions] = None


class TimingInfo(BaseModel):
    start_time_seconds: float
    end_time_seconds: float


class WordSegment(BaseModel):
    text: str
    timing: Optional[TimingInfo] = None
    confidence: Optional[float] = None
    speaker_id: Optional[str] = None


class TranscriptionAlternative(BaseModel):
    text: str
    confidence: float = 0.0
    words: list[WordSegment] = Field(default_factory=list)


class TranscriptionMetadata(BaseModel):
    request_id: str
    duration_seconds: float = 0.0
    audio_size_bytes: int = 0
    model: Optional[str] = None
    language: str = ""


class TranscriptionResult(BaseModel):
    alternatives: list[TranscriptionAlternative] = Field(default_factory=list)
    metadata: TranscriptionMetadata

    @property
    def text(self) -> str:
        """Text of the most likely alternative."""
        return self.alternatives[0].text if self.alternatives else ""


class FailedTranscription(BaseModel):
    request_id: str
    error: ErrorPayload


class MultiTranscriptionResult(BaseModel):
    successes: list[TranscriptionResult] = Field(default_factory=list)
    failures: list[FailedTranscription] = Field(default_factory=list)


class LanguageInfo(BaseModel):
    code: str
    name: str
    native_name: str = ""


__all__ = [
    "AudioConfig",
    "AudioFormat",
    "FailedTranscription",
    "LanguageInfo",
    "MultiTranscriptionResult",
    "Phrase",
    "TimingInfo",
    "TranscriptionAlternative",
    "TranscriptionMetadata",
    "TranscriptionOptions",
    "TranscriptionRequest",
    "TranscriptionResult",
    "Vocabulary",
    "WordSegment",
]
