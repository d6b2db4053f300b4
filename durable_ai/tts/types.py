"""
Text-to-speech data model.

Audio is carried as AudioBytes: raw bytes in Python, base64 text in the
journal.
"""

from __future__ import annotations

import base64
import binascii
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer


def _decode_audio(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Audio data is not valid base64: {e}") from e
    return value


AudioBytes = Annotated[
    bytes,
    BeforeValidator(_decode_audio),
    PlainSerializer(lambda data: base64.b64encode(data).decode("ascii"), when_used="json"),
]


class VoiceGender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    NEUTRAL = "neutral"


class VoiceQuality(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"
    NEURAL = "neural"
    STUDIO = "studio"


class Voice(BaseModel):
    id: str
    name: str
    language: str = ""
    additional_languages: list[str] = Field(default_factory=list)
    gender: Optional[VoiceGender] = None
    quality: VoiceQuality = VoiceQuality.STANDARD
    description: Optional[str] = None
    provider: str = ""
    sample_rate: Optional[int] = None
    is_custom: bool = False
    is_cloned: bool = False
    preview_url: Optional[str] = None
    use_cases: list[str] = Field(default_factory=list)


class VoiceFilter(BaseModel):
    language: Optional[str] = None
    gender: Optional[VoiceGender] = None
    quality: Optional[VoiceQuality] = None
    supports_ssml: Optional[bool] = None
    search_query: Optional[str] = None


class TextType(str, Enum):
    PLAIN = "plain"
    SSML = "ssml"


class TextInput(BaseModel):
    content: str
    text_type: TextType = TextType.PLAIN
    language: Optional[str] = None


class AudioFormat(str, Enum):
    MP3 = "mp3"
    WAV = "wav"
    PCM = "pcm"
    OGG_OPUS = "ogg-opus"
    AAC = "aac"
    FLAC = "flac"
    MULAW = "mulaw"
    ALAW = "alaw"


class AudioConfig(BaseModel):
    format: AudioFormat = AudioFormat.MP3
    sample_rate: Optional[int] = None
    bit_rate: Optional[int] = None
    channels: Optional[int] = None


class VoiceSettings(BaseModel):
    speed: Optional[float] = None
    pitch: Optional[float] = None
    volume: Optional[float] = None
    stability: Optional[float] = None
    similarity: Optional[float] = None
    style: Optional[float] = None


class SynthesisOptions(BaseModel):
    audio_config: Optional[AudioConfig] = None
    voice_settings: Optional[VoiceSettings] = None
    enable_timing: bool = False
    enable_word_timing: bool = False
    seed: Optional[int] = None
    model_version: Optional[str] = None


class TimingMarkType(str, Enum):
    WORD = "word"
    SENTENCE = "sentence"
    PARAGRAPH = "paragraph"
    PHONEME = "phoneme"
    SSML_MARK = "ssml-mark"


class TimingInfo(BaseModel):
    start_time_seconds: float
    end_time_seconds: Optional[float] = None
    text_offset_start: Optional[int] = None
    text_offset_end: Optional[int] = None
    mark_type: Optional[TimingMarkType] = None


class SynthesisMetadata(BaseModel):
    duration_seconds: float = 0.0
    character_count: int = 0
    word_count: int = 0
    audio_size_bytes: int = 0
    request_id: str = ""
    provider_info: Optional[str] = None


class SynthesisResult(BaseModel):
    audio_data: AudioBytes = b""
    metadata: SynthesisMetadata = Field(default_factory=SynthesisMetadata)
    timing_info: Optional[list[TimingInfo]] = None


class ValidationResult(BaseModel):
    is_valid: bool
    character_count: int = 0
    estimated_duration: Optional[float] = None
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class AudioSample(BaseModel):
    data: AudioBytes
    transcript: Optional[str] = None
    quality_rating: Optional[int] = None


__all__ = [
    "AudioBytes",
    "AudioConfig",
    "AudioFormat",
    "AudioSample",
    "SynthesisMetadata",
    "SynthesisOptions",
    "SynthesisResult",
    "TextInput",
    "TextType",
    "TimingInfo",
    "TimingMarkType",
    "ValidationResult",
    "Voice",
    "VoiceFilter",
    "VoiceGender",
    "VoiceQuality",
    "VoiceSettings",
]
