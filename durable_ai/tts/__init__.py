"""
Text-to-speech domain.

- TTSProvider / BaseTTSProvider: adapter interface with shared defaults
- DurableTTS: journaling wrapper
"""

from .durable import DurableTTS
from .provider import BaseTTSProvider, TTSProvider, infer_language
from .types import (
    AudioBytes,
    AudioConfig,
    AudioFormat,
    AudioSample,
    SynthesisMetadata,
    SynthesisOptions,
    SynthesisResult,
    TextInput,
    TextType,
    TimingInfo,
    TimingMarkType,
    ValidationResult,
    Voice,
    VoiceFilter,
    VoiceGender,
    VoiceQuality,
    VoiceSettings,
)

__all__ = [
    "AudioBytes",
    "AudioConfig",
    "AudioFormat",
    "AudioSample",
    "BaseTTSProvider",
    "DurableTTS",
    "SynthesisMetadata",
    "SynthesisOptions",
    "SynthesisResult",
    "TTSProvider",
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
    "infer_language",
]
