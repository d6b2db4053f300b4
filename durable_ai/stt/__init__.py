"""
Speech-to-text domain.

- STTProvider / BaseSTTProvider: adapter interface with shared defaults
- DurableSTT: journaling wrapper
"""

from .durable import DurableSTT
from .provider import LANGUAGE_NAMES, BaseSTTProvider, STTProvider
from .types import (
    AudioConfig,
    AudioFormat,
    FailedTranscription,
    LanguageInfo,
    MultiTranscriptionResult,
    Phrase,
    TimingInfo,
    TranscriptionAlternative,
    TranscriptionMetadata,
    TranscriptionOptions,
    TranscriptionRequest,
    TranscriptionResult,
    Vocabulary,
    WordSegment,
)

__all__ = [
    "AudioConfig",
    "AudioFormat",
    "BaseSTTProvider",
    "DurableSTT",
    "FailedTranscription",
    "LANGUAGE_NAMES",
    "LanguageInfo",
    "MultiTranscriptionResult",
    "Phrase",
    "STTProvider",
    "TimingInfo",
    "TranscriptionAlternative",
    "TranscriptionMetadata",
    "TranscriptionOptions",
    "TranscriptionRequest",
    "TranscriptionResult",
    "Vocabulary",
    "WordSegment",
]
