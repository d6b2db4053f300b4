"""
STT Provider Protocol.

Defines the interface for speech transcription providers. BaseSTTProvider
supplies batch transcription as sequential transcribe() calls and a
language list built from the provider's LANGUAGE_NAMES table.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar, Protocol, runtime_checkable

from ..errors import ErrorKind, ProviderError, STTError
from .types import (
    FailedTranscription,
    LanguageInfo,
    MultiTranscriptionResult,
    TranscriptionRequest,
    TranscriptionResult,
)

logger = logging.getLogger(__name__)

# Language code to name mapping for common languages
LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "en-US": "English (US)",
    "en-GB": "English (UK)",
    "hi": "Hindi",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
}


@runtime_checkable
class STTProvider(Protocol):
    """
    Protocol for Speech-to-Text providers.

    Implementations must provide:
    - transcribe(): Convert one audio clip to text
    - transcribe_many(): Convert several clips, reporting failures per clip
    - list_languages(): Languages the provider can transcribe
    - name: Provider identifier
    """

    @property
    def name(self) -> str:
        ...

    async def transcribe(self, request: TranscriptionRequest) -> TranscriptionResult:
        ...

    async def transcribe_many(
        self, requests: list[TranscriptionRequest]
    ) -> MultiTranscriptionResult:
        ...

    async def list_languages(self) -> list[LanguageInfo]:
        ...


class BaseSTTProvider(ABC):
    """Base class for STT provider implementations."""

    language_names: ClassVar[dict[str, str]] = LANGUAGE_NAMES

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass

    @abstractmethod
    async def transcribe(self, request: TranscriptionRequest) -> TranscriptionResult:
        """Transcribe one audio clip."""
        pass

    async def transcribe_many(
        self, requests: list[TranscriptionRequest]
    ) -> MultiTranscriptionResult:
        """
        Transcribe clips one after another.

        A clip that fails is reported in `failures`; the others still run.
        Fatal errors such as an invalid key stop the batch.
        """
        result = MultiTranscriptionResult()
        for request in requests:
            try:
                result.successes.append(await self.transcribe(request))
            except ProviderError as e:
                if e.kind in (ErrorKind.UNAUTHORIZED, ErrorKind.FORBIDDEN):
                    raise
                logger.warning(f"[{self.name}] Transcription {request.request_id} failed: {e}")
                error = e.with_domain(STTError)
                result.failures.append(
                    FailedTranscription(request_id=request.request_id, error=error.to_payload())
                )
        return result

    async def list_languages(self) -> list[LanguageInfo]:
        return [LanguageInfo(code=code, name=name) for code, name in self.language_names.items()]

    def check_audio(self, request: TranscriptionRequest) -> None:
        """Raise INVALID_AUDIO for an empty clip."""
        if not request.audio:
            raise STTError(
                ErrorKind.INVALID_AUDIO,
                f"Request {request.request_id} has no audio",
                provider=self.name,
            )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"


__all__ = ["BaseSTTProvider", "LANGUAGE_NAMES", "STTProvider"]
