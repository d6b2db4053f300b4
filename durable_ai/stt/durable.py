"""
Durable STT wrapper.

Transcription is billed per clip, so transcribe() and transcribe_many() are
journaled as writes. The language list is static provider data and is
served straight from the provider without journaling.
"""

from __future__ import annotations

from ..durability import DurableWrapper, FunctionType
from ..errors import STTError
from .provider import STTProvider
from .types import (
    LanguageInfo,
    MultiTranscriptionResult,
    TranscriptionRequest,
    TranscriptionResult,
)

NAMESPACE = "durable_stt"


class DurableSTT(DurableWrapper[STTProvider]):
    """
    Journaling wrapper around an STT provider.

    Usage:
        stt = DurableSTT(provider)
        result = await stt.transcribe(TranscriptionRequest(request_id="r1", audio=clip))
        text = result.text
    """

    namespace = NAMESPACE
    error_cls = STTError

    async def transcribe(self, request: TranscriptionRequest) -> TranscriptionResult:
        return await self._call(
            "transcribe",
            FunctionType.WRITE_REMOTE,
            {"request": request},
            lambda: self.provider.transcribe(request.model_copy(deep=True)),
            TranscriptionResult,
        )

    async def transcribe_many(
        self, requests: list[TranscriptionRequest]
    ) -> MultiTranscriptionResult:
        return await self._call(
            "transcribe_many",
            FunctionType.WRITE_REMOTE,
            {"requests": requests},
            lambda: self.provider.transcribe_many([r.model_copy(deep=True) for r in requests]),
            MultiTranscriptionResult,
        )

    async def list_languages(self) -> list[LanguageInfo]:
        return await self._direct(self.provider.list_languages)


__all__ = ["DurableSTT", "NAMESPACE"]
