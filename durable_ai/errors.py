"""
Error taxonomy for durable_ai.

Every domain (LLM, embeddings, vector, graph, TTS, search) reports failures
as a ProviderError carrying one ErrorKind, so callers never depend on a
provider's error shape.

Mapping Helpers:
    - error_from_status(): canonical HTTP status -> kind mapping
    - classify_request_error(): network-level failures -> kind
    - extract_element_id(): best-effort id extraction from messages/bodies

Errors are journaled by the durable wrappers through ErrorPayload, which
round-trips the concrete domain subclass.
"""

from __future__ import annotations

import json
import math
import re
from enum import Enum
from typing import Any, ClassVar

import httpx
from pydantic import BaseModel

# =============================================================================
# Kinds
# =============================================================================


class ErrorKind(str, Enum):
    """Named error kinds shared by every domain."""

    INVALID_INPUT = "invalid-input"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not-found"
    ALREADY_EXISTS = "already-exists"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate-limited"
    TIMEOUT = "timeout"
    CONNECTION_FAILED = "connection-failed"
    SERVICE_UNAVAILABLE = "service-unavailable"
    RESOURCE_EXHAUSTED = "resource-exhausted"
    SCHEMA_VIOLATION = "schema-violation"
    CONSTRAINT_VIOLATION = "constraint-violation"
    INVALID_QUERY = "invalid-query"
    INVALID_PROPERTY_TYPE = "invalid-property-type"
    TRANSACTION_CONFLICT = "transaction-conflict"
    DEADLOCK = "deadlock"
    UNSUPPORTED_OPERATION = "unsupported-operation"
    MODEL_NOT_FOUND = "model-not-found"
    VOICE_NOT_FOUND = "voice-not-found"
    INVALID_AUDIO = "invalid-audio"
    UNSUPPORTED_FORMAT = "unsupported-format"
    UNSUPPORTED_LANGUAGE = "unsupported-language"
    QUOTA_EXCEEDED = "quota-exceeded"
    INTERNAL = "internal"


RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.RATE_LIMITED,
        ErrorKind.TIMEOUT,
        ErrorKind.CONNECTION_FAILED,
        ErrorKind.SERVICE_UNAVAILABLE,
    }
)

DEFAULT_RETRY_AFTER_SECONDS = 60


# =============================================================================
# Exceptions
# =============================================================================


class ErrorPayload(BaseModel):
    """Serialized form of a ProviderError, as stored in the journal."""

    domain: str = "provider"
    kind: ErrorKind
    message: str = ""
    provider: str | None = None
    retry_after: int | None = None
    element_id: str | None = None
    status_code: int | None = None
    provider_error_json: str | None = None


class ProviderError(Exception):
    """
    Base exception for every provider failure.

    Attributes:
        kind: The ErrorKind classification
        message: Human-readable message
        provider: Provider that produced the error (e.g. "openai")
        retry_after: Wait hint in whole seconds (rate-limited only)
        element_id: Id of the element involved (not-found / already-exists)
        status_code: HTTP status when the error came from a response
        provider_error_json: Raw provider error body, if any
    """

    domain: ClassVar[str] = "provider"
    _registry: ClassVar[dict[str, type[ProviderError]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        ProviderError._registry[cls.domain] = cls

    def __init__(
        self,
        kind: ErrorKind,
        message: str = "",
        *,
        provider: str | None = None,
        retry_after: int | None = None,
        element_id: str | None = None,
        status_code: int | None = None,
        provider_error_json: str | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.provider = provider
        self.retry_after = retry_after
        self.element_id = element_id
        self.status_code = status_code
        self.provider_error_json = provider_error_json

    @property
    def retryable(self) -> bool:
        if self.kind in RETRYABLE_KINDS:
            return True
        return self.kind == ErrorKind.INTERNAL and (self.status_code or 0) >= 500

    def __str__(self) -> str:
        parts = [f"{self.kind.value}: {self.message}" if self.message else self.kind.value]
        if self.provider:
            parts.insert(0, f"[{self.provider}]")
        if self.retry_after is not None:
            parts.append(f"(retry after {self.retry_after}s)")
        return " ".join(parts)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind={self.kind.value!r}, message={self.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProviderError):
            return NotImplemented
        return type(self) is type(other) and self.to_payload() == other.to_payload()

    def __hash__(self) -> int:
        return hash((type(self), self.kind, self.message))

    def to_payload(self) -> ErrorPayload:
        return ErrorPayload(
            domain=self.domain,
            kind=self.kind,
            message=self.message,
            provider=self.provider,
            retry_after=self.retry_after,
            element_id=self.element_id,
            status_code=self.status_code,
            provider_error_json=self.provider_error_json,
        )

    @classmethod
    def from_payload(cls, payload: ErrorPayload | dict[str, Any]) -> ProviderError:
        """Rebuild the concrete error subclass from its journaled payload."""
        if isinstance(payload, dict):
            payload = ErrorPayload.model_validate(payload)
        error_cls = cls._registry.get(payload.domain, ProviderError)
        return error_cls(
            payload.kind,
            payload.message,
            provider=payload.provider,
            retry_after=payload.retry_after,
            element_id=payload.element_id,
            status_code=payload.status_code,
            provider_error_json=payload.provider_error_json,
        )

    def with_domain(self, error_cls: type[ProviderError]) -> ProviderError:
        """Re-tag this error as another domain's error type."""
        if isinstance(self, error_cls):
            return self
        payload = self.to_payload().model_copy(update={"domain": error_cls.domain})
        return ProviderError.from_payload(payload)


ProviderError._registry[ProviderError.domain] = ProviderError


class LLMError(ProviderError):
    domain = "llm"


class EmbedError(ProviderError):
    domain = "embed"


class VectorError(ProviderError):
    domain = "vector"


class GraphError(ProviderError):
    domain = "graph"


class TTSError(ProviderError):
    domain = "tts"


class STTError(ProviderError):
    domain = "stt"


class SearchError(ProviderError):
    domain = "search"


class StreamErrorInfo(BaseModel):
    """Error item carried inside a stream chunk."""

    kind: ErrorKind = ErrorKind.INTERNAL
    message: str = ""
    provider_error_json: str | None = None

    @classmethod
    def from_error(cls, error: ProviderError) -> StreamErrorInfo:
        return cls(
            kind=error.kind,
            message=error.message,
            provider_error_json=error.provider_error_json,
        )


# =============================================================================
# Convenience constructors
# =============================================================================


def unsupported(what: str, error_cls: type[ProviderError] = ProviderError) -> ProviderError:
    return error_cls(ErrorKind.UNSUPPORTED_OPERATION, f"Unsupported: {what}")


def unauthorized(message: str, error_cls: type[ProviderError] = ProviderError) -> ProviderError:
    return error_cls(ErrorKind.UNAUTHORIZED, message)


def internal_error(message: str, error_cls: type[ProviderError] = ProviderError) -> ProviderError:
    return error_cls(ErrorKind.INTERNAL, message)


def rate_limited(
    retry_after: int = DEFAULT_RETRY_AFTER_SECONDS,
    error_cls: type[ProviderError] = ProviderError,
) -> ProviderError:
    return error_cls(
        ErrorKind.RATE_LIMITED,
        "Too many requests",
        retry_after=retry_after,
    )


# =============================================================================
# Message heuristics
# =============================================================================

_PATH_ID = re.compile(r"([a-zA-Z0-9_]+/[a-zA-Z0-9_-]+)")
_QUOTED_ID = re.compile(r'"([^"]+)"')
_BODY_ID_FIELDS = ("_id", "_key", "documentHandle", "element_id", "id")


def _is_query_error(msg: str) -> bool:
    return any(word in msg for word in ("syntax", "parse", "query", "invalid statement"))


def _is_property_type_error(msg: str) -> bool:
    return "property" in msg and ("type" in msg or "invalid" in msg)


def _is_schema_violation(msg: str, body: Any) -> bool:
    if "collection" in msg and any(
        word in msg for word in ("not found", "does not exist", "unknown")
    ):
        return True
    if "type" in msg and ("mismatch" in msg or "expected" in msg):
        return True
    if isinstance(body, dict):
        return body.get("code") in ("schema_violation", "collection_not_found", "invalid_structure")
    return False


def _is_constraint_violation(msg: str) -> bool:
    return (
        "constraint" in msg
        or "unique" in msg
        or "violation" in msg
        or ("required" in msg and "missing" in msg)
        or "reference" in msg
        or "foreign" in msg
    )


def _is_duplicate(msg: str) -> bool:
    return "duplicate" in msg or "already exists" in msg


def extract_element_id(message: str, body: Any = None) -> str | None:
    """
    Best-effort extraction of an element id from an error body or message.

    Structured body fields win over message scraping. Returns None when
    nothing plausible is found.
    """
    if isinstance(body, dict):
        for key in _BODY_ID_FIELDS:
            value = body.get(key)
            if isinstance(value, str) and value:
                return value

    match = _PATH_ID.search(message)
    if match:
        return match.group(1)

    match = _QUOTED_ID.search(message)
    if match:
        candidate = match.group(1)
        if "/" in candidate or len(candidate) > 3:
            return candidate

    return None


def parse_retry_after(value: str | None) -> int:
    """Parse a Retry-After header into whole seconds (rounded up)."""
    if not value:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        return max(0, math.ceil(float(value)))
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS


# =============================================================================
# Canonical mappings
# =============================================================================


def error_from_status(
    status: int,
    message: str = "",
    body: Any = None,
    headers: httpx.Headers | dict[str, str] | None = None,
    *,
    provider: str | None = None,
    error_cls: type[ProviderError] = ProviderError,
) -> ProviderError:
    """
    Map an HTTP status (plus message and parsed body) to a ProviderError.

    Args:
        status: HTTP status code
        message: Error message extracted from the response
        body: Parsed JSON body (if any)
        headers: Response headers (used for Retry-After)
        provider: Provider name for the error
        error_cls: Domain error type to construct

    Returns:
        The classified error
    """
    msg = message.lower()
    raw_json = None
    if body is not None and not isinstance(body, str):
        raw_json = json.dumps(body, default=str)

    def make(kind: ErrorKind, text: str, **extra: Any) -> ProviderError:
        return error_cls(
            kind,
            text,
            provider=provider,
            status_code=status,
            provider_error_json=raw_json,
            **extra,
        )

    if status == 400:
        if _is_query_error(msg):
            return make(ErrorKind.INVALID_QUERY, f"Bad request - invalid query: {message}")
        if _is_property_type_error(msg):
            return make(ErrorKind.INVALID_PROPERTY_TYPE, f"Bad request - invalid property: {message}")
        if _is_schema_violation(msg, body):
            return make(ErrorKind.SCHEMA_VIOLATION, f"Schema violation: {message}")
        if _is_constraint_violation(msg):
            return make(ErrorKind.CONSTRAINT_VIOLATION, f"Constraint violation: {message}")
        return make(ErrorKind.INVALID_INPUT, f"Bad request: {message}")
    if status == 401:
        return make(ErrorKind.UNAUTHORIZED, message or "Authentication failed")
    if status == 403:
        return make(ErrorKind.FORBIDDEN, message or "Access denied")
    if status == 404:
        return make(
            ErrorKind.NOT_FOUND,
            f"Resource not found: {message}",
            element_id=extract_element_id(message, body),
        )
    if status == 409:
        if _is_duplicate(msg):
            return make(
                ErrorKind.ALREADY_EXISTS,
                f"Already exists: {message}",
                element_id=extract_element_id(message, body),
            )
        return make(ErrorKind.CONFLICT, f"Conflict: {message}")
    if status == 412:
        return make(ErrorKind.CONSTRAINT_VIOLATION, f"Precondition failed: {message}")
    if status == 422:
        return make(ErrorKind.SCHEMA_VIOLATION, f"Unprocessable entity: {message}")
    if status == 429:
        retry_after = parse_retry_after(httpx.Headers(headers or {}).get("Retry-After"))
        return make(ErrorKind.RATE_LIMITED, f"Too many requests: {message}", retry_after=retry_after)
    if status == 500:
        return make(ErrorKind.INTERNAL, f"Internal server error: {message}")
    if status in (502, 503):
        return make(ErrorKind.SERVICE_UNAVAILABLE, f"Service unavailable: {message}")
    if status == 504:
        return make(ErrorKind.TIMEOUT, f"Gateway timeout: {message}")
    if status == 507:
        return make(ErrorKind.RESOURCE_EXHAUSTED, f"Insufficient storage: {message}")

    if 400 <= status < 500:
        return make(ErrorKind.INVALID_INPUT, f"HTTP error [{status}]: {message}")
    return make(ErrorKind.INTERNAL, f"HTTP error [{status}]: {message}")


def classify_request_error(
    error: BaseException,
    *,
    provider: str | None = None,
    error_cls: type[ProviderError] = ProviderError,
) -> ProviderError:
    """Classify a network-level failure (no HTTP response) into a ProviderError."""
    text = str(error)
    msg = text.lower()

    if isinstance(error, (httpx.TimeoutException, TimeoutError)) or (
        "timeout" in msg or "timed out" in msg
    ):
        return error_cls(ErrorKind.TIMEOUT, f"Request timed out: {text}", provider=provider)

    if "refused" in msg or "unreachable" in msg:
        return error_cls(
            ErrorKind.SERVICE_UNAVAILABLE, f"Service unavailable: {text}", provider=provider
        )

    if "dns" in msg or "resolve" in msg or "name or service not known" in msg:
        return error_cls(
            ErrorKind.CONNECTION_FAILED, f"DNS resolution failed: {text}", provider=provider
        )

    return error_cls(ErrorKind.CONNECTION_FAILED, f"Request failed: {text}", provider=provider)


__all__ = [
    "DEFAULT_RETRY_AFTER_SECONDS",
    "EmbedError",
    "ErrorKind",
    "ErrorPayload",
    "GraphError",
    "LLMError",
    "ProviderError",
    "RETRYABLE_KINDS",
    "STTError",
    "SearchError",
    "StreamErrorInfo",
    "TTSError",
    "VectorError",
    "classify_request_error",
    "error_from_status",
    "extract_element_id",
    "internal_error",
    "parse_retry_after",
    "rate_limited",
    "unauthorized",
    "unsupported",
]
