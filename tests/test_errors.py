"""
Tests for the error taxonomy and HTTP status mapping.
"""

import httpx
import pytest

from durable_ai.errors import (
    DEFAULT_RETRY_AFTER_SECONDS,
    ErrorKind,
    GraphError,
    LLMError,
    ProviderError,
    SearchError,
    StreamErrorInfo,
    VectorError,
    classify_request_error,
    error_from_status,
    extract_element_id,
    parse_retry_after,
)


# =============================================================================
# Status mapping
# =============================================================================


class TestErrorFromStatus:
    """Tests for the canonical status -> kind mapping."""

    @pytest.mark.parametrize(
        "status,kind",
        [
            (400, ErrorKind.INVALID_INPUT),
            (401, ErrorKind.UNAUTHORIZED),
            (403, ErrorKind.FORBIDDEN),
            (404, ErrorKind.NOT_FOUND),
            (409, ErrorKind.CONFLICT),
            (412, ErrorKind.CONSTRAINT_VIOLATION),
            (422, ErrorKind.SCHEMA_VIOLATION),
            (429, ErrorKind.RATE_LIMITED),
            (500, ErrorKind.INTERNAL),
            (502, ErrorKind.SERVICE_UNAVAILABLE),
            (503, ErrorKind.SERVICE_UNAVAILABLE),
            (504, ErrorKind.TIMEOUT),
            (507, ErrorKind.RESOURCE_EXHAUSTED),
        ],
    )
    def test_canonical_statuses(self, status, kind):
        error = error_from_status(status, "something went wrong")
        assert error.kind == kind
        assert error.status_code == status

    def test_unknown_client_status_is_invalid_input(self):
        assert error_from_status(418, "teapot").kind == ErrorKind.INVALID_INPUT

    def test_unknown_server_status_is_internal(self):
        assert error_from_status(599, "weird").kind == ErrorKind.INTERNAL

    def test_400_query_message(self):
        error = error_from_status(400, "Syntax error near MATCH")
        assert error.kind == ErrorKind.INVALID_QUERY

    def test_400_property_message(self):
        error = error_from_status(400, "property 'age' has invalid type")
        assert error.kind == ErrorKind.INVALID_PROPERTY_TYPE

    def test_400_schema_message(self):
        error = error_from_status(400, "collection does not exist")
        assert error.kind == ErrorKind.SCHEMA_VIOLATION

    def test_400_constraint_message(self):
        error = error_from_status(400, "unique index violated")
        assert error.kind == ErrorKind.CONSTRAINT_VIOLATION

    def test_409_duplicate_is_already_exists(self):
        error = error_from_status(409, 'Document "users/42" already exists')
        assert error.kind == ErrorKind.ALREADY_EXISTS
        assert error.element_id == "users/42"

    def test_404_element_id_from_body(self):
        error = error_from_status(404, "missing", {"_id": "people/7"})
        assert error.element_id == "people/7"
        assert error.provider_error_json == '{"_id": "people/7"}'

    def test_429_retry_after_header(self):
        error = error_from_status(429, "slow down", headers=httpx.Headers({"Retry-After": "7"}))
        assert error.kind == ErrorKind.RATE_LIMITED
        assert error.retry_after == 7

    def test_429_retry_after_plain_dict_any_case(self):
        error = error_from_status(429, "slow down", headers={"retry-after": "7"})
        assert error.retry_after == 7

    def test_429_without_header_uses_default(self):
        error = error_from_status(429, "slow down")
        assert error.retry_after == DEFAULT_RETRY_AFTER_SECONDS

    def test_domain_class_and_provider(self):
        error = error_from_status(401, "nope", provider="pinecone", error_cls=VectorError)
        assert isinstance(error, VectorError)
        assert error.provider == "pinecone"


class TestParseRetryAfter:
    """Tests for Retry-After parsing."""

    def test_integer(self):
        assert parse_retry_after("7") == 7

    def test_fraction_rounds_up(self):
        assert parse_retry_after("1.2") == 2

    def test_missing_or_invalid(self):
        assert parse_retry_after(None) == DEFAULT_RETRY_AFTER_SECONDS
        assert parse_retry_after("Wed, 21 Oct 2026 07:28:00 GMT") == DEFAULT_RETRY_AFTER_SECONDS


class TestClassifyRequestError:
    """Tests for network failure classification."""

    def test_timeout(self):
        error = classify_request_error(httpx.ReadTimeout("read timed out"))
        assert error.kind == ErrorKind.TIMEOUT

    def test_refused(self):
        error = classify_request_error(httpx.ConnectError("Connection refused"))
        assert error.kind == ErrorKind.SERVICE_UNAVAILABLE

    def test_dns(self):
        error = classify_request_error(httpx.ConnectError("Name or service not known"))
        assert error.kind == ErrorKind.CONNECTION_FAILED

    def test_other(self):
        error = classify_request_error(httpx.RemoteProtocolError("peer closed"), error_cls=LLMError)
        assert error.kind == ErrorKind.CONNECTION_FAILED
        assert isinstance(error, LLMError)


class TestExtractElementId:
    """Tests for best-effort element id extraction."""

    def test_path_in_message(self):
        assert extract_element_id("vertex people/alice not found") == "people/alice"

    def test_quoted_in_message(self):
        assert extract_element_id('no element "abcdef"') == "abcdef"

    def test_nothing(self):
        assert extract_element_id("not found") is None


# =============================================================================
# ProviderError
# =============================================================================


class TestProviderError:
    """Tests for ProviderError behavior."""

    def test_payload_roundtrip_keeps_subclass(self):
        error = GraphError(ErrorKind.NOT_FOUND, "gone", element_id="v/1", provider="arango")
        restored = ProviderError.from_payload(error.to_payload().model_dump(mode="json"))

        assert isinstance(restored, GraphError)
        assert restored == error

    def test_with_domain(self):
        error = ProviderError(ErrorKind.TIMEOUT, "slow", status_code=504)
        retagged = error.with_domain(SearchError)

        assert isinstance(retagged, SearchError)
        assert retagged.kind == ErrorKind.TIMEOUT
        assert retagged.status_code == 504

    def test_with_same_domain_is_identity(self):
        error = LLMError(ErrorKind.INTERNAL, "boom")
        assert error.with_domain(LLMError) is error

    @pytest.mark.parametrize(
        "kind,retryable",
        [
            (ErrorKind.RATE_LIMITED, True),
            (ErrorKind.TIMEOUT, True),
            (ErrorKind.SERVICE_UNAVAILABLE, True),
            (ErrorKind.UNAUTHORIZED, False),
            (ErrorKind.INVALID_INPUT, False),
        ],
    )
    def test_retryable(self, kind, retryable):
        assert ProviderError(kind, "x").retryable is retryable

    def test_internal_server_error_is_retryable(self):
        assert ProviderError(ErrorKind.INTERNAL, "x", status_code=500).retryable
        assert not ProviderError(ErrorKind.INTERNAL, "x").retryable

    def test_str_includes_provider_and_retry_after(self):
        error = ProviderError(ErrorKind.RATE_LIMITED, "slow", provider="openai", retry_after=3)
        assert str(error) == "[openai] rate-limited: slow (retry after 3s)"

    def test_stream_error_info(self):
        error = LLMError(ErrorKind.CONNECTION_FAILED, "reset", provider_error_json="{}")
        info = StreamErrorInfo.from_error(error)
        assert info.kind == ErrorKind.CONNECTION_FAILED
        assert info.message == "reset"
        assert info.provider_error_json == "{}"
