"""Tests for provider-failure classification."""

import pytest

from app.core.errors import (
    AUTH_MESSAGE,
    BILLING_URL,
    INTERNAL_MESSAGE,
    QUOTA_MESSAGE,
    STREAM_AUTH_MESSAGE,
    STREAM_GENERIC_MESSAGE,
    STREAM_QUOTA_MESSAGE,
    ErrorKind,
    GatewayError,
    classify_exception,
    stream_error_message,
)
from app.llm.errors import ProviderError, UpstreamHTTPError


@pytest.mark.parametrize(
    "exc",
    [
        ProviderError("HTTP 429 - rate", status_code=429, error_code="insufficient_quota"),
        ProviderError("You exceeded your current quota, please check your plan"),
        UpstreamHTTPError(500, '{"message": "insufficient_quota"}'),
        UpstreamHTTPError(400, "You exceeded your Current Quota"),
    ],
)
def test_quota_exhaustion_is_always_429(exc):
    error = classify_exception(exc)

    assert error.kind is ErrorKind.INSUFFICIENT_QUOTA
    assert error.kind.status_code == 429
    assert error.kind.action == BILLING_URL
    assert error.message == QUOTA_MESSAGE


@pytest.mark.parametrize(
    "exc",
    [
        ProviderError("HTTP 401 - nope", status_code=401, error_code="invalid_api_key"),
        ProviderError("Incorrect API key provided: sk-***"),
        ProviderError("401 Unauthorized"),
    ],
)
def test_auth_failures(exc):
    error = classify_exception(exc)

    assert error.kind is ErrorKind.AUTH
    assert error.kind.code == "OPENAI_AUTH_ERROR"
    assert error.kind.status_code == 401
    assert error.message == AUTH_MESSAGE


def test_structured_code_wins_over_text():
    exc = ProviderError("Incorrect API key", error_code="insufficient_quota")

    assert classify_exception(exc).kind is ErrorKind.INSUFFICIENT_QUOTA


def test_other_provider_errors_are_truncated():
    error = classify_exception(ProviderError("x" * 300))

    assert error.kind is ErrorKind.PROVIDER
    assert error.kind.status_code == 502
    assert error.message == "AI provider javobida xatolik: " + "x" * 200 + "..."


def test_short_provider_message_is_not_truncated():
    error = classify_exception(ProviderError("model not found"))

    assert error.message == "AI provider javobida xatolik: model not found"


def test_upstream_errors_report_status():
    assert classify_exception(UpstreamHTTPError(503, "<html>")).message == "Upstream xizmat xatosi: HTTP 503"

    no_response = classify_exception(UpstreamHTTPError(None, "connection refused"))
    assert no_response.kind is ErrorKind.UPSTREAM_HTTP
    assert no_response.kind.status_code == 502
    assert no_response.message == "Upstream xizmat xatosi: HTTP 502"


def test_unknown_exceptions_hide_details():
    error = classify_exception(RuntimeError("secret stack detail"))

    assert error.kind is ErrorKind.INTERNAL
    assert error.kind.status_code == 500
    assert error.message == INTERNAL_MESSAGE


def test_gateway_errors_pass_through():
    original = GatewayError.feature_unavailable("Image")

    assert classify_exception(original) is original
    assert original.kind.code == "REQUEST_ERROR"
    assert original.kind.status_code == 501
    assert original.message == "Image modeli bu konfiguratsiyada mavjud emas"


def test_stream_error_messages():
    assert stream_error_message(ProviderError("insufficient_quota")) == STREAM_QUOTA_MESSAGE
    assert stream_error_message(ProviderError("invalid_api_key")) == STREAM_AUTH_MESSAGE
    assert stream_error_message(UpstreamHTTPError(None)) == STREAM_GENERIC_MESSAGE
    assert stream_error_message(RuntimeError("boom")) == STREAM_GENERIC_MESSAGE
