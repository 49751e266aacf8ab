from __future__ import annotations

import asyncio
import types

import httpx
import pytest

from chatbridge.base.errors import (
    CredentialError,
    ErrorCode,
    InputError,
    ProviderError,
    StreamDecodeError,
    TransportError,
    UpstreamHTTPError,
    UpstreamSchemaError,
    classify_exception,
    status_to_code,
    wrap_exception,
)


def test_classify_provider_error_passthrough():
    e = ProviderError(code=ErrorCode.AUTH, message="nope", provider="x")
    assert classify_exception(e) is ErrorCode.AUTH


def test_classify_http_status_mapping():
    assert classify_exception(types.SimpleNamespace(status_code=404)) is ErrorCode.NOT_FOUND
    assert classify_exception(types.SimpleNamespace(response=types.SimpleNamespace(status_code=503))) is ErrorCode.UNAVAILABLE
    assert classify_exception(types.SimpleNamespace(code=429)) is ErrorCode.RATE_LIMIT
    assert classify_exception(types.SimpleNamespace(status=True)) is ErrorCode.UNKNOWN


def test_classify_timeouts_and_transport():
    assert classify_exception(asyncio.TimeoutError()) is ErrorCode.TIMEOUT
    assert classify_exception(httpx.ReadTimeout("slow")) is ErrorCode.TIMEOUT
    assert classify_exception(httpx.ConnectError("refused")) is ErrorCode.TRANSPORT
    assert classify_exception(asyncio.CancelledError()) is ErrorCode.CANCELLED


def test_classify_heuristics():
    assert classify_exception(Exception("rate limit exceeded")) is ErrorCode.RATE_LIMIT
    assert classify_exception(Exception("timed out waiting")) is ErrorCode.TIMEOUT
    assert classify_exception(Exception("Invalid API key")) is ErrorCode.AUTH
    assert classify_exception(Exception("model does not exist")) is ErrorCode.NOT_FOUND
    assert classify_exception(Exception("random")) is ErrorCode.UNKNOWN


@pytest.mark.parametrize(
    "status, code",
    [
        (400, ErrorCode.VALIDATION),
        (401, ErrorCode.AUTH),
        (402, ErrorCode.AUTH),
        (418, ErrorCode.VALIDATION),
        (429, ErrorCode.RATE_LIMIT),
        (502, ErrorCode.TRANSIENT),
        (520, ErrorCode.SERVER_ERROR),
        (302, ErrorCode.UNKNOWN),
    ],
)
def test_status_to_code(status, code):
    assert status_to_code(status) is code


def test_error_kinds_carry_codes():
    assert InputError("x").code is ErrorCode.INPUT
    assert CredentialError("openai").code is ErrorCode.MISSING_CREDENTIAL
    assert "GOOGLE_GENERATIVE_AI_API_KEY" in CredentialError("google").message
    assert CredentialError("custom").message == "API key for provider 'custom' is not set"
    assert UpstreamSchemaError("x", provider="openrouter").code is ErrorCode.SCHEMA
    assert StreamDecodeError("data: {", provider="openrouter").details == "data: {"
    assert TransportError("down", provider="openrouter").retryable

    http = UpstreamHTTPError(500, "boom", provider="openrouter", model="m")
    assert http.code is ErrorCode.SERVER_ERROR
    assert http.status == 500
    assert http.message == "upstream returned HTTP 500: boom"
    assert str(http) == "openrouter:m server_error: upstream returned HTTP 500: boom"
    assert isinstance(http, Exception)


def test_wrap_exception():
    original = InputError("x")
    assert wrap_exception(original, provider="p") is original

    wrapped = wrap_exception(types.SimpleNamespace(status_code=503), provider="openai", model="gpt-4")
    assert wrapped.code is ErrorCode.UNAVAILABLE
    assert wrapped.status == 503
    assert wrapped.retryable

    plain = wrap_exception(ValueError(), provider="google")
    assert plain.message == "ValueError"
    assert plain.code is ErrorCode.UNKNOWN
