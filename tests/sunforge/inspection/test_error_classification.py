from http import HTTPStatus

import httpx
import pytest
import requests

from sunforge.inspection.error_classification import (
    classify_inference_error,
    describe_error,
)
from sunforge.models.exceptions.inspection_exceptions import (
    ErrorReason,
    InferenceTimeoutException,
    PayloadTooLargeException,
    RateLimitedException,
    UnknownInferenceException,
)


class ProviderError(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code


@pytest.mark.parametrize(
    "error",
    [
        Exception("429 quota exceeded"),
        Exception("Rate limit reached for requests"),
        Exception("You exceeded your current QUOTA"),
        Exception("RESOURCE_EXHAUSTED"),
        ProviderError(429, "Too many requests"),
    ],
)
def test_rate_limit_errors(error):
    classified = classify_inference_error(error)

    assert isinstance(classified, RateLimitedException)
    assert classified.status_code == HTTPStatus.TOO_MANY_REQUESTS
    assert "wait" in classified.remediation


@pytest.mark.parametrize(
    "error",
    [
        Exception("413 Request Entity Too Large"),
        Exception("Request payload size exceeds the limit"),
        Exception("Request exceeds the maximum limit of 20MB"),
        Exception("The image is too large"),
        ProviderError(413, "Entity rejected"),
    ],
)
def test_payload_too_large_errors(error):
    classified = classify_inference_error(error)

    assert isinstance(classified, PayloadTooLargeException)
    assert classified.status_code == HTTPStatus.REQUEST_ENTITY_TOO_LARGE


@pytest.mark.parametrize(
    "error",
    [
        Exception("504 Gateway Timeout"),
        Exception("Deadline exceeded while waiting for the model"),
        Exception("The read operation timed out"),
        TimeoutError(),
        requests.exceptions.ReadTimeout(),
        httpx.ReadTimeout("read"),
    ],
)
def test_timeout_errors(error):
    classified = classify_inference_error(error)

    assert isinstance(classified, InferenceTimeoutException)
    assert classified.status_code == HTTPStatus.GATEWAY_TIMEOUT


@pytest.mark.parametrize(
    "error",
    [
        Exception("Failed to generate content"),
        Exception("Internal error encountered"),
        ValueError("Unexpected response from the model"),
        ConnectionResetError(),
        Exception(
            'Invalid JSON payload received. Unknown name "foo": Cannot find field.'
        ),
        ProviderError(400, "Invalid JSON payload received."),
    ],
)
def test_unknown_errors(error):
    classified = classify_inference_error(error)

    assert isinstance(classified, UnknownInferenceException)
    assert classified.error_reason == ErrorReason.Unknown
    assert classified.status_code == HTTPStatus.INTERNAL_SERVER_ERROR


def test_rate_limit_takes_precedence():
    classified = classify_inference_error(
        Exception("429 quota exceeded, payload too large, request timed out")
    )

    assert isinstance(classified, RateLimitedException)


def test_payload_takes_precedence_over_timeout():
    classified = classify_inference_error(
        Exception("payload size exceeded after timeout")
    )

    assert isinstance(classified, PayloadTooLargeException)


def test_classification_is_deterministic():
    error = Exception("429 quota exceeded")

    reasons = {classify_inference_error(error).error_reason for _ in range(10)}

    assert reasons == {ErrorReason.RateLimited}


def test_unknown_error_message_is_truncated():
    error = Exception("x" * 500)

    classified = classify_inference_error(error, max_message_length=120)

    assert classified.error_description == "x" * 500
    assert "x" * 117 + "..." in classified.user_message
    assert "x" * 118 not in classified.user_message


def test_short_unknown_error_message_is_kept():
    classified = classify_inference_error(Exception("model exploded"))

    assert classified.user_message.endswith("(model exploded)")


def test_describe_error_includes_status_code():
    assert describe_error(ProviderError(503, "Service unavailable")) == (
        "503 Service unavailable"
    )
    assert describe_error(ProviderError(429, "429 Too many")) == "429 Too many"
    assert describe_error(KeyError()) == "KeyError"
