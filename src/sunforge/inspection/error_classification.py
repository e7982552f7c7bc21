import re
from typing import Optional, Pattern

import httpx
import requests

from sunforge.config.settings import settings
from sunforge.models.exceptions.inspection_exceptions import (
    InferenceTimeoutException,
    InspectionException,
    PayloadTooLargeException,
    RateLimitedException,
    UnknownInferenceException,
)

# Word patterns must not be preceded by a letter, so "generate" is not a rate limit
RATE_LIMIT_PATTERN: Pattern = re.compile(
    r"429|(?<![a-z])rate|(?<![a-z])quota|resource_exhausted"
)
PAYLOAD_TOO_LARGE_PATTERN: Pattern = re.compile(
    r"413|too large|payload size|exceeds the (?:size |maximum )?limit"
)
TIMEOUT_PATTERN: Pattern = re.compile(
    r"504|(?<![a-z])timeout|timed out|(?<![a-z])deadline"
)

TIMEOUT_ERROR_TYPES = (TimeoutError, requests.exceptions.Timeout, httpx.TimeoutException)


def classify_inference_error(
    error: BaseException,
    max_message_length: int = settings.UNKNOWN_ERROR_MESSAGE_LENGTH,
) -> InspectionException:
    """Map a failure from the inference collaborator to an inspection error.

    Matching is done case-insensitively on the error message and any HTTP status
    code attached to the error. Patterns are checked in a fixed order: rate
    limiting, payload size, timeout. Anything else is unknown.
    """
    message: str = describe_error(error)
    searchable: str = message.lower()

    if RATE_LIMIT_PATTERN.search(searchable):
        return RateLimitedException(error_description=message)

    if PAYLOAD_TOO_LARGE_PATTERN.search(searchable):
        return PayloadTooLargeException(error_description=message)

    if isinstance(error, TIMEOUT_ERROR_TYPES) or TIMEOUT_PATTERN.search(searchable):
        return InferenceTimeoutException(error_description=message)

    return UnknownInferenceException(
        error_description=message, max_length=max_message_length
    )


def describe_error(error: BaseException) -> str:
    message: str = str(error) or type(error).__name__
    code: Optional[int] = getattr(error, "code", None) or getattr(
        error, "status_code", None
    )
    if isinstance(code, int) and str(code) not in message:
        message = f"{code} {message}"
    return message
