from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Optional


class ErrorReason(str, Enum):
    ImageValidationError = "image_validation_error"
    NoStructuredOutput = "no_structured_output"
    RateLimited = "rate_limited"
    PayloadTooLarge = "payload_too_large"
    Timeout = "timeout"
    Unknown = "unknown"


@dataclass
class ErrorMessage:
    error_reason: Optional[ErrorReason]
    error_description: str
    remediation: str


# This is the base exception class for everything that ends an inspection attempt.
# None of these are retried internally, a retry is always a new user action.
class InspectionException(Exception):
    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    user_message: str = (
        "Failed to analyze the panel image. Please try again with a clear photo of "
        "your solar panel."
    )
    remediation: str = "Try again."

    def __init__(self, error_reason: ErrorReason, error_description: str) -> None:
        super().__init__(error_description)
        self.error_reason: ErrorReason = error_reason
        self.error_description: str = error_description

    def to_error_message(self) -> ErrorMessage:
        return ErrorMessage(
            error_reason=self.error_reason,
            error_description=self.user_message,
            remediation=self.remediation,
        )


# Raised at intake when an upload is not an acceptable image. The inference
# collaborator is never invoked for these.
class ImageValidationError(InspectionException):
    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self, error_description: str, remediation: str) -> None:
        super().__init__(
            error_reason=ErrorReason.ImageValidationError,
            error_description=error_description,
        )
        self.user_message = error_description
        self.remediation = remediation


# Raised when the model engaged but could not produce output satisfying the
# inspection schema.
class NoStructuredOutputException(InspectionException):
    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
    user_message = (
        "AI could not generate a structured analysis. The image may be unclear or "
        "not showing a solar panel."
    )
    remediation = "Please try again with a clearer photo or from a different angle."

    def __init__(self, error_description: str) -> None:
        super().__init__(
            error_reason=ErrorReason.NoStructuredOutput,
            error_description=error_description,
        )


class RateLimitedException(InspectionException):
    status_code = HTTPStatus.TOO_MANY_REQUESTS
    user_message = "AI service rate limit reached."
    remediation = "Please wait a moment and try again."

    def __init__(self, error_description: str) -> None:
        super().__init__(
            error_reason=ErrorReason.RateLimited,
            error_description=error_description,
        )


class PayloadTooLargeException(InspectionException):
    status_code = HTTPStatus.REQUEST_ENTITY_TOO_LARGE
    user_message = "Image is too large to process."
    remediation = "Please use a smaller image (under 5MB recommended)."

    def __init__(self, error_description: str) -> None:
        super().__init__(
            error_reason=ErrorReason.PayloadTooLarge,
            error_description=error_description,
        )


class InferenceTimeoutException(InspectionException):
    status_code = HTTPStatus.GATEWAY_TIMEOUT
    user_message = "The analysis took too long to complete."
    remediation = "Please try again."

    def __init__(self, error_description: str) -> None:
        super().__init__(
            error_reason=ErrorReason.Timeout,
            error_description=error_description,
        )


# Catch-all for inference failures that match no known pattern. The full
# description is logged, only a truncated version is shown to the user.
class UnknownInferenceException(InspectionException):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, error_description: str, max_length: int = 120) -> None:
        super().__init__(
            error_reason=ErrorReason.Unknown,
            error_description=error_description,
        )
        self.user_message = (
            f"{InspectionException.user_message} "
            f"({truncate_message(error_description, max_length)})"
        )


def truncate_message(message: str, max_length: int) -> str:
    message = " ".join(message.split())
    if len(message) <= max_length:
        return message
    return message[: max(max_length - 3, 0)].rstrip() + "..."
