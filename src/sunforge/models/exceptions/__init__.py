from .inspection_exceptions import (
    ErrorReason,
    ImageValidationError,
    InferenceTimeoutException,
    InspectionException,
    NoStructuredOutputException,
    PayloadTooLargeException,
    RateLimitedException,
    UnknownInferenceException,
)
