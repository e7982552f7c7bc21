import logging
from logging import Logger
from typing import Any, Optional

from opentelemetry import trace

from sunforge.config.settings import settings
from sunforge.inference.inference_interface import InferenceInterface
from sunforge.inspection.contract import (
    SchemaViolation,
    build_inspection_request,
    validate_inspection_result,
)
from sunforge.inspection.error_classification import classify_inference_error
from sunforge.models.exceptions.inspection_exceptions import (
    InspectionException,
    NoStructuredOutputException,
    UnknownInferenceException,
)
from sunforge.models.inspection.image_payload import ImagePayload
from sunforge.models.inspection.inspection_request import InspectionRequest
from sunforge.models.inspection.inspection_result import InspectionResult

tracer = trace.get_tracer(__name__)


class InspectionService:
    """Runs one inspection against the inference collaborator.

    Every call invokes the collaborator exactly once. Nothing is cached and
    nothing is retried, a failed inspection is retried by the user.
    """

    def __init__(
        self,
        inference: InferenceInterface,
        unknown_error_message_length: int = settings.UNKNOWN_ERROR_MESSAGE_LENGTH,
    ) -> None:
        self.inference: InferenceInterface = inference
        self.unknown_error_message_length: int = unknown_error_message_length
        self.logger: Logger = logging.getLogger("inspection")

    @tracer.start_as_current_span("inspect")
    def inspect(self, payload: ImagePayload) -> InspectionResult:
        request: InspectionRequest = build_inspection_request(payload)

        try:
            output: Optional[Any] = self.inference.infer(request)
        except InspectionException:
            raise
        except Exception as e:
            error: InspectionException = classify_inference_error(
                e, max_message_length=self.unknown_error_message_length
            )
            if isinstance(error, UnknownInferenceException):
                self.logger.exception("Panel inspection failed with an unknown error")
            else:
                self.logger.warning(
                    "Panel inspection failed: %s - %s",
                    error.error_reason.value,
                    error.error_description,
                )
            raise error from e

        if output is None or output == "" or output == {}:
            self.logger.warning("Inference produced no structured output")
            raise NoStructuredOutputException(
                error_description="The model did not produce structured output"
            )

        try:
            result: InspectionResult = validate_inspection_result(output)
        except SchemaViolation as e:
            self.logger.warning("Inference output rejected by the schema: %s", e)
            raise NoStructuredOutputException(error_description=str(e)) from e

        self.logger.info(
            "Inspection finished. Condition: %s, issues: %d, defects: %d",
            result.overall_condition.value,
            len(result.issues),
            len(result.defects()),
        )
        return result
