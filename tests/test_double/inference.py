from typing import Any, List, Optional

from sunforge.inference.inference_interface import InferenceInterface
from sunforge.models.inspection.inspection_request import InspectionRequest
from tests.test_double.inspection_result import DummyInspectionResult


class StubInference(InferenceInterface):
    def __init__(
        self,
        output: Optional[Any] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self.output: Optional[Any] = (
            output if output is not None else DummyInspectionResult.clean_panel()
        )
        self.error: Optional[BaseException] = error
        self.requests: List[InspectionRequest] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def infer(self, request: InspectionRequest) -> Optional[Any]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.output

