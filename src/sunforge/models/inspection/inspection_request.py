from typing import Type

from pydantic import BaseModel, ConfigDict

from sunforge.models.inspection.image_payload import ImagePayload
from sunforge.models.inspection.inspection_result import InspectionResult


class InspectionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    payload: ImagePayload
    instruction: str
    output_schema: Type[InspectionResult] = InspectionResult
