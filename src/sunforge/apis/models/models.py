from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from sunforge.models.inspection.inspection_result import (
    InspectionResult,
    IssueType,
    SeverityLevel,
)
from sunforge.rendering.overlay_mapper import OverlayMap


class InspectPanelRequest(BaseModel):
    image: Optional[str] = Field(
        default=None,
        description="The image as a data URL, data:image/<type>;base64,<data>",
    )


class InspectPanelResponse(BaseModel):
    result: InspectionResult


class OverlayResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    index: int
    issue_index: int = Field(alias="issueIndex")
    issue_type: IssueType = Field(alias="issueType")
    severity: SeverityLevel
    left: float
    top: float
    width: float
    height: float
    fill_color: str = Field(alias="fillColor")
    border_color: str = Field(alias="borderColor")


class InspectPanelOverlayResponse(BaseModel):
    result: InspectionResult
    overlays: List[OverlayResponse]

    @classmethod
    def from_overlay_map(cls, overlay_map: OverlayMap) -> "InspectPanelOverlayResponse":
        return cls(
            result=overlay_map.result,
            overlays=[
                OverlayResponse(
                    index=overlay.index,
                    issue_index=overlay.issue_index,
                    issue_type=overlay.issue_type,
                    severity=overlay.severity,
                    left=overlay.left,
                    top=overlay.top,
                    width=overlay.width,
                    height=overlay.height,
                    fill_color=overlay.fill_color,
                    border_color=overlay.border_color,
                )
                for overlay in overlay_map.overlays
            ],
        )


class ErrorResponse(BaseModel):
    error: str
    remediation: Optional[str] = None
