from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Regions smaller than this, in percent of the image, would not be visible as overlays
MIN_REGION_FOOTPRINT: float = 5

Percentage = Annotated[float, Field(strict=True, ge=0, le=100)]
Footprint = Annotated[float, Field(strict=True, ge=MIN_REGION_FOOTPRINT, le=100)]
Text = Annotated[str, Field(strict=True)]


class IssueType(str, Enum):
    DustAccumulation = "dust_accumulation"
    GlassCracks = "glass_cracks"
    BirdDroppings = "bird_droppings"
    Shading = "shading"
    PhysicalDamage = "physical_damage"
    Discoloration = "discoloration"
    Hotspot = "hotspot"
    Delamination = "delamination"
    MoistureIngress = "moisture_ingress"
    WiringVisible = "wiring_visible"
    Corrosion = "corrosion"
    SnailTrail = "snail_trail"
    NoIssue = "no_issue"


class SeverityLevel(str, Enum):
    NoSeverity = "none"
    Low = "low"
    Medium = "medium"
    High = "high"


class DustLevel(str, Enum):
    NoDust = "none"
    Low = "low"
    Medium = "medium"
    Heavy = "heavy"


class RecommendedAction(str, Enum):
    NoAction = "no_action"
    Monitor = "monitor"
    Clean = "clean"
    CallTechnician = "call_technician"


class OverallCondition(str, Enum):
    Good = "good"
    Fair = "fair"
    Poor = "poor"
    Critical = "critical"


class MaintenancePriority(str, Enum):
    NoPriority = "none"
    Low = "low"
    Medium = "medium"
    High = "high"
    Urgent = "urgent"


class InspectionModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        frozen=True,
        use_enum_values=False,
    )


class Region(InspectionModel):
    """Bounding box of a finding, in percent of the source image."""

    x: Percentage = Field(description="Left edge, percent of image width")
    y: Percentage = Field(description="Top edge, percent of image height")
    width: Footprint = Field(description="Width, percent of image width")
    height: Footprint = Field(description="Height, percent of image height")


class Issue(InspectionModel):
    issue_type: IssueType = Field(
        alias="issueType", description="The type of issue detected on the panel"
    )
    severity_level: SeverityLevel = Field(
        alias="severityLevel", description="Severity of the issue"
    )
    dust_level: Optional[DustLevel] = Field(
        default=None,
        alias="dustLevel",
        description="Dust accumulation level, null if not dust-related",
    )
    recommended_action: RecommendedAction = Field(
        alias="recommendedAction", description="What action should be taken"
    )
    confidence_score: Percentage = Field(
        alias="confidenceScore",
        description="Confidence score of the detection 0-100",
    )
    description: Text = Field(description="1-2 sentence description of finding")
    solution: Text = Field(description="Detailed 2-4 sentence step-by-step solution")
    estimated_impact: Text = Field(
        alias="estimatedImpact",
        description="Estimated impact on power output e.g. 5-10% power loss",
    )
    region: Region

    def is_visual(self) -> bool:
        return self.issue_type != IssueType.NoIssue


class InspectionResult(InspectionModel):
    overall_condition: OverallCondition = Field(alias="overallCondition")
    overall_confidence: Percentage = Field(alias="overallConfidence")
    summary: Text = Field(description="3-5 sentence summary of findings")
    estimated_efficiency_loss: Percentage = Field(alias="estimatedEfficiencyLoss")
    maintenance_priority: MaintenancePriority = Field(alias="maintenancePriority")
    issues: List[Issue] = Field(
        min_length=1, description="All detected issues, minimum one entry"
    )

    def defects(self) -> List[Issue]:
        return [issue for issue in self.issues if issue.is_visual()]
