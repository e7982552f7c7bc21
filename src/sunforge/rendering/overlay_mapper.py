from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sunforge.models.inspection.inspection_result import (
    InspectionResult,
    Issue,
    IssueType,
    SeverityLevel,
)

DIMMED_OPACITY: float = 0.3

MARKER_COLORS: Dict[IssueType, str] = {
    IssueType.DustAccumulation: "rgba(234, 179, 8, 0.35)",
    IssueType.GlassCracks: "rgba(239, 68, 68, 0.45)",
    IssueType.BirdDroppings: "rgba(249, 115, 22, 0.35)",
    IssueType.Shading: "rgba(99, 102, 241, 0.30)",
    IssueType.PhysicalDamage: "rgba(239, 68, 68, 0.45)",
    IssueType.Discoloration: "rgba(234, 179, 8, 0.30)",
    IssueType.Hotspot: "rgba(239, 68, 68, 0.50)",
    IssueType.Delamination: "rgba(249, 115, 22, 0.40)",
    IssueType.MoistureIngress: "rgba(59, 130, 246, 0.35)",
    IssueType.WiringVisible: "rgba(168, 85, 247, 0.40)",
    IssueType.Corrosion: "rgba(180, 83, 9, 0.40)",
    IssueType.SnailTrail: "rgba(148, 163, 184, 0.40)",
    IssueType.NoIssue: "transparent",
}

MARKER_BORDERS: Dict[IssueType, str] = {
    IssueType.DustAccumulation: "rgba(234, 179, 8, 0.8)",
    IssueType.GlassCracks: "rgba(239, 68, 68, 0.9)",
    IssueType.BirdDroppings: "rgba(249, 115, 22, 0.8)",
    IssueType.Shading: "rgba(99, 102, 241, 0.7)",
    IssueType.PhysicalDamage: "rgba(239, 68, 68, 0.9)",
    IssueType.Discoloration: "rgba(234, 179, 8, 0.7)",
    IssueType.Hotspot: "rgba(239, 68, 68, 1)",
    IssueType.Delamination: "rgba(249, 115, 22, 0.9)",
    IssueType.MoistureIngress: "rgba(59, 130, 246, 0.8)",
    IssueType.WiringVisible: "rgba(168, 85, 247, 0.9)",
    IssueType.Corrosion: "rgba(180, 83, 9, 0.9)",
    IssueType.SnailTrail: "rgba(148, 163, 184, 0.9)",
    IssueType.NoIssue: "transparent",
}


@dataclass(frozen=True)
class PixelBox:
    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class Overlay:
    index: int
    issue_index: int
    issue_type: IssueType
    severity: SeverityLevel
    left: float
    top: float
    width: float
    height: float
    fill_color: str
    border_color: str

    def to_pixels(self, displayed_width: float, displayed_height: float) -> PixelBox:
        return PixelBox(
            left=self.left * displayed_width / 100,
            top=self.top * displayed_height / 100,
            width=self.width * displayed_width / 100,
            height=self.height * displayed_height / 100,
        )


@dataclass(frozen=True)
class FindingEntry:
    issue_index: int
    overlay_index: Optional[int]
    issue: Issue
    is_highlighted: bool


@dataclass
class HighlightState:
    """Hover state shared by the overlays and the findings list.

    The state is a single overlay index. Hovering a findings entry highlights the
    overlay at the same index, hovering an overlay highlights the entry.
    """

    overlay_map: "OverlayMap"
    highlighted_index: Optional[int] = None

    def hover_overlay(self, overlay_index: Optional[int]) -> None:
        if overlay_index is None or not 0 <= overlay_index < len(
            self.overlay_map.overlays
        ):
            self.highlighted_index = None
            return
        self.highlighted_index = overlay_index

    def hover_issue(self, issue_index: Optional[int]) -> None:
        if issue_index is None:
            self.highlighted_index = None
            return
        self.highlighted_index = self.overlay_map.overlay_index_for_issue(issue_index)

    def clear(self) -> None:
        self.highlighted_index = None

    def is_overlay_highlighted(self, overlay_index: int) -> bool:
        return self.highlighted_index is not None and (
            self.highlighted_index == overlay_index
        )

    def is_issue_highlighted(self, issue_index: int) -> bool:
        overlay_index = self.overlay_map.overlay_index_for_issue(issue_index)
        return overlay_index is not None and self.is_overlay_highlighted(overlay_index)

    def overlay_opacity(self, overlay_index: int) -> float:
        if self.highlighted_index is None or self.is_overlay_highlighted(
            overlay_index
        ):
            return 1.0
        return DIMMED_OPACITY


@dataclass(frozen=True)
class OverlayMap:
    result: InspectionResult
    overlays: List[Overlay] = field(default_factory=list)

    def overlay_index_for_issue(self, issue_index: int) -> Optional[int]:
        for overlay in self.overlays:
            if overlay.issue_index == issue_index:
                return overlay.index
        return None

    def issue_index_for_overlay(self, overlay_index: int) -> Optional[int]:
        if 0 <= overlay_index < len(self.overlays):
            return self.overlays[overlay_index].issue_index
        return None

    def highlight_state(self) -> HighlightState:
        return HighlightState(overlay_map=self)

    def findings(self, highlight: Optional[HighlightState] = None) -> List[FindingEntry]:
        entries: List[FindingEntry] = []
        for issue_index, issue in enumerate(self.result.issues):
            entries.append(
                FindingEntry(
                    issue_index=issue_index,
                    overlay_index=self.overlay_index_for_issue(issue_index),
                    issue=issue,
                    is_highlighted=(
                        highlight is not None
                        and highlight.is_issue_highlighted(issue_index)
                    ),
                )
            )
        return entries


class OverlayMapper:
    def map(self, result: InspectionResult) -> OverlayMap:
        overlays: List[Overlay] = []
        for issue_index, issue in enumerate(result.issues):
            if not issue.is_visual():
                continue
            overlays.append(
                Overlay(
                    index=len(overlays),
                    issue_index=issue_index,
                    issue_type=issue.issue_type,
                    severity=issue.severity_level,
                    left=issue.region.x,
                    top=issue.region.y,
                    width=issue.region.width,
                    height=issue.region.height,
                    fill_color=MARKER_COLORS[issue.issue_type],
                    border_color=MARKER_BORDERS[issue.issue_type],
                )
            )
        return OverlayMap(result=result, overlays=overlays)
