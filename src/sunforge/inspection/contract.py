import json
from typing import Any, Dict

from pydantic import ValidationError

from sunforge.config.settings import settings
from sunforge.models.inspection.image_payload import ImagePayload
from sunforge.models.inspection.inspection_request import InspectionRequest
from sunforge.models.inspection.inspection_result import (
    MIN_REGION_FOOTPRINT,
    InspectionResult,
)

INSPECTION_INSTRUCTION: str = f"""You are a senior solar panel maintenance expert for the {settings.PLATFORM_NAME} monitoring platform. Analyze this solar panel image and diagnose ALL visible problems.

IMPORTANT: You MUST respond with valid structured data matching the provided schema. Be thorough and realistic.

Examine the panel systematically, from top to bottom and left to right, and check for:

1. DUST & DIRT: Haze, dirt streaks, sand, pollen. Level: low/medium/heavy.
2. GLASS CRACKS: Hairline fractures, spider web patterns, impact cracks.
3. BIRD DROPPINGS: White/grey spots, splatter, dried deposits causing hotspots.
4. SHADING: Shadows from trees, buildings, wires, uneven lighting.
5. PHYSICAL DAMAGE: Dents, broken glass, frame damage, bent edges.
6. DISCOLORATION: Browning, yellowed encapsulant, uneven cell color.
7. HOTSPOTS: Dark burnt marks, localized browning, melted areas - fire hazard.
8. DELAMINATION: Bubbling, peeling layers, air pockets.
9. MOISTURE INGRESS: Foggy areas, condensation inside panel, water marks.
10. WIRING ISSUES: Exposed wires, damaged junction box, loose connectors.
11. CORROSION: Rust on frame, oxidation on connectors, green patina.
12. SNAIL TRAILS: Silvery/brown lines along cell edges from moisture reaction.

For EACH issue found:
- Place bounding boxes on the ACTUAL locations of the issue. x and y are the top left corner and width and height the size of the box, all as a percentage (0-100) of the image. Width and height must be at least {MIN_REGION_FOOTPRINT:g}.
- Give specific actionable solutions with safety precautions.
- Estimate power impact realistically.
- Set dustLevel only for dust related findings, otherwise null.
- Set confidence based on image clarity and how clearly the issue is visible.

If the image is blurry, dark or low resolution, still report what you can see and lower the confidence scores accordingly. Never leave out a finding because you are unsure of it.

Always return at least one issue. If the panel looks clean, return a single "no_issue" entry confirming good condition with maintenance tips.

If this is NOT a solar panel image, still analyze it but note that in the summary and set the overall condition to "poor"."""


class SchemaViolation(Exception):
    pass


def build_inspection_request(payload: ImagePayload) -> InspectionRequest:
    return InspectionRequest(
        payload=payload,
        instruction=INSPECTION_INSTRUCTION,
        output_schema=InspectionResult,
    )


def inspection_result_json_schema() -> Dict[str, Any]:
    return InspectionResult.model_json_schema(by_alias=True)


def validate_inspection_result(raw: Any) -> InspectionResult:
    """Validate model output against the inspection schema.

    The output is rejected on any constraint violation. Values are never
    clamped, defaulted or otherwise repaired.
    """
    if isinstance(raw, InspectionResult):
        raw = raw.model_dump(by_alias=True, mode="json")

    try:
        if isinstance(raw, (str, bytes)):
            return InspectionResult.model_validate_json(raw)
        return InspectionResult.model_validate(raw)
    except ValidationError as e:
        raise SchemaViolation(_summarize_validation_error(e)) from e


def _summarize_validation_error(error: ValidationError) -> str:
    problems = [
        f"{'.'.join(str(part) for part in detail['loc'])}: {detail['msg']}"
        for detail in error.errors()[:5]
    ]
    return f"{error.error_count()} schema violation(s): " + "; ".join(problems)


def dump_inspection_result(result: InspectionResult) -> str:
    return json.dumps(result.model_dump(by_alias=True, mode="json"))
