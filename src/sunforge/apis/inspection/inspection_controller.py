import logging

from fastapi import Body, File, UploadFile
from opentelemetry import trace

from sunforge.apis.models.models import (
    InspectPanelOverlayResponse,
    InspectPanelRequest,
    InspectPanelResponse,
)
from sunforge.intake.image_intake import ImageIntake
from sunforge.inspection.inspection_service import InspectionService
from sunforge.models.inspection.image_payload import ImagePayload
from sunforge.models.inspection.inspection_result import InspectionResult
from sunforge.rendering.overlay_mapper import OverlayMapper

tracer = trace.get_tracer(__name__)


class InspectionController:
    def __init__(
        self,
        image_intake: ImageIntake,
        inspection_service: InspectionService,
        overlay_mapper: OverlayMapper,
    ):
        self.image_intake: ImageIntake = image_intake
        self.inspection_service: InspectionService = inspection_service
        self.overlay_mapper: OverlayMapper = overlay_mapper
        self.logger = logging.getLogger("api")

    @tracer.start_as_current_span("inspect_panel")
    def inspect_panel(
        self,
        inspect_panel_request: InspectPanelRequest = Body(
            default=None,
            title="Panel image",
            description="Photo of the solar panel to inspect",
        ),
    ) -> InspectPanelResponse:
        self.logger.info("Received request to inspect panel image")

        result: InspectionResult = self._inspect_data_url(inspect_panel_request)
        return InspectPanelResponse(result=result)

    @tracer.start_as_current_span("inspect_panel_upload")
    def inspect_panel_upload(
        self,
        file: UploadFile = File(description="Photo of the solar panel to inspect"),
    ) -> InspectPanelResponse:
        self.logger.info("Received uploaded panel image '%s'", file.filename)

        payload: ImagePayload = self.image_intake.accept(
            data=file.file.read(self.image_intake.max_bytes + 1),
            content_type=file.content_type,
        )
        result: InspectionResult = self.inspection_service.inspect(payload)
        return InspectPanelResponse(result=result)

    @tracer.start_as_current_span("inspect_panel_overlays")
    def inspect_panel_overlays(
        self,
        inspect_panel_request: InspectPanelRequest = Body(
            default=None,
            title="Panel image",
            description="Photo of the solar panel to inspect",
        ),
    ) -> InspectPanelOverlayResponse:
        self.logger.info("Received request to inspect panel image with overlays")

        result: InspectionResult = self._inspect_data_url(inspect_panel_request)
        return InspectPanelOverlayResponse.from_overlay_map(
            self.overlay_mapper.map(result)
        )

    def _inspect_data_url(
        self, inspect_panel_request: InspectPanelRequest
    ) -> InspectionResult:
        image = inspect_panel_request.image if inspect_panel_request else None
        payload: ImagePayload = self.image_intake.accept_data_url(image)
        return self.inspection_service.inspect(payload)
