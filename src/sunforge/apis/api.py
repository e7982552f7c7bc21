import logging
from contextlib import asynccontextmanager
from http import HTTPStatus
from logging import Logger
from typing import AsyncIterator, List

import click
import uvicorn
from fastapi import FastAPI, Request, Security
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter
from starlette.exceptions import HTTPException as StarletteHTTPException

from sunforge.apis.devices.device_controller import DeviceController
from sunforge.apis.inspection.inspection_controller import InspectionController
from sunforge.apis.models.models import (
    ErrorResponse,
    InspectPanelOverlayResponse,
    InspectPanelResponse,
)
from sunforge.apis.security.authentication import Authenticator
from sunforge.config.settings import settings
from sunforge.models.exceptions.inspection_exceptions import InspectionException
from sunforge.models.telemetry.telemetry import (
    DeviceWithReading,
    IngestResponse,
    Reading,
)


class API:
    def __init__(
        self,
        authenticator: Authenticator,
        inspection_controller: InspectionController,
        device_controller: DeviceController,
        port: int = settings.API_PORT,
    ) -> None:
        self.authenticator: Authenticator = authenticator
        self.inspection_controller: InspectionController = inspection_controller
        self.device_controller: DeviceController = device_controller
        self.host: str = settings.API_HOST_VIEWED_EXTERNALLY
        self.port: int = port

        self.logger: Logger = logging.getLogger("api")

        self.app: FastAPI = self._create_app()

    def get_app(self) -> FastAPI:
        return self.app

    def run_app(self) -> None:
        uvicorn.run(
            self.app,
            port=self.port,
            host=self.host,
            reload=False,
            log_config=None,
        )

    def _create_app(self) -> FastAPI:
        tags_metadata = [
            {
                "name": "Inspection",
                "description": "AI assisted solar panel photo inspection",
            },
            {
                "name": "Devices",
                "description": "Fleet devices and their sensor readings",
            },
        ]
        app = FastAPI(
            title="Sun Forge",
            openapi_tags=tags_metadata,
            lifespan=self._lifespan,
        )

        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        app.add_exception_handler(InspectionException, self._inspection_error_handler)
        app.add_exception_handler(StarletteHTTPException, self._http_error_handler)
        app.add_exception_handler(
            RequestValidationError, self._validation_error_handler
        )

        app.include_router(router=self._create_inspection_router())

        app.include_router(router=self._create_device_router())

        app.include_router(router=self._create_health_router())

        return app

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI) -> AsyncIterator[None]:
        self._log_startup_message()
        yield

    def _create_inspection_router(self) -> APIRouter:
        router: APIRouter = APIRouter(tags=["Inspection"])

        error_responses = {
            HTTPStatus.BAD_REQUEST.value: {
                "description": "Bad request - The upload is not a valid image",
                "model": ErrorResponse,
            },
            HTTPStatus.REQUEST_ENTITY_TOO_LARGE.value: {
                "description": "Payload too large - The image is too large for the model",
                "model": ErrorResponse,
            },
            HTTPStatus.UNPROCESSABLE_ENTITY.value: {
                "description": "Unprocessable - The model produced no structured analysis",
                "model": ErrorResponse,
            },
            HTTPStatus.TOO_MANY_REQUESTS.value: {
                "description": "Too many requests - The AI service is rate limited",
                "model": ErrorResponse,
            },
            HTTPStatus.INTERNAL_SERVER_ERROR.value: {
                "description": "Internal Server Error - The analysis failed",
                "model": ErrorResponse,
            },
            HTTPStatus.GATEWAY_TIMEOUT.value: {
                "description": "Gateway timeout - The analysis took too long",
                "model": ErrorResponse,
            },
        }

        router.add_api_route(
            path="/inspect-panel",
            endpoint=self.inspection_controller.inspect_panel,
            methods=["POST"],
            response_model=InspectPanelResponse,
            summary="Inspect a solar panel photo provided as a data URL",
            responses={
                HTTPStatus.OK.value: {
                    "description": "Panel successfully inspected",
                    "model": InspectPanelResponse,
                },
                **error_responses,
            },
        )
        router.add_api_route(
            path="/inspect-panel/upload",
            endpoint=self.inspection_controller.inspect_panel_upload,
            methods=["POST"],
            response_model=InspectPanelResponse,
            summary="Inspect an uploaded solar panel photo",
            responses={
                HTTPStatus.OK.value: {
                    "description": "Panel successfully inspected",
                    "model": InspectPanelResponse,
                },
                **error_responses,
            },
        )
        router.add_api_route(
            path="/inspect-panel/overlays",
            endpoint=self.inspection_controller.inspect_panel_overlays,
            methods=["POST"],
            response_model=InspectPanelOverlayResponse,
            summary="Inspect a solar panel photo and return overlays for the findings",
            responses={
                HTTPStatus.OK.value: {
                    "description": "Panel successfully inspected",
                    "model": InspectPanelOverlayResponse,
                },
                **error_responses,
            },
        )

        return router

    def _create_device_router(self) -> APIRouter:
        router: APIRouter = APIRouter(tags=["Devices"])

        authentication_dependency: Security = Security(self.authenticator.get_scheme())

        router.add_api_route(
            path="/devices",
            endpoint=self.device_controller.list_devices,
            methods=["GET"],
            response_model=List[DeviceWithReading],
            summary="List devices with their latest reading",
        )
        router.add_api_route(
            path="/devices/{device_id}/readings",
            endpoint=self.device_controller.list_readings,
            methods=["GET"],
            response_model=List[Reading],
            summary="List the most recent readings of a device",
        )
        router.add_api_route(
            path="/iot-ingest",
            endpoint=self.device_controller.ingest_reading,
            methods=["POST"],
            dependencies=[authentication_dependency],
            response_model=IngestResponse,
            summary="Store a reading posted by a field device",
            responses={
                HTTPStatus.OK.value: {
                    "description": "Reading successfully stored",
                    "model": IngestResponse,
                },
                HTTPStatus.BAD_REQUEST.value: {
                    "description": "Bad request - device_id is missing",
                    "model": ErrorResponse,
                },
                HTTPStatus.UNAUTHORIZED.value: {
                    "description": "Unauthorized - Missing or invalid API key",
                    "model": ErrorResponse,
                },
            },
        )

        return router

    def _create_health_router(self) -> APIRouter:
        router: APIRouter = APIRouter(tags=["Health"])

        router.add_api_route(
            path="/health",
            endpoint=lambda: {"status": "ok"},
            methods=["GET"],
            summary="Liveness check",
        )

        return router

    async def _inspection_error_handler(
        self, request: Request, exc: InspectionException
    ) -> JSONResponse:
        error_response = ErrorResponse(error=exc.user_message, remediation=exc.remediation)
        return JSONResponse(
            status_code=exc.status_code, content=error_response.model_dump()
        )

    async def _http_error_handler(
        self, request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
            headers=getattr(exc, "headers", None),
        )

    async def _validation_error_handler(
        self, request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        self.logger.warning("Rejected invalid request to %s", request.url.path)
        return JSONResponse(
            status_code=HTTPStatus.BAD_REQUEST,
            content=ErrorResponse(
                error="Invalid request body. Please check the submitted data."
            ).model_dump(exclude_none=True),
        )

    def _log_startup_message(self) -> None:
        address_format = "%s://%s:%d/docs"
        message = f"Uvicorn running on {address_format} (Press CTRL+C to quit)"
        protocol = "http"
        color_message = (
            "Uvicorn running on "
            + click.style(address_format, bold=True)
            + " (Press CTRL+C to quit)"
        )
        self.logger.info(
            message,
            protocol,
            self.host,
            self.port,
            extra={"color_message": color_message},
        )
