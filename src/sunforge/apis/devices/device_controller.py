import logging
from http import HTTPStatus
from typing import List

from fastapi import Body, HTTPException, Path
from opentelemetry import trace

from sunforge.config.settings import settings
from sunforge.models.exceptions.telemetry_exceptions import TelemetryStoreException
from sunforge.models.telemetry.telemetry import (
    Device,
    DeviceWithReading,
    IngestReading,
    IngestResponse,
    Reading,
)
from sunforge.services.service_connections.telemetry_store import (
    TelemetryStoreInterface,
)

tracer = trace.get_tracer(__name__)


class DeviceController:
    def __init__(
        self,
        telemetry_store: TelemetryStoreInterface,
        readings_limit: int = settings.TELEMETRY_READINGS_LIMIT,
    ):
        self.telemetry_store: TelemetryStoreInterface = telemetry_store
        self.readings_limit: int = readings_limit
        self.logger = logging.getLogger("api")

    @tracer.start_as_current_span("list_devices")
    def list_devices(self) -> List[DeviceWithReading]:
        try:
            devices: List[Device] = self.telemetry_store.list_devices()
            return [
                DeviceWithReading(
                    **device.model_dump(),
                    latest_reading=self.telemetry_store.get_latest_reading(
                        device.device_id
                    ),
                )
                for device in devices
            ]
        except TelemetryStoreException as e:
            self._raise_store_error("Failed to list devices", e)

    @tracer.start_as_current_span("list_readings")
    def list_readings(
        self,
        device_id: str = Path(
            title="Device ID",
            description="ID of the device to list readings for",
        ),
    ) -> List[Reading]:
        try:
            return self.telemetry_store.list_readings(
                device_id=device_id, limit=self.readings_limit
            )
        except TelemetryStoreException as e:
            self._raise_store_error(f"Failed to list readings for {device_id}", e)

    @tracer.start_as_current_span("ingest_reading")
    def ingest_reading(
        self,
        ingest_reading: IngestReading = Body(
            default=None,
            title="Reading",
            description="A single sensor reading posted by a field device",
        ),
    ) -> IngestResponse:
        if ingest_reading is None or not ingest_reading.device_id:
            raise HTTPException(
                status_code=HTTPStatus.BAD_REQUEST, detail="device_id is required"
            )

        self.logger.info("Ingesting reading from device %s", ingest_reading.device_id)
        try:
            self.telemetry_store.insert_reading(ingest_reading.to_reading())
            self.telemetry_store.mark_device_online(ingest_reading.device_id)
        except TelemetryStoreException as e:
            self._raise_store_error(
                f"Failed to ingest reading from {ingest_reading.device_id}", e
            )
        return IngestResponse(success=True)

    def _raise_store_error(self, message: str, error: Exception) -> None:
        self.logger.error("%s: %s", message, error)
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR, detail=str(error)
        )
