import logging
from abc import ABCMeta, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from requests.exceptions import RequestException
from requests.models import Response

from sunforge.config.settings import settings
from sunforge.models.exceptions.telemetry_exceptions import TelemetryStoreException
from sunforge.models.telemetry.telemetry import Device, DeviceStatus, Reading
from sunforge.services.service_connections.request_handler import RequestHandler

DEVICES_TABLE: str = "devices"
READINGS_TABLE: str = "esp32_solar_readings"

TModel = TypeVar("TModel", bound=BaseModel)


class TelemetryStoreInterface(metaclass=ABCMeta):
    @abstractmethod
    def list_devices(self) -> List[Device]:
        """Return all devices, newest first.

        Raises
        ----------
        TelemetryStoreException
            The store could not be reached or returned an invalid response.
        """
        pass

    @abstractmethod
    def get_latest_reading(self, device_id: str) -> Optional[Reading]:
        pass

    @abstractmethod
    def list_readings(self, device_id: str, limit: int) -> List[Reading]:
        pass

    @abstractmethod
    def insert_reading(self, reading: Reading) -> None:
        pass

    @abstractmethod
    def mark_device_online(self, device_id: str) -> None:
        pass


class RestTelemetryStore(TelemetryStoreInterface):
    """Telemetry store behind a PostgREST style API.

    Readings are append only. Devices are only updated by id. Nothing here is
    read back after a write, so callers must not assume a write is visible to
    the next read.
    """

    def __init__(
        self,
        request_handler: RequestHandler,
        base_url: str = settings.TELEMETRY_STORE_URL,
        api_key: str = settings.TELEMETRY_STORE_KEY,
    ) -> None:
        self.request_handler: RequestHandler = request_handler
        self.base_url: str = base_url.rstrip("/")
        self.api_key: str = api_key
        self.logger = logging.getLogger("telemetry")

    def list_devices(self) -> List[Device]:
        response: Response = self._get(
            DEVICES_TABLE, params={"select": "*", "order": "created_at.desc"}
        )
        return self._parse(Device, self._rows(response))

    def get_latest_reading(self, device_id: str) -> Optional[Reading]:
        readings: List[Reading] = self.list_readings(device_id=device_id, limit=1)
        return readings[0] if readings else None

    def list_readings(self, device_id: str, limit: int) -> List[Reading]:
        response: Response = self._get(
            READINGS_TABLE,
            params={
                "select": "*",
                "device_id": f"eq.{device_id}",
                "order": "recorded_at.desc",
                "limit": str(limit),
            },
        )
        return self._parse(Reading, self._rows(response))

    def insert_reading(self, reading: Reading) -> None:
        body = reading.model_dump(
            mode="json", exclude={"id", "recorded_at"}, exclude_none=True
        )
        try:
            self.request_handler.post(
                url=self._url(READINGS_TABLE),
                json_body=body,
                headers=self._headers(prefer="return=minimal"),
            )
        except RequestException as e:
            self.logger.error("Failed to insert reading for device %s", reading.device_id)
            raise TelemetryStoreException(str(e)) from e

    def mark_device_online(self, device_id: str) -> None:
        try:
            self.request_handler.patch(
                url=self._url(DEVICES_TABLE),
                params={"device_id": f"eq.{device_id}"},
                json_body={
                    "last_seen": datetime.now(timezone.utc).isoformat(),
                    "status": DeviceStatus.Online.value,
                },
                headers=self._headers(prefer="return=minimal"),
            )
        except RequestException as e:
            self.logger.error("Failed to update status of device %s", device_id)
            raise TelemetryStoreException(str(e)) from e

    def _get(self, table: str, params: dict) -> Response:
        try:
            return self.request_handler.get(
                url=self._url(table), params=params, headers=self._headers()
            )
        except RequestException as e:
            self.logger.error("Failed to read from table %s", table)
            raise TelemetryStoreException(str(e)) from e

    def _rows(self, response: Response) -> list:
        try:
            rows = response.json()
        except ValueError as e:
            raise TelemetryStoreException("Telemetry store returned invalid JSON") from e
        if not isinstance(rows, list):
            raise TelemetryStoreException("Telemetry store returned an unexpected body")
        return rows

    def _parse(self, model: Type[TModel], rows: list) -> List[TModel]:
        try:
            return [model.model_validate(row) for row in rows]
        except ValidationError as e:
            raise TelemetryStoreException(
                f"Telemetry store returned an invalid {model.__name__.lower()}"
            ) from e

    def _url(self, table: str) -> str:
        return f"{self.base_url}/{table}"

    def _headers(self, prefer: Optional[str] = None) -> dict:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers
