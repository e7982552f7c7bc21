from datetime import datetime, timezone
from http import HTTPStatus

from fastapi.testclient import TestClient

from sunforge.models.telemetry.telemetry import Device, Reading
from tests.test_double.telemetry_store import TelemetryStoreFake


def add_device(telemetry_store: TelemetryStoreFake, device_id: str) -> None:
    telemetry_store.devices[device_id] = Device(
        device_id=device_id,
        name="Roof array",
        location="Building A",
        status="offline",
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )


class TestIotIngest:
    iot_ingest_path = "/iot-ingest"

    def test_ingest(
        self, client: TestClient, telemetry_store: TelemetryStoreFake, api_key: str
    ):
        add_device(telemetry_store, "esp32-01")

        response = client.post(
            url=self.iot_ingest_path,
            json={"device_id": "esp32-01", "voltage": 18.2, "power": 41.5},
            headers={"x-api-key": api_key},
        )

        assert response.status_code == HTTPStatus.OK
        assert response.json() == {"success": True}
        reading = telemetry_store.readings[0]
        assert reading.voltage == 18.2
        assert reading.power_watts == 41.5
        assert reading.current_estimated == 0
        assert telemetry_store.devices["esp32-01"].status == "online"

    def test_missing_api_key(
        self, client: TestClient, telemetry_store: TelemetryStoreFake
    ):
        response = client.post(
            url=self.iot_ingest_path, json={"device_id": "esp32-01"}
        )

        assert response.status_code == HTTPStatus.UNAUTHORIZED
        assert response.json() == {"error": "Unauthorized"}
        assert telemetry_store.readings == []

    def test_wrong_api_key(self, client: TestClient):
        response = client.post(
            url=self.iot_ingest_path,
            json={"device_id": "esp32-01"},
            headers={"x-api-key": "wrong-key"},
        )

        assert response.status_code == HTTPStatus.UNAUTHORIZED

    def test_missing_device_id(
        self, client: TestClient, telemetry_store: TelemetryStoreFake, api_key: str
    ):
        response = client.post(
            url=self.iot_ingest_path,
            json={"voltage": 12.0},
            headers={"x-api-key": api_key},
        )

        assert response.status_code == HTTPStatus.BAD_REQUEST
        assert response.json() == {"error": "device_id is required"}
        assert telemetry_store.readings == []

    def test_store_failure(
        self, client: TestClient, telemetry_store: TelemetryStoreFake, api_key: str
    ):
        telemetry_store.fail = True

        response = client.post(
            url=self.iot_ingest_path,
            json={"device_id": "esp32-01"},
            headers={"x-api-key": api_key},
        )

        assert response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR


class TestDevices:
    def test_list_devices_with_latest_reading(
        self, client: TestClient, telemetry_store: TelemetryStoreFake
    ):
        add_device(telemetry_store, "esp32-01")
        add_device(telemetry_store, "esp32-02")
        telemetry_store.insert_reading(Reading(device_id="esp32-01", voltage=17.0))
        telemetry_store.insert_reading(Reading(device_id="esp32-01", voltage=18.0))

        response = client.get("/devices")

        assert response.status_code == HTTPStatus.OK
        devices = {device["device_id"]: device for device in response.json()}
        assert devices["esp32-01"]["latest_reading"]["voltage"] == 18.0
        assert devices["esp32-02"]["latest_reading"] is None

    def test_list_readings(
        self, client: TestClient, telemetry_store: TelemetryStoreFake
    ):
        for voltage in [15.0, 16.0, 17.0]:
            telemetry_store.insert_reading(
                Reading(device_id="esp32-01", voltage=voltage)
            )
        telemetry_store.insert_reading(Reading(device_id="esp32-02", voltage=1.0))

        response = client.get("/devices/esp32-01/readings")

        assert response.status_code == HTTPStatus.OK
        assert [reading["voltage"] for reading in response.json()] == [
            17.0,
            16.0,
            15.0,
        ]

    def test_store_failure(
        self, client: TestClient, telemetry_store: TelemetryStoreFake
    ):
        telemetry_store.fail = True

        response = client.get("/devices")

        assert response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
        assert "error" in response.json()
