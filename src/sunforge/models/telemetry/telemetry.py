from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DeviceStatus(str, Enum):
    Online = "online"
    Offline = "offline"
    Warning = "warning"
    Maintenance = "maintenance"


class Reading(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    device_id: str
    voltage: float = 0
    current_estimated: float = 0
    power_watts: float = 0
    efficiency: float = 0
    shunt_voltage: float = 0
    recorded_at: Optional[datetime] = None


class Device(BaseModel):
    model_config = ConfigDict(extra="ignore")

    device_id: str
    name: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None
    last_seen: Optional[datetime] = None
    created_at: Optional[datetime] = None


class DeviceWithReading(Device):
    latest_reading: Optional[Reading] = None


class IngestReading(BaseModel):
    """Body of a reading posted by a field device."""

    device_id: Optional[str] = None
    voltage: Optional[float] = None
    current: Optional[float] = None
    power: Optional[float] = None
    efficiency: Optional[float] = None
    shunt_voltage: Optional[float] = None

    def to_reading(self) -> Reading:
        return Reading(
            device_id=self.device_id,
            voltage=self.voltage or 0,
            current_estimated=self.current or 0,
            power_watts=self.power or 0,
            efficiency=self.efficiency or 0,
            shunt_voltage=self.shunt_voltage or 0,
        )


class IngestResponse(BaseModel):
    success: bool = Field(default=True)
