import os
from importlib.resources import as_file, files
from typing import Any

from dotenv import load_dotenv
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    def __init__(self) -> None:
        try:
            source = files("sunforge").joinpath("config").joinpath("settings.env")
            with as_file(source) as eml:
                env_file = eml
        except ModuleNotFoundError:
            env_file = None
        super().__init__(_env_file=env_file)

    # Name of the platform, used in logs and in the instruction sent to the model
    PLATFORM_NAME: str = Field(default="Sun Forge")

    # FastAPI host
    API_HOST_VIEWED_EXTERNALLY: str = Field(default="0.0.0.0")

    # FastAPI port
    API_PORT: int = Field(default=3000)

    # Timeout in seconds for direct HTTP requests made through the RequestHandler
    REQUEST_TIMEOUT: int = Field(default=30)

    # Image intake
    # Uploads smaller than the minimum are considered empty or corrupted
    INTAKE_MIN_IMAGE_BYTES: int = Field(default=100)
    INTAKE_MAX_IMAGE_BYTES: int = Field(default=10 * 1024 * 1024)

    # Images with a longer edge than this are downscaled before inference
    INTAKE_MAX_DIMENSION: int = Field(default=2048)

    # JPEG quality used when a downscaled image is re-encoded
    INTAKE_JPEG_QUALITY: int = Field(default=85)

    # Determines which inference provider is used for panel inspection
    # Options: [gemini]
    INFERENCE_PROVIDER: str = Field(default="gemini")

    # Name of the multimodal model used by the inference provider
    INFERENCE_MODEL: str = Field(default="gemini-2.5-flash")

    # Deadline in seconds for a single inference call
    INFERENCE_TIMEOUT: float = Field(default=60)

    INFERENCE_TEMPERATURE: float = Field(default=0.2)

    # Unknown inference errors are truncated to this many characters before display
    UNKNOWN_ERROR_MESSAGE_LENGTH: int = Field(default=120)

    # Interval in seconds between progress updates while an inspection is running
    PROGRESS_TICK_INTERVAL: float = Field(default=0.5)

    # Progress never reaches this value before the inspection has finished
    PROGRESS_CAP: int = Field(default=95)

    # Base URL of the REST endpoint of the telemetry store
    TELEMETRY_STORE_URL: str = Field(default="http://localhost:54321/rest/v1")

    # The key should be set as the environment variable "SUNFORGE_TELEMETRY_STORE_KEY"
    TELEMETRY_STORE_KEY: str = Field(default="")

    # Number of readings returned for a single device
    TELEMETRY_READINGS_LIMIT: int = Field(default=50)

    # Key expected in the "x-api-key" header of IoT ingest requests
    IOT_API_KEY: str = Field(default="test1234")

    # Logging

    #   Log handlers
    # Determines which log handlers are used
    LOG_HANDLER_LOCAL_ENABLED: bool = Field(default=True)

    # Use a more verbose log format, including file and line number
    DEBUG_LOG_FORMATTER: bool = Field(default=False)

    #   Log levels
    API_LOG_LEVEL: str = Field(default="INFO")
    MAIN_LOG_LEVEL: str = Field(default="INFO")
    INSPECTION_LOG_LEVEL: str = Field(default="INFO")
    INFERENCE_LOG_LEVEL: str = Field(default="INFO")
    INTAKE_LOG_LEVEL: str = Field(default="INFO")
    TELEMETRY_LOG_LEVEL: str = Field(default="INFO")
    CONSOLE_LOG_LEVEL: str = Field(default="INFO")
    URLLIB3_LOG_LEVEL: str = Field(default="WARNING")
    UVICORN_LOG_LEVEL: str = Field(default="WARNING")
    HTTPX_LOG_LEVEL: str = Field(default="WARNING")

    LOG_LEVELS: dict = Field(default={}, validate_default=True)

    @field_validator("LOG_LEVELS")
    @classmethod
    def set_log_levels(cls, v: Any, info: ValidationInfo) -> dict:
        return {
            "api": info.data["API_LOG_LEVEL"],
            "main": info.data["MAIN_LOG_LEVEL"],
            "inspection": info.data["INSPECTION_LOG_LEVEL"],
            "inference": info.data["INFERENCE_LOG_LEVEL"],
            "intake": info.data["INTAKE_LOG_LEVEL"],
            "telemetry": info.data["TELEMETRY_LOG_LEVEL"],
            "console": info.data["CONSOLE_LOG_LEVEL"],
            "urllib3": info.data["URLLIB3_LOG_LEVEL"],
            "uvicorn": info.data["UVICORN_LOG_LEVEL"],
            "httpx": info.data["HTTPX_LOG_LEVEL"],
        }

    @field_validator("INTAKE_JPEG_QUALITY")
    @classmethod
    def check_jpeg_quality(cls, v: int) -> int:
        if not 1 <= v <= 95:
            raise ValueError("INTAKE_JPEG_QUALITY must be between 1 and 95")
        return v

    model_config = SettingsConfigDict(
        env_prefix="SUNFORGE_",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


load_dotenv()
settings = Settings()

# The Gemini SDK reads this name without a prefix, so it is not a Settings field
GEMINI_API_KEY_ENV: str = "GEMINI_API_KEY"


def get_gemini_api_key() -> str:
    return os.environ.get(GEMINI_API_KEY_ENV, "")
