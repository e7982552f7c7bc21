import logging
from logging import Logger
from typing import Any, Optional

from google import genai
from google.genai import types

from sunforge.config.configuration_error import ConfigurationError
from sunforge.config.settings import get_gemini_api_key, settings
from sunforge.inference.inference_interface import InferenceInterface
from sunforge.models.inspection.inspection_request import InspectionRequest


class GeminiInference(InferenceInterface):
    """Panel inspection through the Google Gemini API.

    The model is asked for JSON output constrained by the inspection schema. The
    client is created on first use so the API can start without a key.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = settings.INFERENCE_MODEL,
        timeout: float = settings.INFERENCE_TIMEOUT,
        temperature: float = settings.INFERENCE_TEMPERATURE,
    ) -> None:
        self.api_key: Optional[str] = api_key
        self.model: str = model
        self.timeout: float = timeout
        self.temperature: float = temperature
        self.logger: Logger = logging.getLogger("inference")
        self._client: Optional[genai.Client] = None

    def infer(self, request: InspectionRequest) -> Optional[Any]:
        client: genai.Client = self._get_client()

        contents = [
            types.Part.from_text(text=request.instruction),
            types.Part.from_bytes(
                data=request.payload.data,
                mime_type=request.payload.media_type.value,
            ),
        ]

        self.logger.info(
            "Requesting inspection from model %s (%d bytes, %s)",
            self.model,
            request.payload.size,
            request.payload.media_type.value,
        )
        response = client.models.generate_content(
            model=self.model,
            contents=contents,
            config=types.GenerateContentConfig(
                temperature=self.temperature,
                response_mime_type="application/json",
                response_json_schema=request.output_schema.model_json_schema(
                    by_alias=True
                ),
            ),
        )

        text: Optional[str] = response.text
        if not text or not text.strip():
            finish_reason = None
            if response.candidates:
                finish_reason = response.candidates[0].finish_reason
            self.logger.warning(
                "Model returned no structured output. Finish reason: %s", finish_reason
            )
            return None

        return text

    def _get_client(self) -> genai.Client:
        if self._client is not None:
            return self._client

        api_key: str = self.api_key or get_gemini_api_key()
        if not api_key:
            message: str = (
                "Missing API key for the Gemini inference provider. "
                "Set the GEMINI_API_KEY environment variable."
            )
            self.logger.critical(message)
            raise ConfigurationError(message)

        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
        )
        self.logger.info("Gemini client initialized with model: %s", self.model)
        return self._client
