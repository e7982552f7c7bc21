from dependency_injector import containers, providers

from sunforge.apis.api import API
from sunforge.apis.devices.device_controller import DeviceController
from sunforge.apis.inspection.inspection_controller import InspectionController
from sunforge.apis.security.authentication import Authenticator
from sunforge.config.configuration_error import ConfigurationError
from sunforge.config.settings import settings
from sunforge.inference.gemini_inference import GeminiInference
from sunforge.intake.image_intake import ImageIntake
from sunforge.inspection.inspection_service import InspectionService
from sunforge.rendering.overlay_mapper import OverlayMapper
from sunforge.services.service_connections.request_handler import RequestHandler
from sunforge.services.service_connections.telemetry_store import RestTelemetryStore

INFERENCE_PROVIDERS = {
    "gemini": GeminiInference,
}


def get_inference_provider(name: str):
    try:
        return INFERENCE_PROVIDERS[name.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown inference provider '{name}'. "
            f"Options: {sorted(INFERENCE_PROVIDERS.keys())}"
        )


class ApplicationContainer(containers.DeclarativeContainer):
    config = providers.Configuration(pydantic_settings=[settings])

    # Inspection pipeline
    image_intake = providers.Singleton(
        ImageIntake,
        min_bytes=config.INTAKE_MIN_IMAGE_BYTES,
        max_bytes=config.INTAKE_MAX_IMAGE_BYTES,
        max_dimension=config.INTAKE_MAX_DIMENSION,
        jpeg_quality=config.INTAKE_JPEG_QUALITY,
    )
    inference = providers.Singleton(get_inference_provider(settings.INFERENCE_PROVIDER))
    inspection_service = providers.Singleton(
        InspectionService,
        inference=inference,
        unknown_error_message_length=config.UNKNOWN_ERROR_MESSAGE_LENGTH,
    )
    overlay_mapper = providers.Singleton(OverlayMapper)

    # Telemetry store
    request_handler = providers.Singleton(RequestHandler)
    telemetry_store = providers.Singleton(
        RestTelemetryStore, request_handler=request_handler
    )

    # API and controllers
    authenticator = providers.Singleton(Authenticator)
    inspection_controller = providers.Singleton(
        InspectionController,
        image_intake=image_intake,
        inspection_service=inspection_service,
        overlay_mapper=overlay_mapper,
    )
    device_controller = providers.Singleton(
        DeviceController, telemetry_store=telemetry_store
    )
    api = providers.Singleton(
        API,
        authenticator=authenticator,
        inspection_controller=inspection_controller,
        device_controller=device_controller,
    )


def get_injector() -> ApplicationContainer:
    container = ApplicationContainer()
    container.init_resources()
    container.wire(modules=[__name__])

    print("Loaded the following module configurations:")
    for provider_name, provider in container.providers.items():
        provider_repr = repr(provider)
        simplified_provider = provider_repr.split(".")[-1].split(">")[0]
        print(f"    {provider_name:<22}: {simplified_provider}")

    return container
