import base64

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from sunforge.apis.security.authentication import Authenticator
from sunforge.intake.image_intake import ImageIntake
from sunforge.modules import ApplicationContainer
from sunforge.rendering.overlay_mapper import OverlayMapper
from tests.test_double.images import noise_image
from tests.test_double.inference import StubInference
from tests.test_double.telemetry_store import TelemetryStoreFake

TEST_API_KEY = "test-device-key"


@pytest.fixture()
def container():
    """Fixture to provide the dependency-injector container with test doubles."""
    container = ApplicationContainer()
    container.inference.override(providers.Singleton(StubInference))
    container.telemetry_store.override(providers.Singleton(TelemetryStoreFake))
    container.authenticator.override(
        providers.Singleton(Authenticator, api_key=TEST_API_KEY)
    )
    return container


@pytest.fixture()
def app(container: ApplicationContainer):
    """Fixture to provide the FastAPI app."""
    app = container.api().get_app()
    return app


@pytest.fixture()
def client(app):
    """Fixture to provide a test client for the FastAPI app."""
    client = TestClient(app)
    return client


@pytest.fixture()
def api_key():
    return TEST_API_KEY


@pytest.fixture()
def inference(container: ApplicationContainer) -> StubInference:
    """Fixture to provide the stubbed inference collaborator used by the app."""
    return container.inference()


@pytest.fixture()
def telemetry_store(container: ApplicationContainer) -> TelemetryStoreFake:
    """Fixture to provide the in-memory telemetry store used by the app."""
    return container.telemetry_store()


@pytest.fixture()
def image_intake():
    return ImageIntake(
        min_bytes=100, max_bytes=10 * 1024 * 1024, max_dimension=2048, jpeg_quality=85
    )


@pytest.fixture()
def overlay_mapper():
    return OverlayMapper()


@pytest.fixture()
def request_handler(container: ApplicationContainer):
    """Fixture to provide the RequestHandler instance."""
    return container.request_handler()


@pytest.fixture()
def panel_png() -> bytes:
    return noise_image(size=(64, 48), image_format="PNG")


@pytest.fixture()
def panel_data_url(panel_png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(panel_png).decode("ascii")
