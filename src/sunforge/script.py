import json
import logging
import mimetypes
import sys
from logging import Logger
from pathlib import Path
from typing import Any

import click

import sunforge
from sunforge.apis.api import API
from sunforge.config.log import setup_loggers
from sunforge.config.settings import settings
from sunforge.inspection.inspection_service import InspectionService
from sunforge.intake.image_intake import ImageIntake
from sunforge.models.exceptions.inspection_exceptions import InspectionException
from sunforge.models.inspection.image_payload import ImagePayload
from sunforge.models.inspection.inspection_result import InspectionResult
from sunforge.modules import ApplicationContainer, get_injector
from sunforge.rendering.overlay_mapper import OverlayMap, OverlayMapper
from sunforge.services.utilities.progress_ticker import ProgressTicker


def print_startup_info():
    print(
        """
     ____              _____
    / ___| _   _ _ __ |  ___|__  _ __ __ _  ___
    \\___ \\| | | | '_ \\| |_ / _ \\| '__/ _` |/ _ \\
     ___) | |_| | | | |  _| (_) | | | (_| |  __/
    |____/ \\__,_|_| |_|_|  \\___/|_|  \\__, |\\___|
                                     |___/
"""
    )

    WIDTH = 48

    def print_setting(setting: str = "", value: Any = "", fillchar: str = " "):
        separator = ": " if value != "" else ""
        text = setting.ljust(22, fillchar) + separator + str(value)
        print("*", text.ljust(WIDTH - 4, fillchar), "*")

    print("Solar fleet panel inspection".center(WIDTH, " "))
    print()
    print(f"Version: {sunforge.__version__}\n".center(WIDTH, " "))

    print_setting(fillchar="*")
    print_setting("Sun Forge settings")
    print_setting(fillchar="-")
    print_setting("Running on port", settings.API_PORT)
    print_setting("Inference provider", settings.INFERENCE_PROVIDER)
    print_setting("Inference model", settings.INFERENCE_MODEL)
    print_setting("Inference timeout", f"{settings.INFERENCE_TIMEOUT:g}s")
    print_setting("Max image size", f"{settings.INTAKE_MAX_IMAGE_BYTES} bytes")
    print_setting("Max image dimension", f"{settings.INTAKE_MAX_DIMENSION}px")
    print_setting("Telemetry store", settings.TELEMETRY_STORE_URL)
    print_setting(fillchar="*")
    print()


def start() -> None:
    injector: ApplicationContainer = get_injector()

    setup_loggers()
    logger: Logger = logging.getLogger("main")

    print_startup_info()

    api: API = injector.api()
    logger.info("Starting API on port %d", settings.API_PORT)
    api.run_app()


@click.group()
def cli() -> None:
    """Sun Forge solar fleet tooling."""


@cli.command()
def serve() -> None:
    """Run the HTTP API."""
    start()


@cli.command()
@click.argument(
    "image_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--content-type",
    default=None,
    help="Declared media type of the image. Guessed from the file name if omitted.",
)
def inspect(image_path: Path, content_type: str) -> None:
    """Inspect a photo of a solar panel and print the findings as JSON."""
    injector: ApplicationContainer = get_injector()
    setup_loggers()

    image_intake: ImageIntake = injector.image_intake()
    inspection_service: InspectionService = injector.inspection_service()
    overlay_mapper: OverlayMapper = injector.overlay_mapper()

    content_type = content_type or mimetypes.guess_type(image_path.name)[0]

    def report_progress(progress: int) -> None:
        click.echo(f"Analyzing panel... {progress}%", err=True)

    try:
        payload: ImagePayload = image_intake.accept(
            data=image_path.read_bytes(), content_type=content_type
        )
        with ProgressTicker(on_progress=report_progress):
            result: InspectionResult = inspection_service.inspect(payload)
    except InspectionException as e:
        click.echo(f"Error: {e.user_message}", err=True)
        click.echo(e.remediation, err=True)
        sys.exit(1)

    overlay_map: OverlayMap = overlay_mapper.map(result)
    output = {
        "result": result.model_dump(by_alias=True, mode="json"),
        "overlays": [
            {
                "index": overlay.index,
                "issueIndex": overlay.issue_index,
                "issueType": overlay.issue_type.value,
                "left": overlay.left,
                "top": overlay.top,
                "width": overlay.width,
                "height": overlay.height,
            }
            for overlay in overlay_map.overlays
        ],
    }
    click.echo(json.dumps(output, indent=2))
