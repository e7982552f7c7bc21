import base64
import binascii
import logging
import re
from io import BytesIO
from logging import Logger
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from sunforge.config.settings import settings
from sunforge.models.exceptions.inspection_exceptions import ImageValidationError
from sunforge.models.inspection.image_payload import ImagePayload, MediaType

DATA_URL_PATTERN = re.compile(r"^data:(image/[^;,]+);base64,(.+)$", re.DOTALL)

PIL_FORMAT_MEDIA_TYPES = {
    "JPEG": MediaType.Jpeg,
    "PNG": MediaType.Png,
    "GIF": MediaType.Gif,
    "WEBP": MediaType.Webp,
}

SUPPORTED_FORMATS_HINT = "Please upload a JPG, PNG, GIF or WEBP image."


class ImageIntake:
    """Validates uploaded images and normalizes them for inference.

    Validation only looks at the declared content type and the byte length, so it
    is cheap and happens before anything is decoded. Normalization decodes the
    image and downscales it when the longest edge exceeds ``max_dimension``.
    Images already within bounds are passed through byte for byte.
    """

    def __init__(
        self,
        min_bytes: int = settings.INTAKE_MIN_IMAGE_BYTES,
        max_bytes: int = settings.INTAKE_MAX_IMAGE_BYTES,
        max_dimension: int = settings.INTAKE_MAX_DIMENSION,
        jpeg_quality: int = settings.INTAKE_JPEG_QUALITY,
    ) -> None:
        self.min_bytes: int = min_bytes
        self.max_bytes: int = max_bytes
        self.max_dimension: int = max_dimension
        self.jpeg_quality: int = jpeg_quality
        self.logger: Logger = logging.getLogger("intake")

    def accept(self, data: bytes, content_type: Optional[str]) -> ImagePayload:
        self.validate(data=data, content_type=content_type)
        return self.normalize(data=data)

    def accept_data_url(self, data_url: Optional[str]) -> ImagePayload:
        data, content_type = parse_data_url(data_url)
        return self.accept(data=data, content_type=content_type)

    def validate(self, data: bytes, content_type: Optional[str]) -> None:
        if not content_type or not content_type.lower().startswith("image/"):
            raise ImageValidationError(
                error_description="Please upload an image file (JPG, PNG, etc.)",
                remediation=SUPPORTED_FORMATS_HINT,
            )

        if len(data) < self.min_bytes:
            raise ImageValidationError(
                error_description="The image is empty or corrupted.",
                remediation="Please upload the photo again or pick a different one.",
            )

        if len(data) > self.max_bytes:
            raise ImageValidationError(
                error_description=(
                    f"Image must be smaller than {self._max_megabytes()}MB"
                ),
                remediation="Please resize or compress the photo before uploading.",
            )

    def normalize(self, data: bytes) -> ImagePayload:
        try:
            with Image.open(BytesIO(data)) as image:
                image.load()
                return self._normalize_image(image=image, data=data)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            self.logger.warning("Failed to decode uploaded image: %s", e)
            raise ImageValidationError(
                error_description="The image could not be read, it may be corrupted.",
                remediation=SUPPORTED_FORMATS_HINT,
            ) from e

    def _normalize_image(self, image: Image.Image, data: bytes) -> ImagePayload:
        width, height = image.size
        media_type: Optional[MediaType] = PIL_FORMAT_MEDIA_TYPES.get(image.format)

        if max(width, height) <= self.max_dimension and media_type is not None:
            return ImagePayload(
                data=data, media_type=media_type, width=width, height=height
            )

        # Pixels are not rotated, so the orientation tag must survive re-encoding
        exif: Image.Exif = image.getexif()
        target_size: Tuple[int, int] = self.target_size(width=width, height=height)
        if target_size != (width, height):
            self.logger.info(
                "Downscaling image from %dx%d to %dx%d",
                width,
                height,
                target_size[0],
                target_size[1],
            )
            image = image.resize(target_size, Image.Resampling.LANCZOS)
        else:
            self.logger.info(
                "Re-encoding image in unsupported format '%s' as JPEG", image.format
            )

        save_kwargs: dict = {"exif": exif} if len(exif) else {}
        buffer = BytesIO()
        image.convert("RGB").save(
            buffer,
            format="JPEG",
            quality=self.jpeg_quality,
            optimize=False,
            **save_kwargs,
        )
        return ImagePayload(
            data=buffer.getvalue(),
            media_type=MediaType.Jpeg,
            width=target_size[0],
            height=target_size[1],
        )

    def target_size(self, width: int, height: int) -> Tuple[int, int]:
        long_edge: int = max(width, height)
        if long_edge <= self.max_dimension:
            return width, height

        scale: float = self.max_dimension / long_edge
        if width >= height:
            return self.max_dimension, max(1, round(height * scale))
        return max(1, round(width * scale)), self.max_dimension

    def _max_megabytes(self) -> int:
        return max(1, self.max_bytes // (1024 * 1024))


def parse_data_url(data_url: Optional[str]) -> Tuple[bytes, str]:
    if not data_url or not isinstance(data_url, str):
        raise ImageValidationError(
            error_description="No image provided. Please upload or capture a photo.",
            remediation=SUPPORTED_FORMATS_HINT,
        )

    match = DATA_URL_PATTERN.match(data_url.strip())
    if not match:
        raise ImageValidationError(
            error_description="Invalid image format. Please upload a JPG or PNG image.",
            remediation=SUPPORTED_FORMATS_HINT,
        )

    content_type, encoded = match.groups()
    try:
        data: bytes = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageValidationError(
            error_description="The image data is not valid base64.",
            remediation="Please upload the photo again.",
        ) from e

    return data, content_type
