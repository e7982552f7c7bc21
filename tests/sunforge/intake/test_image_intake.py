import base64

import pytest

from sunforge.intake.image_intake import ImageIntake, parse_data_url
from sunforge.models.exceptions.inspection_exceptions import ImageValidationError
from sunforge.models.inspection.image_payload import ImagePayload, MediaType
from tests.test_double.images import (
    exif_orientation,
    image_format,
    image_size,
    noise_image,
    rotated_exif,
    solid_image,
)


class TestValidate:
    @pytest.mark.parametrize(
        "content_type",
        ["application/pdf", "text/plain", "video/mp4", "", None],
    )
    def test_non_image_content_type_is_rejected(
        self, image_intake: ImageIntake, panel_png: bytes, content_type
    ):
        with pytest.raises(ImageValidationError):
            image_intake.validate(data=panel_png, content_type=content_type)

    def test_near_empty_upload_is_rejected(self, image_intake: ImageIntake):
        with pytest.raises(ImageValidationError) as exc_info:
            image_intake.validate(data=b"\x89PNG" + b"\x00" * 46, content_type="image/png")

        assert exc_info.value.status_code == 400
        assert "empty or corrupted" in exc_info.value.user_message

    def test_oversized_upload_is_rejected(self):
        image_intake = ImageIntake(min_bytes=100, max_bytes=1024)

        with pytest.raises(ImageValidationError) as exc_info:
            image_intake.validate(data=b"\x00" * 1025, content_type="image/jpeg")

        assert "smaller than" in exc_info.value.user_message

    def test_upload_at_the_limits_is_accepted(self):
        image_intake = ImageIntake(min_bytes=100, max_bytes=1024)

        image_intake.validate(data=b"\x00" * 100, content_type="image/jpeg")
        image_intake.validate(data=b"\x00" * 1024, content_type="IMAGE/JPEG")


class TestNormalize:
    def test_image_within_bounds_is_passed_through(
        self, image_intake: ImageIntake, panel_png: bytes
    ):
        payload: ImagePayload = image_intake.normalize(panel_png)

        assert payload.data == panel_png
        assert payload.media_type == MediaType.Png
        assert (payload.width, payload.height) == (64, 48)

    def test_large_jpeg_is_downscaled_to_max_dimension(
        self, image_intake: ImageIntake
    ):
        data: bytes = solid_image(size=(4000, 3000), image_format="JPEG")

        payload: ImagePayload = image_intake.normalize(data)

        assert (payload.width, payload.height) == (2048, 1536)
        assert image_size(payload.data) == (2048, 1536)
        assert image_format(payload.data) == "JPEG"
        assert payload.media_type == MediaType.Jpeg

    @pytest.mark.parametrize("size", [(1600, 1200), (4000, 3000)])
    def test_exif_orientation_is_kept(self, image_intake: ImageIntake, size):
        data: bytes = solid_image(size=size, exif=rotated_exif(6))

        payload: ImagePayload = image_intake.normalize(data)

        assert exif_orientation(payload.data) == 6
        assert max(payload.width, payload.height) <= 2048

    def test_portrait_image_is_downscaled_on_the_long_edge(self):
        image_intake = ImageIntake(max_dimension=100)
        data: bytes = noise_image(size=(150, 300), image_format="PNG")

        payload: ImagePayload = image_intake.normalize(data)

        assert (payload.width, payload.height) == (50, 100)
        assert payload.media_type == MediaType.Jpeg

    def test_normalization_is_idempotent(self):
        image_intake = ImageIntake(max_dimension=256)
        data: bytes = noise_image(size=(640, 480), image_format="PNG")

        once: ImagePayload = image_intake.normalize(data)
        twice: ImagePayload = image_intake.normalize(once.data)

        assert twice == once

    def test_unsupported_format_is_reencoded_as_jpeg(
        self, image_intake: ImageIntake
    ):
        data: bytes = noise_image(size=(32, 32), image_format="BMP")

        payload: ImagePayload = image_intake.normalize(data)

        assert payload.media_type == MediaType.Jpeg
        assert image_format(payload.data) == "JPEG"
        assert (payload.width, payload.height) == (32, 32)

    def test_undecodable_bytes_are_rejected(self, image_intake: ImageIntake):
        with pytest.raises(ImageValidationError):
            image_intake.normalize(b"this is not an image" * 20)


class TestAccept:
    def test_accept_validates_before_decoding(
        self, image_intake: ImageIntake, mocker
    ):
        normalize = mocker.patch.object(ImageIntake, "normalize")

        with pytest.raises(ImageValidationError):
            image_intake.accept(data=b"\x00" * 50, content_type="image/png")

        normalize.assert_not_called()

    def test_accept_data_url(self, image_intake: ImageIntake, panel_data_url: str):
        payload: ImagePayload = image_intake.accept_data_url(panel_data_url)

        assert payload.media_type == MediaType.Png
        assert payload.to_data_url() == panel_data_url


class TestParseDataUrl:
    def test_parse_data_url(self):
        data_url = "data:image/jpeg;base64," + base64.b64encode(b"abc").decode()

        data, content_type = parse_data_url(data_url)

        assert data == b"abc"
        assert content_type == "image/jpeg"

    @pytest.mark.parametrize(
        "data_url",
        [
            None,
            "",
            "not a data url",
            "data:text/plain;base64,aGVsbG8=",
            "data:image/png,rawbytes",
            "data:image/png;base64,***",
        ],
    )
    def test_invalid_data_url_is_rejected(self, data_url):
        with pytest.raises(ImageValidationError):
            parse_data_url(data_url)
