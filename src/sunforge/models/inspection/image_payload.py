import base64
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MediaType(str, Enum):
    Jpeg = "image/jpeg"
    Png = "image/png"
    Gif = "image/gif"
    Webp = "image/webp"

    @classmethod
    def from_content_type(cls, content_type: str) -> "MediaType":
        normalized: str = content_type.split(";")[0].strip().lower()
        if normalized == "image/jpg":
            normalized = MediaType.Jpeg.value
        return cls(normalized)


class ImagePayload(BaseModel):
    """An encoded image ready to be sent to the inference collaborator."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    media_type: MediaType
    width: int = Field(gt=0)
    height: int = Field(gt=0)

    @property
    def size(self) -> int:
        return len(self.data)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        return f"data:{self.media_type.value};base64,{self.to_base64()}"
