from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

ORIGINAL_KEY_PREFIX = "assets"
RESIZED_FROM_METADATA = "resized-from"


class ImageFormat(str, Enum):
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    TIFF = "tiff"

    @property
    def pillow_format(self) -> str:
        return pillow_format(self)

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"


def pillow_format(fmt: ImageFormat) -> str:
    """Name Pillow uses for ``fmt`` in ``Image.save(format=...)``."""
    if fmt is ImageFormat.JPEG:
        return "JPEG"
    if fmt is ImageFormat.PNG:
        return "PNG"
    if fmt is ImageFormat.WEBP:
        return "WEBP"
    if fmt is ImageFormat.TIFF:
        return "TIFF"
    raise ValueError(f"No Pillow format for {fmt!r}")


def encode_options(fmt: ImageFormat) -> Dict[str, Any]:
    """Keyword arguments passed to ``Image.save`` for each output format."""
    if fmt is ImageFormat.JPEG:
        return {"quality": 80, "optimize": True}
    if fmt is ImageFormat.PNG:
        return {"compress_level": 6}
    if fmt is ImageFormat.WEBP:
        return {"quality": 80, "method": 4}
    if fmt is ImageFormat.TIFF:
        return {"compression": "tiff_lzw"}
    raise ValueError(f"No encode options for {fmt!r}")


class KeyGrammar(str, Enum):
    PLAIN = "plain"  # resize/<path>/<W>x<H>-<assetId>
    EXTENSION = "extension"  # resize/<path>/<W>x<H>-<assetId>.<ext>


class ResponseMode(str, Enum):
    REDIRECT = "redirect"  # 301 to <URL>/<key>
    SIGNED = "signed"  # 201 with a rewritten presigned URL


class ErrorCategory(str, Enum):
    INVALID_PATH = "InvalidResizePath"
    INVALID_DIMENSIONS = "InvalidDimensions"
    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    NOT_FOUND = "NotFound"
    TRANSFORM_FAILURE = "TransformFailure"
    STORE_FAILURE = "StoreFailure"


class ParsedKey(BaseModel):
    """Components of a request key such as ``resize/a/b/50x60-img123``."""

    model_config = ConfigDict(frozen=True)

    namespace_tag: str
    middle_path: Tuple[str, ...] = ()
    width: PositiveInt
    height: PositiveInt
    asset_id: str = Field(min_length=1)
    extension: Optional[str] = None

    @property
    def dimensions(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def asset_name(self) -> str:
        if self.extension is None:
            return self.asset_id
        return f"{self.asset_id}.{self.extension}"

    @property
    def original_key(self) -> str:
        """Storage key of the un-resized source; independent of the dimensions."""
        return f"{ORIGINAL_KEY_PREFIX}/{'/'.join(self.middle_path)}/{self.asset_name}"


class AssetRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    content_type: str
    body: bytes
    metadata: Mapping[str, str] = Field(default_factory=dict)


class ResizeOutcome(BaseModel):
    """Terminal state of one pipeline run that the caller gets a response for.

    Exactly one of ``location`` (success) or ``category`` (client fault) is set.
    """

    model_config = ConfigDict(frozen=True)

    request_key: str
    location: Optional[str] = None
    category: Optional[ErrorCategory] = None
    message: Optional[str] = None

    @model_validator(mode="after")
    def check_exactly_one_result(self) -> "ResizeOutcome":
        if (self.location is None) == (self.category is None):
            raise ValueError("Exactly one of location or category must be set")
        return self

    @property
    def succeeded(self) -> bool:
        return self.category is None

    @classmethod
    def success(cls, request_key: str, location: str) -> "ResizeOutcome":
        return cls(request_key=request_key, location=location)

    @classmethod
    def failure(
        cls, request_key: str, category: ErrorCategory, message: str
    ) -> "ResizeOutcome":
        return cls(request_key=request_key, category=category, message=message)
