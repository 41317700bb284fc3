import io

from aws_lambda_powertools import Logger, Tracer
from PIL import ExifTags, Image, UnidentifiedImageError

from errors import TransformFailure
from models import ImageFormat, encode_options

logger = Logger()
tracer = Tracer()

# Modes each encoder can write without conversion
_NATIVE_MODES = {
    ImageFormat.JPEG: {"RGB", "L", "CMYK"},
    ImageFormat.PNG: {"RGB", "RGBA", "L", "LA", "P", "1", "I", "I;16"},
    ImageFormat.WEBP: {"RGB", "RGBA"},
    ImageFormat.TIFF: {"RGB", "RGBA", "L", "LA", "P", "1", "CMYK", "I", "F"},
}


def get_image_rotation(image: Image.Image) -> int:
    """Read EXIF orientation tag and return the rotation angle."""
    try:
        orientation = image.getexif().get(ExifTags.Base.Orientation, 1)
        return {1: 0, 3: 180, 6: 270, 8: 90}.get(orientation, 0)
    except Exception as e:
        logger.warning(f"Error reading EXIF orientation: {e}")
        return 0


def cover(img: Image.Image, w: int, h: int) -> Image.Image:
    """Scale ``img`` to fill ``w``×``h`` and crop the overflow around the centre."""
    tgt_ratio, img_ratio = w / h, img.width / img.height
    if img_ratio > tgt_ratio:
        new_w = max(w, round(h * img_ratio))
        img = img.resize((new_w, h), Image.Resampling.LANCZOS)
        left = (new_w - w) // 2
        return img.crop((left, 0, left + w, h))

    new_h = max(h, round(w / img_ratio))
    img = img.resize((w, new_h), Image.Resampling.LANCZOS)
    top = (new_h - h) // 2
    return img.crop((0, top, w, top + h))


class PillowTransformer:
    """Resize and re-encode image bytes with Pillow."""

    @tracer.capture_method
    def resize(self, body: bytes, width: int, height: int, fmt: ImageFormat) -> bytes:
        try:
            with Image.open(io.BytesIO(body)) as img:
                img.load()
                rot = get_image_rotation(img)
                if rot:
                    img = img.rotate(rot, expand=True)

                out = cover(img, width, height)
                if out.mode not in _NATIVE_MODES[fmt]:
                    out = out.convert("RGBA" if _keeps_alpha(out, fmt) else "RGB")

                buf = io.BytesIO()
                out.save(buf, format=fmt.pillow_format, **encode_options(fmt))
        except (UnidentifiedImageError, OSError, ValueError) as err:
            raise TransformFailure(
                f"Could not resize image to {width}x{height} {fmt.value}: {err}"
            ) from err

        data = buf.getvalue()
        logger.info(
            "Resized image",
            extra={
                "width": width,
                "height": height,
                "format": fmt.value,
                "size": len(data),
            },
        )
        return data


def _keeps_alpha(img: Image.Image, fmt: ImageFormat) -> bool:
    has_alpha = img.mode in ("RGBA", "LA", "PA") or (
        img.mode == "P" and "transparency" in img.info
    )
    return has_alpha and "RGBA" in _NATIVE_MODES[fmt]
