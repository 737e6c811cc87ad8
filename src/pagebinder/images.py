"""Decoding and normalisation of caller-supplied image bytes."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from io import BytesIO

from PIL import ExifTags, Image, ImageOps, UnidentifiedImageError

from .errors import ImageDecodeError

try:
    from pillow_heif import register_heif_opener
except ImportError:  # HEIC/HEIF support is the optional ``heif`` extra
    register_heif_opener = None

if register_heif_opener is not None:
    register_heif_opener()

logger = logging.getLogger(__name__)

# Formats and modes reportlab embeds without conversion (JPEG is copied as
# DCTDecode). Everything else, including colour-keyed PNGs, is re-encoded as
# PNG first.
_PASSTHROUGH_MODES: dict[str, frozenset[str]] = {
    "JPEG": frozenset({"L", "RGB"}),
    "PNG": frozenset({"L", "RGB"}),
}

_DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    ValueError,
    SyntaxError,
)


@dataclass(frozen=True)
class RasterImage:
    """Encoded image bytes plus an optional source file name hint."""

    data: bytes
    source_file_name: str | None = None


@dataclass(frozen=True)
class PreparedImage:
    """A decoded image ready for embedding.

    ``width`` and ``height`` are the displayed pixel dimensions (EXIF
    orientation applied). ``data`` is JPEG or PNG bytes with exactly one
    frame and no pending orientation.
    """

    width: int
    height: int
    data: bytes


def coerce_images(items: Iterable[RasterImage | bytes | bytearray]) -> list[RasterImage]:
    """Accept raw byte buffers alongside :class:`RasterImage` values."""
    images = []
    for item in items:
        if isinstance(item, RasterImage):
            images.append(item)
        elif isinstance(item, (bytes, bytearray, memoryview)):
            images.append(RasterImage(data=bytes(item)))
        else:
            raise TypeError(f"Expected RasterImage or bytes, got {type(item).__name__}")
    return images


def _flatten(img: Image.Image) -> Image.Image:
    """Drop transparency onto white and reduce to an L or RGB image."""
    has_alpha = (
        img.mode in ("RGBA", "LA", "PA", "La", "RGBa") or "transparency" in img.info
    )
    if has_alpha:
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if img.mode in ("L", "RGB"):
        return img
    return img.convert("RGB")


def prepare_image(image: RasterImage) -> PreparedImage:
    """Decode *image* and return bytes reportlab can embed as one page.

    Raises:
        ImageDecodeError: If the bytes are not a decodable raster image.
    """
    try:
        with Image.open(BytesIO(image.data)) as img:
            img.load()
            if img.width <= 0 or img.height <= 0:
                raise ImageDecodeError(f"Image has no pixels: {img.width} x {img.height}")

            orientation = img.getexif().get(ExifTags.Base.Orientation, 1)
            passthrough = (
                orientation == 1
                and img.mode in _PASSTHROUGH_MODES.get(img.format or "", frozenset())
                and not getattr(img, "is_animated", False)
                and "transparency" not in img.info
            )
            if passthrough:
                return PreparedImage(width=img.width, height=img.height, data=image.data)

            logger.debug(
                f"Re-encoding {img.format} image (mode={img.mode}, "
                f"orientation={orientation}) as PNG"
            )
            # Only the first frame of animated or multi-page images is kept.
            frame = _flatten(ImageOps.exif_transpose(img))
            buffer = BytesIO()
            frame.save(buffer, format="PNG")
            return PreparedImage(width=frame.width, height=frame.height, data=buffer.getvalue())
    except _DECODE_ERRORS as exc:
        raise ImageDecodeError(f"Cannot decode image: {exc}") from exc
