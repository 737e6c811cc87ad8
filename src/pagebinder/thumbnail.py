"""First-page preview rendering."""

from __future__ import annotations

import logging
import threading
from io import BytesIO

import pypdfium2 as pdfium
from PIL import Image

from .geometry import fit_scale

logger = logging.getLogger(__name__)

DEFAULT_THUMBNAIL_SIZE = (240, 240)

# pdfium keeps global state and must not be entered from two threads at once.
_PDFIUM_LOCK = threading.Lock()


def _target_size(width: float, height: float, scale: float, max_size: tuple[int, int]) -> tuple[int, int]:
    return (
        min(max_size[0], max(1, round(width * scale))),
        min(max_size[1], max(1, round(height * scale))),
    )


def render_thumbnail(
    document: bytes,
    max_size: tuple[int, int] = DEFAULT_THUMBNAIL_SIZE,
) -> bytes | None:
    """Render the first page of *document* as a PNG fitting within *max_size*.

    Returns ``None`` when the document cannot be parsed, has no pages, or
    *max_size* is not positive. Never raises for bad input.
    """
    max_width, max_height = max_size
    if max_width <= 0 or max_height <= 0:
        logger.debug(f"No thumbnail for non-positive size {max_size}")
        return None

    with _PDFIUM_LOCK:
        try:
            pdf = pdfium.PdfDocument(document)
        except (pdfium.PdfiumError, ValueError) as exc:
            logger.debug(f"No thumbnail: document could not be opened ({exc})")
            return None

        try:
            if len(pdf) == 0:
                logger.debug("No thumbnail: document has no pages")
                return None

            page = pdf[0]
            try:
                width, height = page.get_size()
                if width <= 0 or height <= 0:
                    return None
                scale = fit_scale(width, height, max_width, max_height)
                image = page.render(scale=scale).to_pil().copy()
            finally:
                page.close()
        except pdfium.PdfiumError as exc:
            logger.debug(f"No thumbnail: first page could not be rendered ({exc})")
            return None
        finally:
            pdf.close()

    target = _target_size(width, height, scale, max_size)
    if image.size != target:
        image = image.resize(target, Image.Resampling.LANCZOS)

    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
