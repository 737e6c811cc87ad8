"""Compose raster images into a single PDF, one scaled and centred image per page."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO

from pypdf import PdfReader, PdfWriter
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .errors import EmptyInputError, ImageDecodeError, InvalidImageError
from .geometry import (
    DEFAULT_GEOMETRY,
    Orientation,
    PageGeometry,
    Rect,
    fit_rect,
    to_pdf_origin,
)
from .images import PreparedImage, RasterImage, coerce_images, prepare_image

logger = logging.getLogger(__name__)

CREATOR = "pagebinder"


@dataclass(frozen=True)
class DocumentMetadata:
    """Values written to the PDF document-information dictionary.

    ``creation_date`` defaults to the time of composition and is the only
    field that differs between otherwise identical runs.
    """

    title: str | None = None
    creation_date: datetime | None = None


def _pdf_date(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.astimezone()
    return value.astimezone(timezone.utc).strftime("D:%Y%m%d%H%M%SZ")


def _info_dictionary(metadata: DocumentMetadata) -> dict[str, str]:
    info = {
        "/Creator": CREATOR,
        "/Producer": CREATOR,
        "/CreationDate": _pdf_date(metadata.creation_date or datetime.now(timezone.utc)),
    }
    if metadata.title:
        info["/Title"] = metadata.title
    return info


def layout_pages(
    sizes: Iterable[tuple[int, int]],
    *,
    geometry: PageGeometry | None = None,
    orientation: Orientation = Orientation.PORTRAIT,
) -> list[Rect]:
    """Return the rectangle each image is drawn in, one per page.

    Rectangles use a top-left origin on a page of the resolved geometry.
    """
    content = (geometry or DEFAULT_GEOMETRY).resolve(orientation).content_rect
    return [fit_rect(width, height, content) for width, height in sizes]


def _prepare_all(images: Sequence[RasterImage]) -> list[PreparedImage]:
    prepared = []
    for index, image in enumerate(images):
        try:
            prepared.append(prepare_image(image))
        except ImageDecodeError as exc:
            raise InvalidImageError(index, image.source_file_name) from exc
    return prepared


def _draw_pages(prepared: Sequence[PreparedImage], geometry: PageGeometry) -> bytes:
    """Render one page per image with reportlab.

    ``invariant`` keeps reportlab's own timestamps and file ID fixed so page
    output depends on the inputs alone.
    """
    page = geometry.page_size
    content = geometry.content_rect
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(page.width, page.height), invariant=1)

    for image in prepared:
        rect = to_pdf_origin(fit_rect(image.width, image.height, content), page.height)
        if rect.width > 0 and rect.height > 0:
            pdf.drawImage(
                ImageReader(BytesIO(image.data)),
                rect.x,
                rect.y,
                width=rect.width,
                height=rect.height,
            )
        pdf.showPage()

    pdf.save()
    return buffer.getvalue()


def compose_pdf(
    images: Sequence[RasterImage | bytes],
    *,
    geometry: PageGeometry | None = None,
    orientation: Orientation = Orientation.PORTRAIT,
    metadata: DocumentMetadata | None = None,
) -> bytes:
    """Lay out *images* as pages of a new PDF document.

    Each image gets its own page of the resolved geometry, uniformly scaled to
    fit the content area (page minus margins) and centred inside it. Pages
    follow the order of *images*.

    Args:
        images: Ordered image byte buffers (PNG, JPEG, TIFF, GIF, BMP...).
        geometry: Page size and margins. Defaults to A4 with 36 pt margins.
        orientation: Landscape swaps the page width and height.
        metadata: Title and creation date for the document information.

    Returns:
        The serialized PDF.

    Raises:
        EmptyInputError: If *images* is empty.
        InvalidImageError: For the first image that cannot be decoded. No
            output is produced in that case.
    """
    raster_images = coerce_images(images)
    if not raster_images:
        raise EmptyInputError()

    prepared = _prepare_all(raster_images)

    resolved = (geometry or DEFAULT_GEOMETRY).resolve(orientation)
    content = resolved.content_rect
    if content.width == 0 or content.height == 0:
        logger.warning(
            f"Margins leave no content area on a {resolved.page_size.width} x "
            f"{resolved.page_size.height} page; pages will be blank"
        )

    drawn = _draw_pages(prepared, resolved)

    # reportlab always writes placeholder title/author entries; replace the
    # whole information dictionary.
    writer = PdfWriter(clone_from=PdfReader(BytesIO(drawn)))
    writer.metadata = _info_dictionary(metadata or DocumentMetadata())

    buffer = BytesIO()
    writer.write(buffer)
    logger.debug(f"Composed {len(prepared)} page(s), {buffer.tell()} bytes")
    return buffer.getvalue()
