"""Structural concatenation of existing PDF documents."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from io import BytesIO

from pypdf import PageObject, PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from .errors import MergeProducedEmptyOutputError

logger = logging.getLogger(__name__)

_READ_ERRORS = (
    PyPdfError,
    ValueError,
    KeyError,
    TypeError,
    AttributeError,
    IndexError,
    OSError,
)


@dataclass
class MergeResult:
    """Merged document plus the inputs that were left out."""

    data: bytes
    page_count: int
    skipped: list[int] = field(default_factory=list)


def _read_pages(document: bytes) -> list[PageObject]:
    """Parse *document* completely and return its pages.

    pypdf resolves page objects and streams lazily, so the pages are first
    copied into a scratch writer and serialized. Any damage below the
    cross-reference table surfaces here instead of in the merged output.

    Raises one of ``_READ_ERRORS`` when the bytes are not a readable PDF.
    """
    reader = PdfReader(BytesIO(document), strict=False)
    if reader.is_encrypted and not reader.decrypt(""):
        raise PyPdfError("document is encrypted")

    scratch = PdfWriter()
    for page in reader.pages:
        scratch.add_page(page)
    buffer = BytesIO()
    scratch.write(buffer)
    return list(PdfReader(BytesIO(buffer.getvalue())).pages)


def merge_pdfs_with_report(documents: Sequence[bytes]) -> MergeResult:
    """Merge *documents* and report which inputs were skipped.

    Pages are copied unmodified, each document's pages in their original
    order, documents in the order given. Inputs that cannot be parsed are
    skipped as a whole rather than failing the merge.

    Raises:
        MergeProducedEmptyOutputError: If no pages were collected.
    """
    writer = PdfWriter()
    skipped: list[int] = []

    for index, document in enumerate(documents):
        try:
            pages = _read_pages(document)
        except _READ_ERRORS as exc:
            logger.warning(f"Skipping document {index}: not a readable PDF ({exc})")
            skipped.append(index)
            continue

        if not pages:
            logger.warning(f"Skipping document {index}: no pages")
            skipped.append(index)
            continue

        for page in pages:
            writer.add_page(page)

    page_count = len(writer.pages)
    if page_count == 0:
        raise MergeProducedEmptyOutputError()

    buffer = BytesIO()
    writer.write(buffer)
    logger.debug(
        f"Merged {len(documents) - len(skipped)}/{len(documents)} documents "
        f"into {page_count} page(s)"
    )
    return MergeResult(data=buffer.getvalue(), page_count=page_count, skipped=skipped)


def merge_pdfs(documents: Sequence[bytes]) -> bytes:
    """Concatenate the pages of *documents* into one PDF.

    Raises:
        MergeProducedEmptyOutputError: If no input contributed a page.
    """
    return merge_pdfs_with_report(documents).data


def merge_pdf_pair(first: bytes, second: bytes) -> bytes:
    """Same as ``merge_pdfs([first, second])``."""
    return merge_pdfs([first, second])
